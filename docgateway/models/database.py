# ABOUTME: SQLAlchemy database models
# ABOUTME: Defines tables for organizations, subscriptions, api_keys, documents, and document_analyses

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Float, ForeignKey, JSON
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import relationship

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Organization(Base):
    """Tenant boundary. Owns API keys, documents, and exactly one subscription."""
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    subscription = relationship("Subscription", back_populates="organization", uselist=False)
    api_keys = relationship("APIKey", back_populates="organization")
    documents = relationship("Document", back_populates="organization")


class Subscription(Base):
    """Plan tier and monthly quotas for an organization."""
    __tablename__ = "subscriptions"

    id = Column(String(36), primary_key=True, default=_new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), unique=True, nullable=False, index=True)
    plan = Column(String(20), nullable=False, default="free")  # free | pro
    documents_limit = Column(Integer, nullable=False, default=10)
    documents_used = Column(Integer, nullable=False, default=0)
    api_calls_limit = Column(Integer, nullable=False, default=0)
    api_calls_used = Column(Integer, nullable=False, default=0)
    current_period_start = Column(DateTime)
    current_period_end = Column(DateTime)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    organization = relationship("Organization", back_populates="subscription")


class APIKey(Base):
    """Organization API key. Only the SHA-256 hash of the secret is stored."""
    __tablename__ = "api_keys"

    id = Column(String(36), primary_key=True, default=_new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    key_hash = Column(Text, unique=True, nullable=False, index=True)
    key_prefix = Column(String(20), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    calls_count = Column(Integer, nullable=False, default=0)
    last_used_at = Column(DateTime)
    created_by = Column(String(36))
    created_at = Column(DateTime, default=_utcnow)

    organization = relationship("Organization", back_populates="api_keys")


class Document(Base):
    """Tenant-scoped file metadata."""
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=_new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    file_type = Column(String(100), nullable=False)
    file_size = Column(Integer, nullable=False)
    storage_path = Column(Text, nullable=False)
    uploaded_by = Column(String(36))
    created_at = Column(DateTime, default=_utcnow, index=True)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    organization = relationship("Organization", back_populates="documents")
    analyses = relationship("DocumentAnalysis", back_populates="document")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "name": self.name,
            "file_type": self.file_type,
            "file_size": self.file_size,
            "storage_path": self.storage_path,
            "uploaded_by": self.uploaded_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class DocumentAnalysis(Base):
    """Immutable, versioned snapshot of an AI analysis run over a document."""
    __tablename__ = "document_analyses"

    id = Column(String(36), primary_key=True, default=_new_id)
    document_id = Column(String(36), ForeignKey("documents.id"), nullable=False, index=True)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    summary = Column(Text)
    keywords = Column(JSON)
    sentiment = Column(String(20))  # positive | negative | neutral
    sentiment_score = Column(Float)
    key_topics = Column(JSON)
    word_count = Column(Integer)
    reading_time_minutes = Column(Integer)
    version = Column(Integer, nullable=False, default=1)
    analyzed_at = Column(DateTime, default=_utcnow)
    created_at = Column(DateTime, default=_utcnow)

    document = relationship("Document", back_populates="analyses")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "document_id": self.document_id,
            "organization_id": self.organization_id,
            "summary": self.summary,
            "keywords": self.keywords or [],
            "sentiment": self.sentiment,
            "sentiment_score": self.sentiment_score,
            "key_topics": self.key_topics or [],
            "word_count": self.word_count,
            "reading_time_minutes": self.reading_time_minutes,
            "version": self.version,
            "analyzed_at": self.analyzed_at.isoformat() if self.analyzed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
