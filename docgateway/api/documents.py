# ABOUTME: Document endpoints
# ABOUTME: Lists the tenant's documents and returns one document with all analysis versions

import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from docgateway.config import get_settings
from docgateway.dependencies import valid_document_id, require_api_access, get_db
from docgateway.models.database import Document, DocumentAnalysis
from docgateway.models.errors import AUTH_REQUIRED, QUOTA_ERRORS, INVALID_REQUEST, NOT_FOUND
from docgateway.services.api_keys import ResolvedKey

logger = logging.getLogger(__name__)

router = APIRouter(tags=["documents"])


@router.get("/documents", responses={
    200: {"description": "Newest documents first", "content": {"application/json": {"example": {
        "documents": [{
            "id": "3f1c2a4e-8b7d-4c1e-9a2b-1d2e3f4a5b6c",
            "name": "contract.pdf",
            "file_type": "application/pdf",
            "created_at": "2026-01-15T10:30:00",
        }]
    }}}},
    **AUTH_REQUIRED,
    **QUOTA_ERRORS,
})
async def list_documents(
    access: ResolvedKey = Depends(require_api_access),
    db: Session = Depends(get_db)
):
    """Returns up to 100 of the organization's documents, newest first."""
    try:
        rows = (
            db.query(Document.id, Document.name, Document.file_type, Document.created_at)
            .filter(Document.organization_id == access.organization_id)
            .order_by(Document.created_at.desc())
            .limit(get_settings().documents_list_limit)
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Failed to fetch documents", extra={"organization_id": access.organization_id})
        raise HTTPException(
            status_code=500,
            detail={"code": "INTERNAL_ERROR", "error": "Failed to fetch documents"}
        )

    documents = [
        {
            "id": row.id,
            "name": row.name,
            "file_type": row.file_type,
            "created_at": row.created_at.isoformat() if row.created_at else None,
        }
        for row in rows
    ]

    return {"documents": documents}


@router.get("/documents/{doc_id}", responses={
    200: {"description": "Document with analyses, newest version first"},
    **INVALID_REQUEST,
    **AUTH_REQUIRED,
    **QUOTA_ERRORS,
    **NOT_FOUND,
})
async def get_document(
    doc_id: str = Depends(valid_document_id),
    access: ResolvedKey = Depends(require_api_access),
    db: Session = Depends(get_db)
):
    """Returns one document and all of its analysis versions if it belongs to the caller's organization."""
    document = (
        db.query(Document)
        .filter(Document.id == doc_id, Document.organization_id == access.organization_id)
        .first()
    )

    # Another tenant's document is reported exactly like a missing one
    if not document:
        raise HTTPException(
            status_code=404,
            detail={"code": "NOT_FOUND", "error": "Document not found"}
        )

    analyses = (
        db.query(DocumentAnalysis)
        .filter(
            DocumentAnalysis.document_id == document.id,
            DocumentAnalysis.organization_id == access.organization_id,
        )
        .order_by(DocumentAnalysis.version.desc())
        .all()
    )

    return {
        "document": document.to_dict(),
        "analyses": [analysis.to_dict() for analysis in analyses],
    }
