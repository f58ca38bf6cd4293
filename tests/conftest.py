# ABOUTME: Pytest fixtures and configuration
# ABOUTME: Provides test database, client, tenant factory, and a mock AI upstream

import hashlib
import json

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from docgateway.config import Settings
from docgateway.main import app
from docgateway.models.database import Base, Organization, Subscription, APIKey
from docgateway.database import get_db
from docgateway.services.analysis import DocumentAnalyzer, get_analyzer


# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

AI_TEST_URL = "https://ai.test/v1/chat/completions"


def override_get_db():
    """Override database dependency for tests."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def chat_completion(content) -> dict:
    """Body of a chat completions response carrying one assistant message."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class FakeAIUpstream:
    """
    Stand-in for the AI chat completions endpoint.

    Records every request it receives. Set `status_code` and `reply` (or
    `body` for a raw response body, or `error` for a transport exception)
    before exercising the client.
    """

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.reply = json.dumps({
            "summary": "Revenue grew over the quarter.",
            "keywords": ["revenue", "growth"],
            "sentiment": "positive",
            "sentimentScore": 0.8,
            "keyTopics": ["finance"],
        })
        self.body = None
        self.error = None

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def last_request_json(self) -> dict:
        return json.loads(self.requests[-1].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.body is not None:
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, json=chat_completion(self.reply))

    def analyzer(self, **settings_overrides) -> DocumentAnalyzer:
        settings = Settings(ai_api_key="test-ai-key", ai_gateway_url=AI_TEST_URL, **settings_overrides)
        return DocumentAnalyzer(settings, transport=httpx.MockTransport(self.handler))


@pytest.fixture(scope="function", autouse=True)
def setup_database():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provides a database session for tests."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def ai_upstream():
    """Provides the mock AI endpoint used by the client fixture."""
    return FakeAIUpstream()


@pytest.fixture
def client(setup_database, ai_upstream):
    """Provides a FastAPI test client with test database and mock AI upstream."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_analyzer] = lambda: ai_upstream.analyzer()
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def create_tenant(db_session, key="test_key_12345", plan="pro", used=0, limit=1000,
                  is_active=True, name="Test Org"):
    """Helper to create an organization, its subscription, and one API key."""
    org = Organization(name=name)
    db_session.add(org)
    db_session.flush()

    subscription = Subscription(
        organization_id=org.id,
        plan=plan,
        api_calls_used=used,
        api_calls_limit=limit,
    )
    api_key = APIKey(
        organization_id=org.id,
        name="Test key",
        key_hash=hashlib.sha256(key.encode()).hexdigest(),
        key_prefix=key[:8],
        is_active=is_active,
    )
    db_session.add_all([subscription, api_key])
    db_session.commit()

    return {"organization_id": org.id, "api_key_id": api_key.id, "key": key}


@pytest.fixture
def tenant(db_session):
    """A Pro-plan tenant with plenty of API call budget."""
    return create_tenant(db_session, key="pro_tenant_key_123")


@pytest.fixture
def auth_headers(tenant):
    return {"x-api-key": tenant["key"]}
