# ABOUTME: Authentication tests
# ABOUTME: Verifies x-api-key authentication, format screening, and uniform invalid-key responses

from docgateway.models.database import APIKey, Subscription
from tests.conftest import TestingSessionLocal, create_tenant


def test_missing_api_key_returns_401_with_guidance(client):
    """Requests without x-api-key should return 401 telling the caller where the key goes."""
    response = client.get("/documents")
    assert response.status_code == 401
    data = response.json()
    assert data["error"] == "Missing API key"
    assert "x-api-key" in data["message"]


def test_empty_api_key_returns_401(client):
    response = client.get("/documents", headers={"x-api-key": ""})
    assert response.status_code == 401


def test_invalid_api_key_returns_401(client):
    response = client.get("/documents", headers={"x-api-key": "invalid_key_12345"})
    assert response.status_code == 401
    assert response.json() == {"code": "INVALID_API_KEY", "error": "Invalid API key"}


def test_inactive_key_is_indistinguishable_from_unknown_key(client, db_session):
    """Inactive and never-issued keys must produce identical responses."""
    create_tenant(db_session, key="revoked_key_123", is_active=False)

    inactive = client.get("/documents", headers={"x-api-key": "revoked_key_123"})
    unknown = client.get("/documents", headers={"x-api-key": "never_existed_456"})

    assert inactive.status_code == unknown.status_code == 401
    assert inactive.json() == unknown.json()


def test_hostile_api_key_format_returns_400(client):
    for key in ["abc' OR 1=1", 'abc"', "abc;drop", "abc--", "k" * 257]:
        response = client.get("/documents", headers={"x-api-key": key})
        assert response.status_code == 400, key
        assert response.json()["error"] == "Invalid API key format"


def test_api_key_is_never_echoed(client):
    key = "secret_probe_key_987"
    response = client.get("/documents", headers={"x-api-key": key})
    assert key not in response.text


def test_valid_api_key_allows_access_and_records_usage(client, db_session):
    """Valid key should pass and update last_used_at, calls_count, and api_calls_used."""
    tenant = create_tenant(db_session, key="valid_test_key_123", used=10, limit=100)

    response = client.get("/documents", headers={"x-api-key": "valid_test_key_123"})
    assert response.status_code == 200

    db = TestingSessionLocal()
    try:
        api_key = db.get(APIKey, tenant["api_key_id"])
        assert api_key.last_used_at is not None
        assert api_key.calls_count == 1

        subscription = db.query(Subscription).filter_by(organization_id=tenant["organization_id"]).first()
        assert subscription.api_calls_used == 11
    finally:
        db.close()
