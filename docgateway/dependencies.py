# ABOUTME: FastAPI dependency injection utilities
# ABOUTME: Request validation, API key authentication, quota gating, and usage charging

import json
from fastapi import Header, HTTPException, Depends, Request
from sqlalchemy.orm import Session
from typing import Annotated

from docgateway.database import get_db
from docgateway.services.api_keys import ResolvedKey, resolve_api_key
from docgateway.services.quota import enforce_quota
from docgateway.services.usage import record_usage
from docgateway.utils.validators import (
    AnalyzePayload,
    is_valid_api_key_format,
    is_valid_uuid,
    validate_analyze_payload,
)


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=400, detail={"code": "INVALID_REQUEST", "error": message})


async def validated_analyze_payload(request: Request) -> AnalyzePayload:
    """Parse and sanitize the POST /analyze JSON body. Raises 400 on any violation."""
    raw_body = await request.body()
    try:
        body = json.loads(raw_body)
    except ValueError:
        raise _bad_request("Invalid JSON body")

    result = validate_analyze_payload(body)
    if not result.ok:
        raise _bad_request(result.error)
    return result.payload


def valid_document_id(doc_id: str) -> str:
    """Reject path identifiers that are not canonical UUIDs. Returns the lowercased id."""
    if not is_valid_uuid(doc_id):
        raise _bad_request("Invalid document ID format")
    return doc_id.lower()


async def verify_api_key(
    request: Request,
    x_api_key: Annotated[str | None, Header()] = None,
    db: Session = Depends(get_db)
) -> ResolvedKey:
    """
    Verify the API key from the x-api-key header.

    Returns the resolved organization, subscription and key row.
    Raises HTTPException with 401 if missing, unknown, or inactive, and 400
    if the value fails the format screen.
    """
    if not x_api_key:
        raise HTTPException(
            status_code=401,
            detail={
                "code": "INVALID_API_KEY",
                "error": "Missing API key",
                "message": "Include your API key in the x-api-key header",
            }
        )

    if not is_valid_api_key_format(x_api_key):
        raise HTTPException(
            status_code=400,
            detail={"code": "INVALID_REQUEST", "error": "Invalid API key format"}
        )

    resolved = resolve_api_key(db, x_api_key)

    # Unknown and inactive keys get the same response
    if resolved is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "INVALID_API_KEY", "error": "Invalid API key"}
        )

    request.state.organization_id = resolved.organization_id
    return resolved


async def require_api_access(
    resolved: ResolvedKey = Depends(verify_api_key),
    db: Session = Depends(get_db)
) -> ResolvedKey:
    """
    Admit an authenticated request: plan gate, call budget, then usage charge.

    Usage is charged before the handler runs, so a request whose upstream
    work later fails or whose client disconnects is still counted.
    """
    enforce_quota(resolved.subscription)
    record_usage(db, resolved.api_key.id, resolved.organization_id)
    return resolved
