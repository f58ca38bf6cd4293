# ABOUTME: API key hashing, generation, and resolution service
# ABOUTME: Resolves a presented key to its organization and subscription in one query

import hashlib
import secrets
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from docgateway.models.database import APIKey, Organization, Subscription

KEY_PREFIX = "dk_"
DISPLAY_PREFIX_LENGTH = 8


@dataclass
class ResolvedKey:
    """Identity resolved from an API key: tenant, its subscription, and the key row."""
    organization_id: str
    subscription: Subscription
    api_key: APIKey


def hash_api_key(raw_key: str) -> str:
    """Lowercase hex SHA-256 digest of the raw key."""
    return hashlib.sha256(raw_key.encode()).hexdigest()


def generate_api_key() -> tuple[str, str, str]:
    """
    Generate a new API key.

    Returns:
        (plaintext_key, key_hash, key_prefix). The plaintext is shown once
        and never stored.
    """
    plaintext_key = f"{KEY_PREFIX}{secrets.token_hex(32)}"
    return plaintext_key, hash_api_key(plaintext_key), plaintext_key[:DISPLAY_PREFIX_LENGTH]


def resolve_api_key(db: Session, raw_key: str) -> Optional[ResolvedKey]:
    """
    Look up an active key by hash, joined to its organization and subscription.

    Returns None when the key is unknown, inactive, or its organization has
    no subscription; callers must not distinguish these cases.
    """
    key_hash = hash_api_key(raw_key)

    row = (
        db.query(APIKey, Subscription)
        .join(Organization, Organization.id == APIKey.organization_id)
        .join(Subscription, Subscription.organization_id == Organization.id)
        .filter(APIKey.key_hash == key_hash, APIKey.is_active.is_(True))
        .first()
    )

    if row is None:
        return None

    api_key, subscription = row
    return ResolvedKey(
        organization_id=api_key.organization_id,
        subscription=subscription,
        api_key=api_key,
    )
