# ABOUTME: CLI for operators to manage organizations, subscriptions, and API keys
# ABOUTME: Creates tables, provisions tenants, issues and revokes keys, and resets billing-period usage

import argparse
import sys
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from docgateway.config import get_settings
from docgateway.models.database import Base, Organization, Subscription, APIKey
from docgateway.services.api_keys import generate_api_key

BILLING_PERIOD_DAYS = 30
PLANS = ("free", "pro")


def _session_factory():
    settings = get_settings()
    engine = create_engine(settings.database_url)
    return engine, sessionmaker(bind=engine)


def init_database() -> None:
    """Create all tables in the configured database."""
    engine, _ = _session_factory()
    try:
        Base.metadata.create_all(bind=engine)
        print("Database tables created")
    finally:
        engine.dispose()


def create_org(name: str, plan: str = "free", api_calls_limit: int = 1000, documents_limit: int = 100) -> str:
    """
    Create an organization with its subscription.

    Args:
        name: Organization display name
        plan: free or pro
        api_calls_limit: Monthly API call budget
        documents_limit: Monthly document budget

    Returns:
        The new organization id
    """
    engine, Session = _session_factory()
    session = Session()
    try:
        now = datetime.now(timezone.utc)
        org = Organization(name=name)
        session.add(org)
        session.flush()

        session.add(Subscription(
            organization_id=org.id,
            plan=plan,
            api_calls_limit=api_calls_limit,
            documents_limit=documents_limit,
            current_period_start=now,
            current_period_end=now + timedelta(days=BILLING_PERIOD_DAYS),
        ))
        session.commit()

        print(f"Created organization {org.id} ({name}) on {plan} plan")
        return org.id
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
        engine.dispose()


def create_key(organization_id: str, name: str, created_by: Optional[str] = None) -> str:
    """
    Issue a new API key for an organization.

    Only the hash and display prefix are stored. The plaintext key is
    printed and returned once.
    """
    engine, Session = _session_factory()
    session = Session()
    try:
        if session.get(Organization, organization_id) is None:
            print(f"Error: Organization not found: {organization_id}")
            sys.exit(1)

        plaintext_key, key_hash, key_prefix = generate_api_key()
        api_key = APIKey(
            organization_id=organization_id,
            name=name,
            key_hash=key_hash,
            key_prefix=key_prefix,
            created_by=created_by,
        )
        session.add(api_key)
        session.commit()

        print(f"Created API key {api_key.id} ({key_prefix}...)")
        print(f"API key (shown once): {plaintext_key}")
        return plaintext_key
    finally:
        session.close()
        engine.dispose()


def revoke_key(key_id: str) -> None:
    """Deactivate an API key. The row is kept for usage history."""
    engine, Session = _session_factory()
    session = Session()
    try:
        api_key = session.get(APIKey, key_id)
        if api_key is None:
            print(f"Error: API key not found: {key_id}")
            sys.exit(1)

        api_key.is_active = False
        session.commit()
        print(f"Revoked API key {key_id} ({api_key.key_prefix}...)")
    finally:
        session.close()
        engine.dispose()


def list_keys(organization_id: str) -> None:
    """Print the organization's API keys, newest first."""
    engine, Session = _session_factory()
    session = Session()
    try:
        keys = (
            session.query(APIKey)
            .filter(APIKey.organization_id == organization_id)
            .order_by(APIKey.created_at.desc())
            .all()
        )

        if not keys:
            print("No API keys found.")
            return

        for key in keys:
            status = "active" if key.is_active else "revoked"
            last_used = key.last_used_at.isoformat() if key.last_used_at else "never"
            print(f"{key.id}  {key.name}  {key.key_prefix}...  {status}  calls={key.calls_count}  last_used={last_used}")
    finally:
        session.close()
        engine.dispose()


def reset_usage(organization_id: str) -> None:
    """Start a new billing period: zero the usage counters and stamp the period window."""
    engine, Session = _session_factory()
    session = Session()
    try:
        subscription = session.query(Subscription).filter_by(organization_id=organization_id).first()
        if subscription is None:
            print(f"Error: No subscription for organization: {organization_id}")
            sys.exit(1)

        now = datetime.now(timezone.utc)
        subscription.api_calls_used = 0
        subscription.documents_used = 0
        subscription.current_period_start = now
        subscription.current_period_end = now + timedelta(days=BILLING_PERIOD_DAYS)
        session.commit()
        print(f"Reset usage for organization {organization_id}")
    finally:
        session.close()
        engine.dispose()


def main(argv: Optional[list[str]] = None):
    """CLI entry point for key management commands."""
    parser = argparse.ArgumentParser(description="Manage document intelligence API tenants and keys")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create database tables")

    org_parser = subparsers.add_parser("create-org", help="Create an organization and its subscription")
    org_parser.add_argument("name", help="Organization name")
    org_parser.add_argument("--plan", choices=PLANS, default="free", help="Subscription plan")
    org_parser.add_argument("--api-calls-limit", type=int, default=1000, help="Monthly API call budget")
    org_parser.add_argument("--documents-limit", type=int, default=100, help="Monthly document budget")

    key_parser = subparsers.add_parser("create-key", help="Issue a new API key")
    key_parser.add_argument("organization_id", help="Owning organization id")
    key_parser.add_argument("name", help="Key display name")

    revoke_parser = subparsers.add_parser("revoke-key", help="Deactivate an API key")
    revoke_parser.add_argument("key_id", help="API key id")

    list_parser = subparsers.add_parser("list-keys", help="List an organization's API keys")
    list_parser.add_argument("organization_id", help="Organization id")

    reset_parser = subparsers.add_parser("reset-usage", help="Start a new billing period")
    reset_parser.add_argument("organization_id", help="Organization id")

    args = parser.parse_args(argv)

    if args.command == "init-db":
        init_database()
    elif args.command == "create-org":
        create_org(args.name, plan=args.plan, api_calls_limit=args.api_calls_limit,
                   documents_limit=args.documents_limit)
    elif args.command == "create-key":
        create_key(args.organization_id, args.name)
    elif args.command == "revoke-key":
        revoke_key(args.key_id)
    elif args.command == "list-keys":
        list_keys(args.organization_id)
    elif args.command == "reset-usage":
        reset_usage(args.organization_id)


if __name__ == "__main__":
    main()
