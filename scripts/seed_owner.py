#!/usr/bin/env python3
"""
Create the studio owner account if it does not exist yet.

Environment:
    ADMIN_EMAIL     Owner email (default owner@example.com)
    ADMIN_PASSWORD  Owner password (required, at least 12 characters)
    ADMIN_NAME      Display name (default "Studio Owner")
    DATABASE_PATH   SQLite file (default data/fourpaws.db)

Usage:
    ADMIN_PASSWORD=... python scripts/seed_owner.py
"""
import logging
import os
import sys
from pathlib import Path

# Add project root for package imports when run as a script
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from app.config import DEFAULT_DATABASE_PATH  # noqa: E402
from auth.service import AuthService  # noqa: E402
from auth.session import SessionCodec  # noqa: E402
from persistence.db import Database  # noqa: E402

logger = logging.getLogger("seed_owner")

DEFAULT_ADMIN_EMAIL = "owner@example.com"
DEFAULT_ADMIN_NAME = "Studio Owner"

# The seed never issues cookies, so the codec only needs a well-formed key.
_UNUSED_SECRET = "seed-owner-script-does-not-sign-cookies"


def seed_owner(db: Database, email: str, password: str, display_name: str):
    """
    Ensure the owner account exists and return it.

    Raises:
        ValueError: If the email or password could never be used to log in
    """
    db.init_schema()
    service = AuthService(db=db, codec=SessionCodec(secret=_UNUSED_SECRET))
    return service.ensure_owner_exists(email, password, display_name=display_name)


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    password = os.environ.get("ADMIN_PASSWORD")
    if not password:
        logger.error("ADMIN_PASSWORD is required")
        return 1

    email = os.environ.get("ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL)
    display_name = os.environ.get("ADMIN_NAME", DEFAULT_ADMIN_NAME)

    db = Database(os.environ.get("DATABASE_PATH", DEFAULT_DATABASE_PATH))
    try:
        user = seed_owner(db, email, password, display_name)
        logger.info(f"Owner account ready: {user.email} ({user.id})")
        return 0
    except Exception:
        logger.exception("Failed to seed owner account")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
