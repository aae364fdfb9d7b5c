"""
Create an admin account directly in the database.

Used to bootstrap the first superadmin; later accounts can be managed through
the /users API. Existing accounts with the same email or username are left
untouched.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import Optional

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rptra.auth import hash_password
from rptra.db import ADMINS, DbClient, InMemoryDbClient
from rptra.dependencies import close_clients, get_db_client
from rptra.routes.common import utcnow
from rptra.schemas import AdminRole


logger = logging.getLogger(__name__)


def create_admin(
    db: DbClient, username: str, email: str, password: str, role: AdminRole
) -> Optional[dict]:
    """Insert the account and return it, or None when it already exists."""
    existing = db.find_one(ADMINS, {"$or": [{"email": email}, {"username": username}]})
    if existing is not None:
        logger.warning("Admin %s or %s already exists, skipping", email, username)
        return None
    admin = db.insert(
        ADMINS,
        {
            "username": username,
            "email": email,
            "password": hash_password(password),
            "role": AdminRole(role).value,
            "lastLogin": None,
            "createdAt": utcnow(),
        },
    )
    logger.info("Created %s %s (%s)", admin["role"], username, admin["_id"])
    return admin


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an RPTRA admin account")
    parser.add_argument("username", help="Login name shown in the admin area")
    parser.add_argument("email", help="Email used to log in")
    parser.add_argument(
        "--password",
        default=None,
        help="Account password (prompted for when omitted)",
    )
    parser.add_argument(
        "--role",
        choices=[role.value for role in AdminRole],
        default=AdminRole.SUPERADMIN.value,
        help="Account role",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    password = args.password or getpass.getpass("Password: ")
    if not password:
        logger.error("A password is required")
        return 1

    db = get_db_client()
    if isinstance(db, InMemoryDbClient):
        logger.error("MONGODB_URI is not set; refusing to write to the in-memory store")
        return 1
    try:
        created = create_admin(db, args.username, args.email, password, args.role)
    finally:
        close_clients()
    return 0 if created is not None else 1


if __name__ == "__main__":
    sys.exit(main())
