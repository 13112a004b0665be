#!/usr/bin/env python3
"""One-shot role change for an existing user (admin promotion)."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import get_args

from dotenv import load_dotenv

from app.auth.models import UserRole
from app.auth.repository import AuthRepository
from app.core.config import AppConfig
from app.core.mongo_migrations import create_mongo_client


def _parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Set the role of an existing user account."
    )
    parser.add_argument("email", help="Email of the account to change.")
    parser.add_argument(
        "--role",
        choices=get_args(UserRole),
        default="admin",
        help="Role to assign (default: admin).",
    )
    return parser.parse_args()


async def _set_role(email: str, role: str) -> bool:
    config = AppConfig.from_env()
    client = create_mongo_client(config.mongo)
    try:
        repo = AuthRepository(client[config.mongo.database])
        return await repo.set_user_role(email, role)
    finally:
        await client.close()


def main() -> int:
    """Execute role change flow."""
    load_dotenv()
    args = _parse_args()
    try:
        matched = asyncio.run(_set_role(args.email, args.role))
    except Exception as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if not matched:
        print(f"No user with email {args.email}", file=sys.stderr)
        return 1
    print(f"Role of {args.email.strip().lower()} set to {args.role}")
    print("The user must log in again for the new role to reach their tokens.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
