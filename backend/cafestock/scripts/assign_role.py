"""
Assign a role to a user by email.

Bootstraps the first admin, who can then manage roles through the API.

Usage:
    python -m cafestock.scripts.assign_role admin@example.com --role admin
"""

import argparse
import asyncio
import logging
import sys

from sqlalchemy import select

from cafestock.core.logging_config import setup_logging
from cafestock.db.base import SessionLocal, engine
from cafestock.models.role import RoleType, UserRole
from cafestock.models.user import User

logger = logging.getLogger(__name__)


async def assign_role(email: str, role: RoleType) -> bool:
    """Upsert the user's role row. Returns False if no user has that email."""
    async with SessionLocal() as db:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            logger.error("No user with email %s", email)
            return False

        existing = await db.execute(select(UserRole).where(UserRole.user_id == user.id))
        user_role = existing.scalar_one_or_none()
        if user_role:
            user_role.role = role
        else:
            db.add(UserRole(user_id=user.id, role=role))
        await db.commit()

    logger.info("Assigned role %s to %s", role.value, email)
    return True


async def _run(email: str, role: RoleType) -> bool:
    try:
        return await assign_role(email, role)
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Assign a CafeStock role to a user")
    parser.add_argument("email", help="Email of an existing user")
    parser.add_argument(
        "--role",
        choices=[r.value for r in RoleType],
        default=RoleType.ADMIN.value,
        help="Role to assign (default: admin)",
    )
    args = parser.parse_args(argv)

    setup_logging()
    ok = asyncio.run(_run(args.email, RoleType(args.role)))
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
