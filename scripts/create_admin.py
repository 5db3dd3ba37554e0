"""Create an admin account, or reset its password.

Run after the database migration:

    python -m scripts.create_admin admin --password 's3cret!' --full-name "Administrador"

Without ``--password`` a random temporary password is generated and
printed once.
"""

import argparse
import asyncio
import secrets

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import MIN_PASSWORD_LENGTH, hash_password
from app.db.init_db import create_tables
from app.db.session import AsyncSessionLocal
from app.models.user import AdminUser


async def upsert_admin(
    session: AsyncSession,
    username: str,
    password: str,
    email: str | None = None,
    full_name: str | None = None,
) -> tuple[AdminUser, bool]:
    """Create the admin or reset its password.

    Returns:
        Tuple of (admin, created)
    """
    result = await session.execute(select(AdminUser).where(AdminUser.username == username))
    admin = result.scalar_one_or_none()
    created = admin is None

    if created:
        admin = AdminUser(username=username, is_active=True)
        session.add(admin)

    admin.hashed_password = hash_password(password)
    if email:
        admin.email = email
    if full_name:
        admin.full_name = full_name

    await session.commit()
    await session.refresh(admin)
    return admin, created


def main():
    """Main entry point for the admin account tool."""
    parser = argparse.ArgumentParser(description="Create or reset a bookings admin account")
    parser.add_argument("username", help="Admin username")
    parser.add_argument("--password", help="Password (generated when omitted)")
    parser.add_argument("--email", help="Contact email")
    parser.add_argument("--full-name", help="Display name")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables first (development databases without migrations)",
    )

    args = parser.parse_args()

    password = args.password or secrets.token_urlsafe(12)
    if len(password) < MIN_PASSWORD_LENGTH:
        parser.error(f"password must be at least {MIN_PASSWORD_LENGTH} characters")

    async def run() -> tuple[AdminUser, bool]:
        if args.create_tables:
            await create_tables()
        async with AsyncSessionLocal() as session:
            return await upsert_admin(session, args.username, password, args.email, args.full_name)

    admin, created = asyncio.run(run())

    print("=" * 60)
    print("ADMIN ACCOUNT CREATED" if created else "ADMIN PASSWORD RESET")
    print("=" * 60)
    print(f"Username: {admin.username}")
    if not args.password:
        print(f"Password: {password}")
        print("Save this password - it is shown only once.")
    print("=" * 60)


if __name__ == "__main__":
    main()
