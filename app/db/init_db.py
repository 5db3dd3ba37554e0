"""Database initialization utilities."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import hash_password
from app.db.base import Base
from app.db.session import engine
from app.models.user import AdminUser

logger = logging.getLogger(__name__)


async def create_tables() -> None:
    """Create all database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def create_initial_admin(
    session: AsyncSession,
    username: str | None = None,
    password: str | None = None,
) -> AdminUser | None:
    """Create the initial admin account if no admin exists yet.

    Args:
        session: Database session
        username: Defaults to ``settings.initial_admin_username``
        password: Defaults to ``settings.initial_admin_password``

    Returns:
        Created admin or None if an admin already exists
    """
    result = await session.execute(select(AdminUser).limit(1))
    existing_admin = result.scalar_one_or_none()

    if existing_admin:
        logger.info("Admin user already exists, skipping creation")
        return None

    password = password or settings.initial_admin_password
    admin = AdminUser(
        username=username or settings.initial_admin_username,
        hashed_password=hash_password(password),
        full_name="Administrador",
        is_active=True,
    )
    session.add(admin)
    await session.commit()
    await session.refresh(admin)

    if password == "CHANGE_ME_IMMEDIATELY":
        logger.warning(
            "Created initial admin user with default password. "
            "CHANGE THE PASSWORD IMMEDIATELY!"
        )
    else:
        logger.info(f"Created initial admin user {admin.username}")
    return admin


async def init_db(session: AsyncSession) -> None:
    """Initialize database with required data.

    Args:
        session: Database session
    """
    await create_tables()
    await create_initial_admin(session)
    logger.info("Database initialization complete")
