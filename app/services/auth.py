"""Authentication service for clinic administrators."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.booking.errors import ValidationError
from app.core.security import (
    MIN_PASSWORD_LENGTH,
    create_access_token,
    hash_password,
    verify_password,
)
from app.models.user import AdminUser
from app.utils.time import utc_now

logger = logging.getLogger(__name__)


class InvalidCredentialsError(Exception):
    """Unknown username or wrong password."""

    pass


class AccountDisabledError(Exception):
    """The admin account exists but has been deactivated."""

    pass


class AuthService:
    """Service for handling admin authentication operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def authenticate_admin(self, username: str, password: str) -> AdminUser:
        """Authenticate an admin with username and password.

        The active flag is checked before the password so a disabled
        account is reported as such.

        Args:
            username: Admin username
            password: Plain text password

        Returns:
            Authenticated AdminUser

        Raises:
            InvalidCredentialsError: Unknown username or wrong password
            AccountDisabledError: Account is inactive
        """
        user = await self.get_admin_by_username(username.strip())

        if not user:
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        if not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError()

        return user

    async def record_login(self, user: AdminUser) -> None:
        """Stamp the last successful login."""
        user.last_login_at = utc_now()
        await self.session.commit()

    def create_admin_token(self, user: AdminUser) -> str:
        """Create JWT access token for an admin.

        Args:
            user: Authenticated AdminUser

        Returns:
            JWT access token string
        """
        return create_access_token(
            subject=str(user.id),
            additional_claims={
                "actor_type": "admin",
                "username": user.username,
            },
        )

    async def get_admin_by_id(self, user_id: int) -> AdminUser | None:
        """Get admin by ID."""
        result = await self.session.execute(select(AdminUser).where(AdminUser.id == user_id))
        return result.scalar_one_or_none()

    async def get_admin_by_username(self, username: str) -> AdminUser | None:
        """Get admin by username."""
        result = await self.session.execute(
            select(AdminUser).where(AdminUser.username == username)
        )
        return result.scalar_one_or_none()

    async def change_password(
        self,
        user: AdminUser,
        current_password: str,
        new_password: str,
    ) -> None:
        """Replace an admin's password.

        Raises:
            ValidationError: New password shorter than the minimum
            InvalidCredentialsError: Current password does not match
        """
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters",
                fields=["new_password"],
            )

        if not verify_password(current_password, user.hashed_password):
            raise InvalidCredentialsError()

        user.hashed_password = hash_password(new_password)
        await self.session.commit()
        logger.info(f"Password changed for admin {user.id}", extra={"actor_id": user.id})

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password for storage."""
        return hash_password(password)
