"""Admin credentials and session tokens.

Only clinic admins hold accounts; patients book anonymously. An admin
logs in once and then presents a short-lived signed session token on
every privileged request (editing or deleting bookings, reading the
audit trail).
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Minimum length accepted when an admin changes their password
MIN_PASSWORD_LENGTH = 6

# Value of the "type" claim on admin session tokens
SESSION_TOKEN_TYPE = "admin_session"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login attempt against the admin's stored bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    """Hash an admin password for storage on ``AdminUser.hashed_password``."""
    return pwd_context.hash(password)


def create_access_token(
    subject: str,
    expires_delta: timedelta | None = None,
    additional_claims: dict | None = None,
) -> str:
    """Issue a session token for a logged-in admin.

    Args:
        subject: Admin user id, as a string
        expires_delta: Session length, defaults to ``access_token_expire_minutes``
        additional_claims: Extra claims such as ``actor_type`` and ``username``

    Returns:
        Signed token for the ``Authorization: Bearer`` header
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": subject,
        "type": SESSION_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    if additional_claims:
        claims.update(additional_claims)

    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict | None:
    """Read the claims of an admin session token.

    Returns:
        The claims, or None when the token is expired, tampered with,
        signed with another key or not a session token. Callers treat
        None as an anonymous request.
    """
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if claims.get("type") != SESSION_TOKEN_TYPE:
        return None
    return claims
