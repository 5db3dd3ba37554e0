"""FastAPI dependency injection utilities."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.booking.actor import ActorContext
from app.booking.repository import SQLAlchemyBookingRepository
from app.booking.schedule import ScheduleConfig, get_schedule_config
from app.core.security import decode_access_token
from app.db.session import get_db
from app.models.user import AdminUser
from app.services.audit import AuditRecorder
from app.services.auth import AuthService
from app.services.bookings import BookingService
from app.utils.time import ClinicClock, Clock

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict | None:
    """Extract and decode the current JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        Decoded token payload or None
    """
    if not credentials:
        return None

    payload = decode_access_token(credentials.credentials)
    return payload


async def _load_admin(token: dict, session: AsyncSession) -> AdminUser | None:
    if token.get("actor_type") != "admin":
        return None
    try:
        user_id = int(token["sub"])
    except (KeyError, TypeError, ValueError):
        return None
    return await AuthService(session).get_admin_by_id(user_id)


async def get_current_admin(
    token: Annotated[dict | None, Depends(get_current_token)],
    session: Annotated[AsyncSession, Depends(get_db)],
) -> AdminUser:
    """Get the current authenticated admin.

    Raises:
        HTTPException: 401 without a valid admin token, 403 if disabled
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await _load_admin(token, session)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin session required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


async def get_optional_admin(
    token: Annotated[dict | None, Depends(get_current_token)],
    session: Annotated[AsyncSession, Depends(get_db)],
) -> AdminUser | None:
    """Get current admin if authenticated and active, otherwise None."""
    if not token:
        return None

    user = await _load_admin(token, session)
    if user is None or not user.is_active:
        return None
    return user


def get_client_ip(request: Request) -> str | None:
    """Extract client IP from request.

    Args:
        request: FastAPI request

    Returns:
        Client IP address or None
    """
    # Check for forwarded header (when behind proxy)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    # Fall back to direct client
    if request.client:
        return request.client.host

    return None


async def get_actor_context(
    request: Request,
    admin: Annotated[AdminUser | None, Depends(get_optional_admin)],
) -> ActorContext:
    """Describe the caller for the booking service and the audit log."""
    ip_address = get_client_ip(request)
    user_agent = request.headers.get("user-agent")

    if admin is None:
        return ActorContext.anonymous(ip_address=ip_address, user_agent=user_agent)
    return ActorContext.admin(admin.id, ip_address=ip_address, user_agent=user_agent)


def get_clock() -> Clock:
    """Clock giving today's date in the clinic timezone."""
    return ClinicClock(get_schedule_config().timezone)


def get_booking_service(
    session: Annotated[AsyncSession, Depends(get_db)],
    config: Annotated[ScheduleConfig, Depends(get_schedule_config)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> BookingService:
    """Booking service bound to the request's session."""
    return BookingService(
        repository=SQLAlchemyBookingRepository(session),
        config=config,
        clock=clock,
        audit=AuditRecorder(session),
    )


# Type aliases for cleaner dependency injection
CurrentAdmin = Annotated[AdminUser, Depends(get_current_admin)]
OptionalAdmin = Annotated[AdminUser | None, Depends(get_optional_admin)]
Token = Annotated[dict | None, Depends(get_current_token)]
Actor = Annotated[ActorContext, Depends(get_actor_context)]
Bookings = Annotated[BookingService, Depends(get_booking_service)]
Schedule = Annotated[ScheduleConfig, Depends(get_schedule_config)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
