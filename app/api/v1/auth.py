"""Admin authentication endpoints."""

import time

from fastapi import APIRouter, HTTPException, Request, status

from app.api.deps import Actor, CurrentAdmin, DbSession, OptionalAdmin, Token, get_client_ip
from app.booking.actor import ActorContext
from app.core.config import settings
from app.models.audit_event import AuditAction
from app.schemas.auth import (
    AdminLoginRequest,
    AdminRead,
    ChangePasswordRequest,
    SessionStatus,
    TokenResponse,
)
from app.services.audit import AuditRecorder
from app.services.auth import AccountDisabledError, AuthService, InvalidCredentialsError

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Admin login",
    description="Authenticate an admin with username and password",
)
async def admin_login(
    request: Request,
    credentials: AdminLoginRequest,
    session: DbSession,
) -> TokenResponse:
    """Authenticate admin and return JWT token.

    Raises:
        HTTPException: 401 for bad credentials, 403 for a disabled account
    """
    auth_service = AuthService(session)
    audit = AuditRecorder(session)
    anonymous = ActorContext.anonymous(
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )

    try:
        user = await auth_service.authenticate_admin(
            username=credentials.username,
            password=credentials.password,
        )
    except InvalidCredentialsError:
        await audit.record(
            AuditAction.LOGIN_FAILED,
            entity_type="admin_user",
            entity_id=None,
            actor=anonymous,
            new_values={"username": credentials.username},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )
    except AccountDisabledError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    await auth_service.record_login(user)
    access_token = auth_service.create_admin_token(user)

    await audit.record(
        AuditAction.LOGIN,
        entity_type="admin_user",
        entity_id=user.id,
        actor=ActorContext.admin(user.id, anonymous.ip_address, anonymous.user_agent),
    )

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Admin logout",
    description="Record the end of an admin session; the client discards its token",
)
async def admin_logout(
    user: CurrentAdmin,
    actor: Actor,
    session: DbSession,
) -> None:
    await AuditRecorder(session).record(
        AuditAction.LOGOUT,
        entity_type="admin_user",
        entity_id=user.id,
        actor=actor,
    )


@router.get(
    "/session",
    response_model=SessionStatus,
    status_code=status.HTTP_200_OK,
    summary="Session status",
)
async def session_status(user: OptionalAdmin, token: Token) -> SessionStatus:
    """Report whether the bearer token is a valid admin session."""
    if user is None:
        return SessionStatus(authenticated=False)

    expires_in = None
    if token and "exp" in token:
        expires_in = max(int(token["exp"] - time.time()), 0)

    return SessionStatus(
        authenticated=True,
        user=AdminRead.model_validate(user),
        expires_in=expires_in,
    )


@router.post(
    "/change-password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Change password",
)
async def change_password(
    payload: ChangePasswordRequest,
    user: CurrentAdmin,
    actor: Actor,
    session: DbSession,
) -> None:
    """Change the logged-in admin's password.

    Raises:
        HTTPException: 401 if the current password is wrong
    """
    try:
        await AuthService(session).change_password(
            user,
            current_password=payload.current_password,
            new_password=payload.new_password,
        )
    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect",
        )

    await AuditRecorder(session).record(
        AuditAction.PASSWORD_CHANGE,
        entity_type="admin_user",
        entity_id=user.id,
        actor=actor,
        new_values={"password_changed": True},
    )
