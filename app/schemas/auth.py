"""Authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class AdminLoginRequest(BaseModel):
    """Admin login request with username and password."""

    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=128)


class TokenResponse(BaseModel):
    """JWT token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class ChangePasswordRequest(BaseModel):
    """Password change for the logged-in admin."""

    current_password: str = Field(min_length=1, max_length=128)
    # Length rule is enforced by AuthService.change_password
    new_password: str = Field(max_length=128)


class AdminRead(BaseModel):
    """Admin account as shown to the admin themselves."""

    id: int
    username: str
    email: str | None
    full_name: str | None
    last_login_at: datetime | None

    model_config = {"from_attributes": True}


class SessionStatus(BaseModel):
    """Whether the caller holds a valid admin session."""

    authenticated: bool
    user: AdminRead | None = None
    expires_in: int | None = None  # seconds left on the token
