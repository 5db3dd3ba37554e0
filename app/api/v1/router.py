"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from app.api.v1 import audit, auth, bookings, health, schedule

api_router = APIRouter()

# Health check
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"],
)

# Admin authentication
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["auth"],
)

# Bookings
api_router.include_router(
    bookings.router,
    prefix="/bookings",
    tags=["bookings"],
)

# Schedule and availability
api_router.include_router(
    schedule.router,
    prefix="/schedule",
    tags=["schedule"],
)

# Audit
api_router.include_router(
    audit.router,
    prefix="/audit",
    tags=["audit"],
)
