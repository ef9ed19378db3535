"""API routers."""

from app.routers.analytics import router as analytics_router
from app.routers.appeals import router as appeals_router
from app.routers.billing import router as billing_router
from app.routers.claims import router as claims_router
from app.routers.health import router as health_router
from app.routers.patients import router as patients_router
from app.routers.profile import router as profile_router
from app.routers.public import router as public_router

__all__ = [
    "analytics_router",
    "appeals_router",
    "billing_router",
    "claims_router",
    "health_router",
    "patients_router",
    "profile_router",
    "public_router",
]
