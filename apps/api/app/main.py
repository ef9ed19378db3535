"""FastAPI application entry point."""
import logging

from fastapi import FastAPI

from app.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,  # 10% of requests for performance monitoring
        send_default_pii=False,  # Claims data is PHI
    )
    logging.info("Sentry initialized for error tracking")

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from app.core.rate_limit import limiter

from app.core.cors import ResourceCORSMiddleware
from app.core.errors import UnhandledErrorMiddleware, register_error_handlers


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="ClarityClaim API",
    description="Multi-tenant claims and appeals API",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

register_error_handlers(app)

# Added last = outermost: CORS headers also land on masked 500s
app.add_middleware(UnhandledErrorMiddleware)
app.add_middleware(ResourceCORSMiddleware)

# ============================================================================
# Routers
# ============================================================================

from app.routers import analytics, appeals, billing, claims, health, patients, profile, public

app.include_router(health.router)

# Tenant resources
app.include_router(patients.router)
app.include_router(claims.router)
app.include_router(appeals.router)
app.include_router(analytics.router)
app.include_router(billing.router)

# Caller profile (authenticated, org optional)
app.include_router(profile.router)

# Public lead capture (unauthenticated)
app.include_router(public.router)
