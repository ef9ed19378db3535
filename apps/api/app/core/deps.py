"""FastAPI dependencies for authentication, tenant resolution, and database access."""

import logging
from typing import Generator

import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import decode_access_token, extract_bearer_token
from app.db.session import SessionLocal
from app.schemas.auth import Identity, TenantContext, TokenPayload

logger = logging.getLogger(__name__)


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_identity(request: Request) -> Identity:
    """
    Verify the bearer token and return the caller identity.

    Raises:
        HTTPException 401: Missing/malformed header or invalid token
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        claims = TokenPayload.model_validate(decode_access_token(token))
    except (jwt.InvalidTokenError, ValueError) as e:
        logger.info("Access token rejected: %s", type(e).__name__)
        raise HTTPException(status_code=401, detail="Invalid token")

    request.state.user_id = str(claims.sub)
    return Identity(user_id=claims.sub, email=claims.email)


def get_tenant(
    request: Request,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
) -> TenantContext:
    """
    Resolve the caller's organization from their profile.

    This is the PRIMARY dependency for every tenant resource.

    Raises:
        HTTPException 403: No profile or profile without organization
    """
    from app.db.models import Profile

    profile = db.get(Profile, identity.user_id)
    if not profile or not profile.organization_id:
        raise HTTPException(
            status_code=403, detail="User not associated with an organization"
        )

    request.state.org_id = str(profile.organization_id)
    return TenantContext(
        user_id=identity.user_id,
        org_id=profile.organization_id,
        email=identity.email or profile.email,
    )


# =============================================================================
# External collaborators (overridden in tests)
# =============================================================================

def get_ai_client():
    from app.services.ai_service import AIClient

    return AIClient(
        appeals_url=settings.AI_APPEALS_URL,
        risk_url=settings.AI_RISK_URL,
        api_key=settings.AI_API_KEY,
        timeout=settings.AI_TIMEOUT_SECONDS,
    )


def get_hubspot_client():
    from app.services.hubspot_service import HubSpotClient

    return HubSpotClient(
        access_token=settings.HUBSPOT_ACCESS_TOKEN,
        base_url=settings.HUBSPOT_API_BASE,
    )


def get_billing_client():
    """Return a Stripe-backed client, or None when Stripe is not configured."""
    if not settings.is_stripe_configured:
        return None

    from app.services.billing_service import BillingClient

    return BillingClient(
        api_key=settings.STRIPE_SECRET_KEY,
        api_version=settings.STRIPE_API_VERSION,
    )
