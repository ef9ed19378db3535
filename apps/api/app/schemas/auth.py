"""Authentication-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel


class TokenPayload(BaseModel):
    """Decoded access token claims we rely on."""
    sub: UUID  # user_id
    email: str | None = None
    role: str | None = None


class Identity(BaseModel):
    """Verified caller identity. Carries no tenant information."""
    user_id: UUID
    email: str | None = None


class TenantContext(BaseModel):
    """
    Tenant context for authenticated requests.

    This is returned by the get_tenant dependency and is the only
    source of organization scope downstream. Request bodies never
    contribute to it.
    """
    user_id: UUID
    org_id: UUID
    email: str | None = None
