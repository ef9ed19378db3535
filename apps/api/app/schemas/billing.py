"""Billing request schemas. Stripe payloads are relayed, not modelled."""

from pydantic import BaseModel, Field


class CheckoutRequest(BaseModel):
    price_id: str = Field(..., min_length=1)
    success_url: str = Field(..., min_length=1)
    cancel_url: str = Field(..., min_length=1)


class PortalRequest(BaseModel):
    return_url: str = Field(..., min_length=1)


class SessionUrl(BaseModel):
    id: str | None = None
    url: str
