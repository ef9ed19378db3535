"""Stripe billing wrapper. Stripe objects are relayed to the client as returned."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

import stripe
from sqlalchemy.orm import Session

from app.db.models import Organization

logger = logging.getLogger(__name__)

# Prices are in cents; -1 means unlimited.
PLANS: dict[str, dict[str, Any]] = {
    "free": {"name": "Free", "price_monthly": 0, "price_yearly": 0, "claims": 50, "appeals": 10},
    "starter": {"name": "Starter", "price_monthly": 9900, "price_yearly": 95000, "claims": 500, "appeals": 100},
    "professional": {
        "name": "Professional",
        "price_monthly": 29900,
        "price_yearly": 287000,
        "claims": 2500,
        "appeals": 500,
    },
    "enterprise": {"name": "Enterprise", "price_monthly": 0, "price_yearly": 0, "claims": -1, "appeals": -1},
}

INVOICE_LIMIT = 10


class BillingError(Exception):
    """Stripe rejected or failed a request."""

    pass


class BillingClient:
    """
    Per-request Stripe client.

    The API key is passed on every call instead of being set globally.
    """

    def __init__(self, api_key: str, api_version: str | None = None, stripe_module=None):
        self.api_key = api_key
        self.api_version = api_version
        self._stripe = stripe_module or stripe

    def _opts(self) -> dict:
        opts = {"api_key": self.api_key}
        if self.api_version:
            opts["stripe_version"] = self.api_version
        return opts

    def get_or_create_customer(self, org_id: UUID, org_name: str, email: str | None) -> Any:
        try:
            existing = self._stripe.Customer.search(
                query=f"metadata['organization_id']:'{org_id}'", **self._opts()
            )
            if existing.data:
                return existing.data[0]
            return self._stripe.Customer.create(
                email=email,
                name=org_name,
                metadata={"organization_id": str(org_id)},
                **self._opts(),
            )
        except self._stripe.StripeError as e:
            logger.error("Stripe customer lookup failed: %s", type(e).__name__)
            raise BillingError("Stripe customer lookup failed") from e

    def create_checkout_session(
        self, customer_id: str, price_id: str, org_id: UUID, success_url: str, cancel_url: str
    ) -> Any:
        try:
            return self._stripe.checkout.Session.create(
                customer=customer_id,
                mode="subscription",
                payment_method_types=["card"],
                line_items=[{"price": price_id, "quantity": 1}],
                success_url=success_url,
                cancel_url=cancel_url,
                metadata={"organization_id": str(org_id)},
                subscription_data={"metadata": {"organization_id": str(org_id)}},
                allow_promotion_codes=True,
                **self._opts(),
            )
        except self._stripe.StripeError as e:
            logger.error("Stripe checkout failed: %s", type(e).__name__)
            raise BillingError("Stripe checkout failed") from e

    def create_portal_session(self, customer_id: str, return_url: str) -> Any:
        try:
            return self._stripe.billing_portal.Session.create(
                customer=customer_id, return_url=return_url, **self._opts()
            )
        except self._stripe.StripeError as e:
            logger.error("Stripe portal session failed: %s", type(e).__name__)
            raise BillingError("Stripe portal session failed") from e

    def list_invoices(self, customer_id: str, limit: int = INVOICE_LIMIT) -> list:
        try:
            invoices = self._stripe.Invoice.list(customer=customer_id, limit=limit, **self._opts())
        except self._stripe.StripeError as e:
            logger.error("Stripe invoice list failed: %s", type(e).__name__)
            raise BillingError("Stripe invoice list failed") from e
        return list(invoices.data)


def ensure_customer(db: Session, client: BillingClient, org_id: UUID, email: str | None) -> str:
    """Return the org's Stripe customer id, creating and remembering it if needed."""
    org = db.get(Organization, org_id)
    if org.stripe_customer_id:
        return org.stripe_customer_id
    customer = client.get_or_create_customer(org_id, org.name, email)
    org.stripe_customer_id = customer["id"]
    db.commit()
    return org.stripe_customer_id
