"""Billing endpoints backed by Stripe (tenant-scoped)."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.cors import register_resource_methods
from app.core.deps import get_billing_client, get_db, get_tenant
from app.schemas.auth import TenantContext
from app.schemas.billing import CheckoutRequest, PortalRequest, SessionUrl
from app.schemas.common import DataResponse
from app.services import billing_service
from app.services.billing_service import BillingClient, BillingError

router = APIRouter(prefix="/api/billing", tags=["billing"])
register_resource_methods(f"{router.prefix}/plans", ("GET", "OPTIONS"))
register_resource_methods(f"{router.prefix}/invoices", ("GET", "OPTIONS"))
register_resource_methods(f"{router.prefix}/checkout", ("POST", "OPTIONS"))
register_resource_methods(f"{router.prefix}/portal", ("POST", "OPTIONS"))


def require_billing(client: BillingClient | None = Depends(get_billing_client)) -> BillingClient:
    if client is None:
        raise HTTPException(status_code=503, detail="Billing is not configured")
    return client


@router.get("/plans")
def list_plans(tenant: TenantContext = Depends(get_tenant)):
    return {"data": billing_service.PLANS}


@router.post("/checkout", response_model=DataResponse[SessionUrl])
def create_checkout(
    data: CheckoutRequest,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
    client: BillingClient = Depends(require_billing),
):
    try:
        customer_id = billing_service.ensure_customer(db, client, tenant.org_id, tenant.email)
        session = client.create_checkout_session(
            customer_id, data.price_id, tenant.org_id, data.success_url, data.cancel_url
        )
    except BillingError:
        raise HTTPException(status_code=502, detail="Billing provider error")
    return {"data": {"id": session["id"], "url": session["url"]}}


@router.post("/portal", response_model=DataResponse[SessionUrl])
def create_portal(
    data: PortalRequest,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
    client: BillingClient = Depends(require_billing),
):
    try:
        customer_id = billing_service.ensure_customer(db, client, tenant.org_id, tenant.email)
        session = client.create_portal_session(customer_id, data.return_url)
    except BillingError:
        raise HTTPException(status_code=502, detail="Billing provider error")
    return {"data": {"id": session["id"], "url": session["url"]}}


@router.get("/invoices")
def list_invoices(
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
    client: BillingClient = Depends(require_billing),
):
    try:
        customer_id = billing_service.ensure_customer(db, client, tenant.org_id, tenant.email)
        invoices = client.list_invoices(customer_id)
    except BillingError:
        raise HTTPException(status_code=502, detail="Billing provider error")
    return {"data": invoices}
