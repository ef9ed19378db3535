"""Dashboard analytics endpoint (tenant-scoped)."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.cors import register_resource_methods
from app.core.deps import get_db, get_tenant
from app.schemas.auth import TenantContext
from app.services import analytics_service

router = APIRouter(prefix="/api/analytics", tags=["analytics"])
register_resource_methods(router.prefix, ("GET", "OPTIONS"))


@router.get("")
def get_analytics(
    period: str | None = Query(None, description="7d, 30d, 90d or 1y (default 30d)"),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    return {"data": analytics_service.get_dashboard(db, tenant.org_id, period)}
