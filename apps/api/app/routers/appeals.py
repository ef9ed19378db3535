"""Appeals API endpoints (tenant-scoped), including AI letter generation."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.cors import DEFAULT_METHODS, register_resource_methods
from app.core.deps import get_ai_client, get_db, get_tenant
from app.schemas.appeal import (
    AppealCreate,
    AppealDetail,
    AppealGenerateRequest,
    AppealGenerateResponse,
    AppealListItem,
    AppealRead,
    AppealUpdate,
)
from app.schemas.auth import TenantContext
from app.schemas.common import DataResponse, MessageResponse
from app.services import appeal_letter_service, appeal_service
from app.services.ai_service import AIClient
from app.services.appeal_letter_service import GenerateClaimNotFoundError
from app.services.appeal_service import (
    AppealClaimNotFoundError,
    AppealNotFoundError,
    InvalidAppealStatusError,
)
from app.utils.pagination import Pagination, PaginationParams, get_pagination

router = APIRouter(prefix="/api/appeals", tags=["appeals"])
register_resource_methods(router.prefix, DEFAULT_METHODS)
register_resource_methods(f"{router.prefix}/generate", ("POST", "OPTIONS"))


@router.get("")
def read_appeals(
    appeal_id: str | None = Query(None, alias="id"),
    status: str | None = Query(None),
    claim_id: str | None = Query(None),
    pagination: PaginationParams = Depends(get_pagination),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Read one appeal (with claim and activity trail) when id is given, else a page."""
    if appeal_id is not None:
        appeal = appeal_service.get_appeal(db, tenant.org_id, appeal_id, with_relations=True)
        if not appeal:
            raise HTTPException(status_code=404, detail="Appeal not found")
        return {"data": AppealDetail.model_validate(appeal)}

    items, total = appeal_service.list_appeals(
        db, tenant.org_id, pagination, status=status, claim_id=claim_id
    )
    return {
        "data": [AppealListItem.model_validate(a) for a in items],
        "pagination": Pagination.create(total, pagination),
    }


@router.post("", status_code=201, response_model=DataResponse[AppealRead])
def create_appeal(
    data: AppealCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    try:
        appeal = appeal_service.create_appeal(db, tenant.org_id, tenant.user_id, data)
    except AppealClaimNotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")
    except InvalidAppealStatusError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"data": AppealRead.model_validate(appeal)}


@router.put("", response_model=DataResponse[AppealRead])
def update_appeal(
    data: AppealUpdate,
    appeal_id: str | None = Query(None, alias="id"),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    if not appeal_id:
        raise HTTPException(status_code=400, detail="Appeal ID is required")
    try:
        appeal = appeal_service.update_appeal(db, tenant.org_id, tenant.user_id, appeal_id, data)
    except AppealNotFoundError:
        raise HTTPException(status_code=404, detail="Appeal not found")
    except InvalidAppealStatusError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"data": AppealRead.model_validate(appeal)}


@router.delete("", response_model=MessageResponse)
def delete_appeal(
    appeal_id: str | None = Query(None, alias="id"),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    if not appeal_id:
        raise HTTPException(status_code=400, detail="Appeal ID is required")
    try:
        appeal_service.delete_appeal(db, tenant.org_id, appeal_id)
    except AppealNotFoundError:
        raise HTTPException(status_code=404, detail="Appeal not found")
    return {"message": "Appeal deleted successfully"}


@router.post("/generate", status_code=201, response_model=AppealGenerateResponse)
def generate_appeal(
    data: AppealGenerateRequest,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
    ai_client: AIClient = Depends(get_ai_client),
):
    """Draft an appeal letter with the AI service, falling back to a template."""
    try:
        appeal, ai_used, message = appeal_letter_service.generate_appeal(
            db, tenant.org_id, tenant.user_id, data, ai_client
        )
    except GenerateClaimNotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")
    return {"data": AppealRead.model_validate(appeal), "ai_used": ai_used, "message": message}
