"""Claims API endpoints (tenant-scoped), including AI denial-risk scoring."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.async_utils import run_async
from app.core.cors import DEFAULT_METHODS, register_resource_methods
from app.core.deps import get_ai_client, get_db, get_tenant
from app.schemas.auth import TenantContext
from app.schemas.claim import (
    ClaimCreate,
    ClaimDetail,
    ClaimListItem,
    ClaimRead,
    ClaimUpdate,
    RiskAnalysisRead,
)
from app.schemas.common import DataResponse, MessageResponse
from app.services import claim_service
from app.services.ai_service import AIClient, AIServiceError
from app.services.claim_service import (
    ClaimNotFoundError,
    ClaimPatientNotFoundError,
    ClaimPayerNotFoundError,
    DuplicateClaimError,
    InvalidClaimStatusError,
)
from app.utils.pagination import Pagination, PaginationParams, get_pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/claims", tags=["claims"])
register_resource_methods(router.prefix, DEFAULT_METHODS)
register_resource_methods(f"{router.prefix}/risk", ("POST", "OPTIONS"))


def _map_write_errors(e: Exception) -> HTTPException:
    if isinstance(e, ClaimNotFoundError):
        return HTTPException(status_code=404, detail="Claim not found")
    if isinstance(e, ClaimPatientNotFoundError):
        return HTTPException(status_code=404, detail="Patient not found")
    if isinstance(e, ClaimPayerNotFoundError):
        return HTTPException(status_code=404, detail="Payer not found")
    return HTTPException(status_code=400, detail=str(e))


@router.get("")
def read_claims(
    claim_id: str | None = Query(None, alias="id"),
    status: str | None = Query(None),
    patient_id: str | None = Query(None),
    pagination: PaginationParams = Depends(get_pagination),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Read one claim (with patient, payer and appeals) when id is given, else a page."""
    if claim_id is not None:
        claim = claim_service.get_claim(db, tenant.org_id, claim_id, with_relations=True)
        if not claim:
            raise HTTPException(status_code=404, detail="Claim not found")
        return {"data": ClaimDetail.model_validate(claim)}

    items, total = claim_service.list_claims(
        db, tenant.org_id, pagination, status=status, patient_id=patient_id
    )
    return {
        "data": [ClaimListItem.model_validate(c) for c in items],
        "pagination": Pagination.create(total, pagination),
    }


@router.post("", status_code=201, response_model=DataResponse[ClaimRead])
def create_claim(
    data: ClaimCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    try:
        claim = claim_service.create_claim(db, tenant.org_id, data)
    except (ClaimPatientNotFoundError, ClaimPayerNotFoundError, DuplicateClaimError, InvalidClaimStatusError) as e:
        raise _map_write_errors(e)
    return {"data": ClaimRead.model_validate(claim)}


@router.put("", response_model=DataResponse[ClaimRead])
def update_claim(
    data: ClaimUpdate,
    claim_id: str | None = Query(None, alias="id"),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    if not claim_id:
        raise HTTPException(status_code=400, detail="Claim ID is required")
    try:
        claim = claim_service.update_claim(db, tenant.org_id, claim_id, data)
    except (
        ClaimNotFoundError,
        ClaimPatientNotFoundError,
        ClaimPayerNotFoundError,
        DuplicateClaimError,
        InvalidClaimStatusError,
    ) as e:
        raise _map_write_errors(e)
    return {"data": ClaimRead.model_validate(claim)}


@router.delete("", response_model=MessageResponse)
def delete_claim(
    claim_id: str | None = Query(None, alias="id"),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    if not claim_id:
        raise HTTPException(status_code=400, detail="Claim ID is required")
    try:
        claim_service.delete_claim(db, tenant.org_id, claim_id)
    except ClaimNotFoundError:
        raise HTTPException(status_code=404, detail="Claim not found")
    return {"message": "Claim deleted successfully"}


@router.post("/risk", status_code=201, response_model=DataResponse[RiskAnalysisRead])
def score_claim_risk(
    claim_id: str | None = Query(None, alias="id"),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
    ai_client: AIClient = Depends(get_ai_client),
):
    """Send the claim to the external risk service and store its answer verbatim."""
    if not claim_id:
        raise HTTPException(status_code=400, detail="Claim ID is required")
    claim = claim_service.get_claim(db, tenant.org_id, claim_id)
    if not claim:
        raise HTTPException(status_code=404, detail="Claim not found")
    if not ai_client.risk_configured:
        raise HTTPException(status_code=503, detail="AI risk service not configured")

    try:
        response = run_async(ai_client.score_denial_risk(claim_service.build_risk_payload(claim)))
    except AIServiceError as e:
        logger.warning(
            "Risk scoring failed: %s",
            type(e).__name__,
            extra={"org_id": str(tenant.org_id), "claim_id": str(claim.id)},
        )
        raise HTTPException(status_code=502, detail="AI risk service unavailable")

    analysis = claim_service.record_risk_analysis(
        db, tenant.org_id, claim, response, user_id=tenant.user_id
    )
    return {"data": RiskAnalysisRead.model_validate(analysis)}
