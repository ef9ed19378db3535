"""Claim service - org-scoped CRUD for claims plus denial-risk persistence."""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.status_rules import InvalidStatusError, validate_claim_status
from app.db.errors import is_unique_violation
from app.db.enums import DEFAULT_CLAIM_STATUS
from app.db.models import Claim, ClaimRiskAnalysis, Patient, Payer
from app.schemas.claim import ClaimCreate, ClaimUpdate
from app.utils.normalization import normalize_identifier, parse_uuid
from app.utils.pagination import PaginationParams, paginate_query

logger = logging.getLogger(__name__)


class ClaimServiceError(Exception):
    """Base exception for claim service errors."""

    pass


class ClaimNotFoundError(ClaimServiceError):
    """Claim not found in org."""

    pass


class ClaimPatientNotFoundError(ClaimServiceError):
    """Referenced patient does not exist in org."""

    pass


class ClaimPayerNotFoundError(ClaimServiceError):
    """Referenced payer does not exist in org."""

    pass


class DuplicateClaimError(ClaimServiceError):
    """Claim number already exists in org."""

    def __init__(self):
        super().__init__("Claim with this number already exists")


class InvalidClaimStatusError(ClaimServiceError):
    pass


# Columns that must never be nulled out by a partial update
_NON_NULLABLE = frozenset({"patient_id", "claim_number", "service_date", "billed_amount", "status"})


def get_claim(db: Session, org_id: UUID, claim_id: object, with_relations: bool = False) -> Claim | None:
    """Get claim by id, scoped to org. Malformed ids return None."""
    parsed = parse_uuid(claim_id)
    if not parsed:
        return None
    query = db.query(Claim).filter(Claim.id == parsed, Claim.organization_id == org_id)
    if with_relations:
        query = query.options(
            joinedload(Claim.patient),
            joinedload(Claim.payer),
            selectinload(Claim.appeals),
        )
    return query.first()


def _resolve_patient(db: Session, org_id: UUID, patient_id: object) -> Patient:
    parsed = parse_uuid(patient_id)
    patient = None
    if parsed:
        patient = (
            db.query(Patient)
            .filter(Patient.id == parsed, Patient.organization_id == org_id)
            .first()
        )
    if not patient:
        raise ClaimPatientNotFoundError()
    return patient


def _resolve_payer(db: Session, org_id: UUID, payer_id: object) -> Payer:
    parsed = parse_uuid(payer_id)
    payer = None
    if parsed:
        payer = (
            db.query(Payer)
            .filter(Payer.id == parsed, Payer.organization_id == org_id)
            .first()
        )
    if not payer:
        raise ClaimPayerNotFoundError()
    return payer


def _check_status(value: str) -> str:
    try:
        return validate_claim_status(value)
    except InvalidStatusError as e:
        raise InvalidClaimStatusError(str(e))


def list_claims(
    db: Session,
    org_id: UUID,
    pagination: PaginationParams,
    status: str | None = None,
    patient_id: str | None = None,
) -> tuple[list[Claim], int]:
    """List claims newest first. A malformed patient_id filter matches nothing."""
    query = (
        db.query(Claim)
        .options(joinedload(Claim.patient), joinedload(Claim.payer))
        .filter(Claim.organization_id == org_id)
    )
    if patient_id:
        parsed = parse_uuid(patient_id)
        if not parsed:
            return [], 0
        query = query.filter(Claim.patient_id == parsed)
    if status:
        query = query.filter(Claim.status == status)

    query = query.order_by(Claim.created_at.desc(), Claim.id.desc())
    return paginate_query(query, pagination)


def create_claim(db: Session, org_id: UUID, data: ClaimCreate) -> Claim:
    """
    Create a claim for a patient in the caller's org.

    Raises:
        ClaimPatientNotFoundError / ClaimPayerNotFoundError: Parent outside org
        InvalidClaimStatusError: Unknown status
        DuplicateClaimError: (organization_id, claim_number) already taken
    """
    patient = _resolve_patient(db, org_id, data.patient_id)
    payer = _resolve_payer(db, org_id, data.payer_id) if data.payer_id else None

    values = data.model_dump(exclude={"patient_id", "payer_id"})
    values["claim_number"] = normalize_identifier(values["claim_number"])
    values["filing_date"] = values.get("filing_date") or date.today()
    values["status"] = _check_status(values.get("status") or DEFAULT_CLAIM_STATUS.value)

    claim = Claim(
        organization_id=org_id,
        patient_id=patient.id,
        payer_id=payer.id if payer else None,
        **values,
    )
    db.add(claim)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise DuplicateClaimError()
        raise
    db.refresh(claim)
    return claim


def update_claim(db: Session, org_id: UUID, claim_id: object, data: ClaimUpdate) -> Claim:
    """
    Apply a partial update.

    Raises:
        ClaimNotFoundError: No such claim in org
        ClaimPatientNotFoundError / ClaimPayerNotFoundError: New parent outside org
        InvalidClaimStatusError: Unknown status
        DuplicateClaimError: New claim number collides
    """
    claim = get_claim(db, org_id, claim_id)
    if not claim:
        raise ClaimNotFoundError()

    updates = data.model_dump(exclude_unset=True)

    if updates.get("patient_id"):
        updates["patient_id"] = _resolve_patient(db, org_id, updates["patient_id"]).id
    if "payer_id" in updates:
        updates["payer_id"] = (
            _resolve_payer(db, org_id, updates["payer_id"]).id if updates["payer_id"] else None
        )
    if updates.get("status"):
        _check_status(updates["status"])
    if updates.get("claim_number"):
        updates["claim_number"] = normalize_identifier(updates["claim_number"])

    for field, value in updates.items():
        if value is None and field in _NON_NULLABLE:
            continue
        setattr(claim, field, value)

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise DuplicateClaimError()
        raise
    db.refresh(claim)
    return claim


def delete_claim(db: Session, org_id: UUID, claim_id: object) -> None:
    """
    Delete a claim and, by cascade, its appeals and risk analyses.

    Raises:
        ClaimNotFoundError: No such claim in org (including already deleted)
    """
    claim = get_claim(db, org_id, claim_id)
    if not claim:
        raise ClaimNotFoundError()
    deleted_id = claim.id
    db.delete(claim)
    db.commit()
    logger.info("Claim deleted", extra={"org_id": str(org_id), "claim_id": str(deleted_id)})


# =============================================================================
# Denial risk
# =============================================================================

def build_risk_payload(claim: Claim) -> dict:
    """Claim summary sent to the external risk service. Contains no patient identifiers."""
    return {
        "claim_id": str(claim.id),
        "claim_number": claim.claim_number,
        "service_date": claim.service_date.isoformat() if claim.service_date else None,
        "billed_amount": claim.billed_amount,
        "procedure_codes": claim.procedure_codes or [],
        "diagnosis_codes": claim.diagnosis_codes or [],
        "place_of_service": claim.place_of_service,
        "provider_npi": claim.provider_npi,
        "payer_id": str(claim.payer_id) if claim.payer_id else None,
    }


def record_risk_analysis(
    db: Session,
    org_id: UUID,
    claim: Claim,
    response: dict,
    user_id: UUID | None = None,
) -> ClaimRiskAnalysis:
    """
    Store the AI response verbatim and copy score/level onto the claim.

    No scoring happens here; values are taken from the response as-is.
    """
    score = response.get("risk_score")
    level = response.get("risk_level")
    analysis = ClaimRiskAnalysis(
        organization_id=org_id,
        claim_id=claim.id,
        risk_score=float(score) if isinstance(score, (int, float)) else None,
        risk_level=str(level) if level is not None else None,
        model_version=response.get("model_version"),
        response=response,
        created_by=user_id,
    )
    db.add(analysis)
    if analysis.risk_score is not None:
        claim.denial_risk_score = analysis.risk_score
    if analysis.risk_level is not None:
        claim.denial_risk_level = analysis.risk_level
    db.commit()
    db.refresh(analysis)
    return analysis
