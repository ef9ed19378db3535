"""Patient service - org-scoped CRUD for patient records."""

import logging
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.errors import is_unique_violation
from app.db.enums import ClaimStatus, DEFAULT_PATIENT_STATUS
from app.db.models import Claim, Patient
from app.schemas.patient import ClaimStats, PatientCreate, PatientUpdate
from app.utils.normalization import normalize_identifier, parse_uuid
from app.utils.pagination import PaginationParams, paginate_query

logger = logging.getLogger(__name__)


class PatientServiceError(Exception):
    """Base exception for patient service errors."""

    pass


class PatientNotFoundError(PatientServiceError):
    """Patient not found in org."""

    pass


class DuplicatePatientError(PatientServiceError):
    """MRN already exists in org."""

    def __init__(self):
        super().__init__("Patient with this MRN already exists")


def get_patient(db: Session, org_id: UUID, patient_id: object) -> Patient | None:
    """Get patient by id, scoped to org. Malformed ids return None."""
    parsed = parse_uuid(patient_id)
    if not parsed:
        return None
    return (
        db.query(Patient)
        .filter(Patient.id == parsed, Patient.organization_id == org_id)
        .first()
    )


def get_claim_stats(db: Session, org_id: UUID, patient_id: UUID) -> ClaimStats:
    """Claim counts for a patient: total, denied, appealed."""
    rows = (
        db.query(Claim.status, func.count(Claim.id))
        .filter(Claim.organization_id == org_id, Claim.patient_id == patient_id)
        .group_by(Claim.status)
        .all()
    )
    counts = {status: count for status, count in rows}
    return ClaimStats(
        total=sum(counts.values()),
        denied=counts.get(ClaimStatus.DENIED.value, 0),
        appealed=counts.get(ClaimStatus.APPEALED.value, 0),
    )


def list_patients(
    db: Session,
    org_id: UUID,
    pagination: PaginationParams,
    status: str | None = None,
    search: str | None = None,
) -> tuple[list[Patient], int]:
    """List patients newest first with optional status and name/MRN search."""
    query = db.query(Patient).filter(Patient.organization_id == org_id)

    if status:
        query = query.filter(Patient.status == status)

    if search and search.strip():
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Patient.first_name).like(pattern),
                func.lower(Patient.last_name).like(pattern),
                func.lower(Patient.mrn).like(pattern),
            )
        )

    query = query.order_by(Patient.created_at.desc(), Patient.id.desc())
    return paginate_query(query, pagination)


def create_patient(db: Session, org_id: UUID, data: PatientCreate) -> Patient:
    """
    Create a patient in the caller's org.

    Raises:
        DuplicatePatientError: (organization_id, mrn) already taken
    """
    values = data.model_dump()
    values["mrn"] = normalize_identifier(values["mrn"])
    values["status"] = values.get("status") or DEFAULT_PATIENT_STATUS.value

    patient = Patient(organization_id=org_id, **values)
    db.add(patient)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise DuplicatePatientError()
        raise
    db.refresh(patient)
    return patient


def update_patient(
    db: Session, org_id: UUID, patient_id: object, data: PatientUpdate
) -> Patient:
    """
    Apply a partial update.

    Raises:
        PatientNotFoundError: No such patient in org
        DuplicatePatientError: New MRN collides with another patient
    """
    patient = get_patient(db, org_id, patient_id)
    if not patient:
        raise PatientNotFoundError()

    updates = data.model_dump(exclude_unset=True)
    if "mrn" in updates and updates["mrn"]:
        updates["mrn"] = normalize_identifier(updates["mrn"])
    for field, value in updates.items():
        if value is None and field in ("mrn", "first_name", "last_name", "date_of_birth", "status"):
            continue
        setattr(patient, field, value)

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise DuplicatePatientError()
        raise
    db.refresh(patient)
    return patient


def delete_patient(db: Session, org_id: UUID, patient_id: object) -> None:
    """
    Delete a patient and, by cascade, their claims and appeals.

    Raises:
        PatientNotFoundError: No such patient in org (including already deleted)
    """
    patient = get_patient(db, org_id, patient_id)
    if not patient:
        raise PatientNotFoundError()
    deleted_id = patient.id
    db.delete(patient)
    db.commit()
    logger.info("Patient deleted", extra={"org_id": str(org_id), "patient_id": str(deleted_id)})
