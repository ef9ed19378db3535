"""Appeal service - org-scoped CRUD, lifecycle enforcement, and activity trail."""

import logging
import time
from datetime import date, datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.config import settings
from app.core.status_rules import (
    InvalidStatusError,
    InvalidStatusTransitionError,
    validate_appeal_transition,
)
from app.db.enums import AppealStatus, DEFAULT_APPEAL_STATUS
from app.db.models import Appeal, Claim
from app.schemas.appeal import AppealCreate, AppealUpdate
from app.services import activity_service
from app.utils.normalization import parse_uuid
from app.utils.pagination import PaginationParams, paginate_query

logger = logging.getLogger(__name__)

APPEAL_NUMBER_PREFIX = "APL-"
# Attempts at a fresh appeal number when two creates land on the same millisecond
_NUMBER_ATTEMPTS = 5


class AppealServiceError(Exception):
    """Base exception for appeal service errors."""

    pass


class AppealNotFoundError(AppealServiceError):
    """Appeal not found in org."""

    pass


class AppealClaimNotFoundError(AppealServiceError):
    """Referenced claim does not exist in org."""

    pass


class InvalidAppealStatusError(AppealServiceError):
    """Unknown status value or disallowed transition."""

    pass


def _base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def generate_appeal_number(now_ms: int | None = None) -> str:
    """Appeal number: APL- followed by the base36 millisecond timestamp, uppercased."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"{APPEAL_NUMBER_PREFIX}{_base36(now_ms).upper()}"


def get_appeal(db: Session, org_id: UUID, appeal_id: object, with_relations: bool = False) -> Appeal | None:
    """Get appeal by id, scoped to org. Malformed ids return None."""
    parsed = parse_uuid(appeal_id)
    if not parsed:
        return None
    query = db.query(Appeal).filter(Appeal.id == parsed, Appeal.organization_id == org_id)
    if with_relations:
        query = query.options(joinedload(Appeal.claim), selectinload(Appeal.activities))
    return query.first()


def get_claim_for_appeal(db: Session, org_id: UUID, claim_id: object) -> Claim:
    parsed = parse_uuid(claim_id)
    claim = None
    if parsed:
        claim = (
            db.query(Claim)
            .filter(Claim.id == parsed, Claim.organization_id == org_id)
            .first()
        )
    if not claim:
        raise AppealClaimNotFoundError()
    return claim


def list_appeals(
    db: Session,
    org_id: UUID,
    pagination: PaginationParams,
    status: str | None = None,
    claim_id: str | None = None,
) -> tuple[list[Appeal], int]:
    """List appeals newest first. A malformed claim_id filter matches nothing."""
    query = (
        db.query(Appeal)
        .options(joinedload(Appeal.claim))
        .filter(Appeal.organization_id == org_id)
    )
    if claim_id:
        parsed = parse_uuid(claim_id)
        if not parsed:
            return [], 0
        query = query.filter(Appeal.claim_id == parsed)
    if status:
        query = query.filter(Appeal.status == status)

    query = query.order_by(Appeal.created_at.desc(), Appeal.id.desc())
    return paginate_query(query, pagination)


def default_deadline(claim: Claim, today: date | None = None) -> date:
    """Appeal deadline from the payer's window, else the configured default."""
    days = settings.DEFAULT_APPEAL_DEADLINE_DAYS
    if claim.payer and claim.payer.appeal_deadline_days:
        days = claim.payer.appeal_deadline_days
    return (today or date.today()) + timedelta(days=days)


def insert_appeal(db: Session, org_id: UUID, claim: Claim, user_id: UUID | None, values: dict) -> Appeal:
    """
    Insert an appeal with a generated appeal number and commit.

    Retries with the next millisecond value when the number is already taken.
    """
    base_ms = time.time_ns() // 1_000_000
    for attempt in range(_NUMBER_ATTEMPTS):
        appeal = Appeal(
            organization_id=org_id,
            claim_id=claim.id,
            appeal_number=generate_appeal_number(base_ms + attempt),
            created_by=user_id,
            **values,
        )
        db.add(appeal)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if attempt == _NUMBER_ATTEMPTS - 1:
                raise
            continue
        db.refresh(appeal)
        return appeal
    raise AppealServiceError("Could not allocate appeal number")


def create_appeal(db: Session, org_id: UUID, user_id: UUID | None, data: AppealCreate) -> Appeal:
    """
    Create an appeal for a claim in the caller's org and log it.

    Raises:
        AppealClaimNotFoundError: Claim outside org
        InvalidAppealStatusError: Unknown initial status, or non-draft while transitions are enforced
    """
    claim = get_claim_for_appeal(db, org_id, data.claim_id)

    values = data.model_dump(exclude={"claim_id"})
    status = values.get("status") or DEFAULT_APPEAL_STATUS.value
    if not AppealStatus.has_value(status):
        raise InvalidAppealStatusError(str(InvalidStatusError(status)))
    if settings.ENFORCE_APPEAL_TRANSITIONS and status != DEFAULT_APPEAL_STATUS.value:
        raise InvalidAppealStatusError(f"New appeals must start in {DEFAULT_APPEAL_STATUS.value} status")
    values["status"] = status
    if status == AppealStatus.SUBMITTED.value:
        values["submitted_at"] = datetime.now(timezone.utc)

    appeal = insert_appeal(db, org_id, claim, user_id, values)
    activity_service.log_appeal_created(db, appeal.id, org_id, user_id)
    return appeal


def update_appeal(
    db: Session, org_id: UUID, user_id: UUID | None, appeal_id: object, data: AppealUpdate
) -> Appeal:
    """
    Apply a partial update and record a status_changed activity if status moved.

    Raises:
        AppealNotFoundError: No such appeal in org
        InvalidAppealStatusError: Unknown status or disallowed transition
    """
    appeal = get_appeal(db, org_id, appeal_id)
    if not appeal:
        raise AppealNotFoundError()

    updates = data.model_dump(exclude_unset=True)
    old_status = appeal.status
    new_status = updates.pop("status", None)
    status_changed = False

    if new_status is not None:
        try:
            status_changed = validate_appeal_transition(
                old_status, new_status, enforce=settings.ENFORCE_APPEAL_TRANSITIONS
            )
        except (InvalidStatusError, InvalidStatusTransitionError) as e:
            raise InvalidAppealStatusError(str(e))

    for field, value in updates.items():
        if value is None and field == "ai_generated":
            continue
        setattr(appeal, field, value)

    if status_changed:
        appeal.status = new_status
        if new_status == AppealStatus.SUBMITTED.value and appeal.submitted_at is None:
            appeal.submitted_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(appeal)

    if status_changed:
        activity_service.log_status_changed(
            db, appeal.id, org_id, user_id, old_status=old_status, new_status=new_status
        )
        db.refresh(appeal)
    return appeal


def delete_appeal(db: Session, org_id: UUID, appeal_id: object) -> None:
    """
    Delete an appeal and its activity trail.

    Raises:
        AppealNotFoundError: No such appeal in org (including already deleted)
    """
    appeal = get_appeal(db, org_id, appeal_id)
    if not appeal:
        raise AppealNotFoundError()
    deleted_id = appeal.id
    db.delete(appeal)
    db.commit()
    logger.info("Appeal deleted", extra={"org_id": str(org_id), "appeal_id": str(deleted_id)})
