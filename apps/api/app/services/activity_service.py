"""Activity logging service - append-only appeal audit trail."""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.enums import AppealActivityType
from app.db.models import AppealActivity

logger = logging.getLogger(__name__)


def log_activity(
    db: Session,
    appeal_id: UUID,
    organization_id: UUID,
    activity_type: AppealActivityType,
    user_id: UUID | None = None,
    description: str | None = None,
    details: dict | None = None,
) -> AppealActivity:
    """
    Log an appeal activity.

    Args:
        db: Database session
        appeal_id: The appeal this activity is for
        organization_id: Organization context
        activity_type: Type of activity (from AppealActivityType enum)
        user_id: User who performed the action (None for system)
        description: Human-readable summary
        details: Type-specific details as JSON

    Returns:
        The created activity entry
    """
    activity = AppealActivity(
        appeal_id=appeal_id,
        organization_id=organization_id,
        activity_type=activity_type.value,
        user_id=user_id,
        description=description,
        details=details,
    )
    db.add(activity)
    db.flush()  # Don't commit - let caller control transaction
    return activity


def record_activity(db: Session, **kwargs) -> AppealActivity | None:
    """
    Best-effort activity write in its own transaction.

    Called after the primary change is committed. A failure is rolled back
    and logged; it never fails the request that triggered it.
    """
    try:
        activity = log_activity(db, **kwargs)
        db.commit()
        return activity
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(
            "Appeal activity write failed: %s",
            type(e).__name__,
            extra={"appeal_id": str(kwargs.get("appeal_id")), "org_id": str(kwargs.get("organization_id"))},
        )
        return None


def log_appeal_created(
    db: Session,
    appeal_id: UUID,
    organization_id: UUID,
    user_id: UUID | None,
    details: dict | None = None,
) -> AppealActivity | None:
    """Log appeal creation."""
    return record_activity(
        db,
        appeal_id=appeal_id,
        organization_id=organization_id,
        activity_type=AppealActivityType.CREATED,
        user_id=user_id,
        description="Appeal created",
        details=details,
    )


def log_status_changed(
    db: Session,
    appeal_id: UUID,
    organization_id: UUID,
    user_id: UUID | None,
    old_status: str,
    new_status: str,
) -> AppealActivity | None:
    """Log a status change with old and new values."""
    return record_activity(
        db,
        appeal_id=appeal_id,
        organization_id=organization_id,
        activity_type=AppealActivityType.STATUS_CHANGED,
        user_id=user_id,
        description=f"Status changed from {old_status} to {new_status}",
        details={"old_status": old_status, "new_status": new_status},
    )
