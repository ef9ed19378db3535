"""Analytics service for the claims dashboard.

Org-scoped aggregations over claims, appeals, and patients for a trailing
period. Purely database aggregates; nothing is inferred.
"""
import math
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.enums import ClaimStatus, WINNING_OUTCOMES
from app.db.models import Appeal, Claim, Patient


PERIOD_DAYS = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
}
DEFAULT_PERIOD = "30d"
TOP_DENIAL_REASONS = 10
UNKNOWN_REASON = "Unknown"


def _round2(value: float) -> float:
    """Round half away from zero to two decimals."""
    return math.floor(value * 100 + 0.5) / 100 if value >= 0 else -math.floor(-value * 100 + 0.5) / 100


def _pct(part: int | float, whole: int | float) -> float:
    return (part / whole) * 100 if whole else 0.0


def resolve_period(period: str | None, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Return (start, end) for a period key. Unknown keys fall back to 30 days."""
    end = now or datetime.now(timezone.utc)
    if period == "1y":
        try:
            start = end.replace(year=end.year - 1)
        except ValueError:  # Feb 29
            start = end.replace(year=end.year - 1, day=28)
        return start, end
    days = PERIOD_DAYS.get(period or DEFAULT_PERIOD, PERIOD_DAYS[DEFAULT_PERIOD])
    return end - timedelta(days=days), end


# ============================================================================
# Queries
# ============================================================================

def _claims_by_status(db: Session, organization_id: uuid.UUID, start: date) -> list[tuple]:
    return (
        db.query(
            Claim.status,
            func.count(Claim.id),
            func.coalesce(func.sum(Claim.billed_amount), 0),
            func.coalesce(func.sum(Claim.paid_amount), 0),
        )
        .filter(Claim.organization_id == organization_id, Claim.service_date >= start)
        .group_by(Claim.status)
        .all()
    )


def _appeals_by_status(db: Session, organization_id: uuid.UUID, start: datetime) -> list[tuple]:
    return (
        db.query(
            Appeal.status,
            Appeal.outcome,
            func.count(Appeal.id),
            func.coalesce(func.sum(Appeal.outcome_amount), 0),
        )
        .filter(Appeal.organization_id == organization_id, Appeal.created_at >= start)
        .group_by(Appeal.status, Appeal.outcome)
        .all()
    )


def _patient_count(db: Session, organization_id: uuid.UUID) -> int:
    return (
        db.query(func.count(Patient.id))
        .filter(Patient.organization_id == organization_id)
        .scalar()
    ) or 0


def _denial_reasons(db: Session, organization_id: uuid.UUID, start: date) -> list[tuple]:
    return (
        db.query(Claim.denial_reason, func.count(Claim.id))
        .filter(
            Claim.organization_id == organization_id,
            Claim.status == ClaimStatus.DENIED.value,
            Claim.service_date >= start,
        )
        .group_by(Claim.denial_reason)
        .all()
    )


# ============================================================================
# Dashboard
# ============================================================================

def get_dashboard(
    db: Session,
    organization_id: uuid.UUID,
    period: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Summary, status breakdowns and top denial reasons for the period.

    Claims are windowed on service_date, appeals on created_at. The patient
    count is all-time. Any failing query fails the whole call.
    """
    start, end = resolve_period(period, now)

    claim_rows = _claims_by_status(db, organization_id, start.date())
    appeal_rows = _appeals_by_status(db, organization_id, start)
    total_patients = _patient_count(db, organization_id)
    reason_rows = _denial_reasons(db, organization_id, start.date())

    claims_by_status: dict[str, int] = {}
    total_billed = 0.0
    total_paid = 0.0
    for status, count, billed, paid in claim_rows:
        claims_by_status[status] = claims_by_status.get(status, 0) + count
        total_billed += float(billed or 0)
        total_paid += float(paid or 0)
    total_claims = sum(claims_by_status.values())
    total_denials = claims_by_status.get(ClaimStatus.DENIED.value, 0)

    appeals_by_status: dict[str, int] = {}
    appeals_won = 0
    revenue_recovered = 0.0
    for status, outcome, count, amount in appeal_rows:
        appeals_by_status[status] = appeals_by_status.get(status, 0) + count
        if outcome in WINNING_OUTCOMES:
            appeals_won += count
            revenue_recovered += float(amount or 0)
    total_appeals = sum(appeals_by_status.values())

    reason_counts: dict[str, int] = {}
    for reason, count in reason_rows:
        key = reason or UNKNOWN_REASON
        reason_counts[key] = reason_counts.get(key, 0) + count
    denial_reasons = [
        {
            "reason": reason,
            "count": count,
            "percentage": _round2(_pct(count, total_denials)),
        }
        for reason, count in sorted(reason_counts.items(), key=lambda item: item[1], reverse=True)
    ][:TOP_DENIAL_REASONS]

    return {
        "summary": {
            "total_claims": total_claims,
            "total_denials": total_denials,
            "denial_rate": _round2(_pct(total_denials, total_claims)),
            "total_billed": _round2(total_billed),
            "total_paid": _round2(total_paid),
            "total_appeals": total_appeals,
            "appeals_won": appeals_won,
            "appeal_win_rate": _round2(_pct(appeals_won, total_appeals)),
            "revenue_recovered": _round2(revenue_recovered),
            "total_patients": total_patients,
        },
        "claims_by_status": claims_by_status,
        "appeals_by_status": appeals_by_status,
        "denial_reasons": denial_reasons,
        "period": {
            "start": start.date().isoformat(),
            "end": end.date().isoformat(),
        },
    }
