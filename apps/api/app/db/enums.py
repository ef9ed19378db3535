"""Enum definitions for application constants."""

from enum import Enum


class _ValueEnum(str, Enum):
    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a member value."""
        return value in cls._value2member_map_


class PatientStatus(_ValueEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DECEASED = "deceased"


class ClaimStatus(_ValueEnum):
    """Claim states as reported by payers. No transition graph is enforced."""

    SUBMITTED = "submitted"
    PENDING = "pending"
    PAID = "paid"
    PARTIALLY_PAID = "partially_paid"
    DENIED = "denied"
    APPEALED = "appealed"
    APPEAL_WON = "appeal_won"
    APPEAL_LOST = "appeal_lost"


class AppealStatus(_ValueEnum):
    """
    Appeal lifecycle.

    draft -> submitted -> in_review -> won | lost
    """

    DRAFT = "draft"
    SUBMITTED = "submitted"
    IN_REVIEW = "in_review"
    WON = "won"
    LOST = "lost"


class AppealOutcome(_ValueEnum):
    APPROVED = "approved"
    PARTIALLY_APPROVED = "partially_approved"
    DENIED = "denied"


# Outcomes that count as a win for analytics and revenue recovery
WINNING_OUTCOMES = frozenset({AppealOutcome.APPROVED.value, AppealOutcome.PARTIALLY_APPROVED.value})


class AppealActivityType(_ValueEnum):
    CREATED = "created"
    STATUS_CHANGED = "status_changed"


class JobType(_ValueEnum):
    """Types of background jobs."""

    HUBSPOT_SYNC = "hubspot_sync"


class JobStatus(_ValueEnum):
    """Status of background jobs."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class LeadStatus(_ValueEnum):
    """Status of public lead-capture submissions."""

    PENDING = "pending"
    UNREAD = "unread"
    CONTACTED = "contacted"


DEFAULT_PATIENT_STATUS: PatientStatus = PatientStatus.ACTIVE
DEFAULT_CLAIM_STATUS: ClaimStatus = ClaimStatus.SUBMITTED
DEFAULT_APPEAL_STATUS: AppealStatus = AppealStatus.DRAFT
DEFAULT_JOB_STATUS: JobStatus = JobStatus.PENDING
