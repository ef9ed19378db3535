"""SQLAlchemy ORM models for tenants, claims, appeals, and lead capture."""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean, Date, Float, ForeignKey, Index, Integer, Numeric, String, Text,
    UniqueConstraint, Uuid, func, text
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.enums import (
    DEFAULT_APPEAL_STATUS, DEFAULT_CLAIM_STATUS, DEFAULT_JOB_STATUS,
    DEFAULT_PATIENT_STATUS, LeadStatus,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


Money = Numeric(12, 2, asdecimal=False)


# =============================================================================
# Tenant Models
# =============================================================================

class Organization(Base):
    """
    A tenant in the multi-tenant system.

    All domain entities belong to an organization
    and must be scoped by organization_id in all queries.
    """
    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    subscription_plan: Mapped[str] = mapped_column(
        String(50), default="free", server_default=text("'free'"), nullable=False
    )
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), onupdate=_utcnow, nullable=False
    )

    profiles: Mapped[list["Profile"]] = relationship(back_populates="organization")


class Profile(Base):
    """
    One per authenticated user. The id IS the identity provider's user id.

    organization_id is the only source of tenant scope for a request.
    """
    __tablename__ = "profiles"
    __table_args__ = (
        Index("idx_profiles_org_id", "organization_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    organization_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    job_title: Mapped[str | None] = mapped_column(String(100), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(
        String(50), default="member", server_default=text("'member'"), nullable=False
    )
    preferences: Mapped[dict | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), onupdate=_utcnow, nullable=False
    )

    organization: Mapped["Organization | None"] = relationship(back_populates="profiles")


class Payer(Base):
    """Insurance payer configured for an organization."""
    __tablename__ = "payers"
    __table_args__ = (
        Index("idx_payers_org_id", "organization_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str | None] = mapped_column(String(50), nullable=True)  # commercial|medicare|medicaid
    appeal_deadline_days: Mapped[int] = mapped_column(
        Integer, default=60, server_default=text("60"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )


# =============================================================================
# Claims Domain
# =============================================================================

class Patient(Base):
    """Patient record. Natural key: (organization_id, mrn)."""
    __tablename__ = "patients"
    __table_args__ = (
        UniqueConstraint("organization_id", "mrn", name="uq_patients_org_mrn"),
        Index("idx_patients_org_created", "organization_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    mrn: Mapped[str] = mapped_column(String(64), nullable=False)
    first_name: Mapped[str] = mapped_column(String(128), nullable=False)
    last_name: Mapped[str] = mapped_column(String(128), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[str | None] = mapped_column(String(32), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    insurance_provider: Mapped[str | None] = mapped_column(String(255), nullable=True)
    insurance_member_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        default=DEFAULT_PATIENT_STATUS.value,
        server_default=text(f"'{DEFAULT_PATIENT_STATUS.value}'"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), onupdate=_utcnow, nullable=False
    )

    claims: Mapped[list["Claim"]] = relationship(
        back_populates="patient", cascade="all, delete-orphan"
    )


class Claim(Base):
    """Insurance claim. Natural key: (organization_id, claim_number)."""
    __tablename__ = "claims"
    __table_args__ = (
        UniqueConstraint("organization_id", "claim_number", name="uq_claims_org_number"),
        Index("idx_claims_org_created", "organization_id", "created_at"),
        Index("idx_claims_org_service_date", "organization_id", "service_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False
    )
    payer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("payers.id", ondelete="SET NULL"), nullable=True
    )
    claim_number: Mapped[str] = mapped_column(String(64), nullable=False)
    service_date: Mapped[date] = mapped_column(Date, nullable=False)
    filing_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    billed_amount: Mapped[float] = mapped_column(Money, nullable=False)
    allowed_amount: Mapped[float | None] = mapped_column(Money, nullable=True)
    paid_amount: Mapped[float | None] = mapped_column(Money, nullable=True)
    procedure_codes: Mapped[list | None] = mapped_column(nullable=True)
    diagnosis_codes: Mapped[list | None] = mapped_column(nullable=True)
    provider_npi: Mapped[str | None] = mapped_column(String(20), nullable=True)
    rendering_provider: Mapped[str | None] = mapped_column(String(255), nullable=True)
    place_of_service: Mapped[str | None] = mapped_column(String(10), nullable=True)
    denial_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    denial_code: Mapped[str | None] = mapped_column(String(32), nullable=True)
    denial_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    denial_risk_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    denial_risk_level: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        default=DEFAULT_CLAIM_STATUS.value,
        server_default=text(f"'{DEFAULT_CLAIM_STATUS.value}'"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), onupdate=_utcnow, nullable=False
    )

    patient: Mapped["Patient"] = relationship(back_populates="claims")
    payer: Mapped["Payer | None"] = relationship()
    appeals: Mapped[list["Appeal"]] = relationship(
        back_populates="claim",
        cascade="all, delete-orphan",
        order_by="Appeal.created_at.desc()",
    )
    risk_analyses: Mapped[list["ClaimRiskAnalysis"]] = relationship(
        back_populates="claim", cascade="all, delete-orphan"
    )


class Appeal(Base):
    """Appeal of a denied claim."""
    __tablename__ = "appeals"
    __table_args__ = (
        UniqueConstraint("organization_id", "appeal_number", name="uq_appeals_org_number"),
        Index("idx_appeals_org_created", "organization_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    claim_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("claims.id", ondelete="CASCADE"), nullable=False
    )
    appeal_number: Mapped[str] = mapped_column(String(32), nullable=False)
    denial_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    appeal_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    letter_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    deadline_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        default=DEFAULT_APPEAL_STATUS.value,
        server_default=text(f"'{DEFAULT_APPEAL_STATUS.value}'"),
        nullable=False,
    )
    outcome: Mapped[str | None] = mapped_column(String(32), nullable=True)
    outcome_amount: Mapped[float | None] = mapped_column(Money, nullable=True)
    outcome_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    ai_generated: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    ai_confidence_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    ai_citations: Mapped[list | None] = mapped_column(nullable=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), onupdate=_utcnow, nullable=False
    )

    claim: Mapped["Claim"] = relationship(back_populates="appeals")
    activities: Mapped[list["AppealActivity"]] = relationship(
        back_populates="appeal",
        cascade="all, delete-orphan",
        order_by="AppealActivity.created_at",
    )


class AppealActivity(Base):
    """
    Append-only audit trail for an appeal.

    Written on create and on every status change. Never updated;
    rows only disappear by cascade when the appeal itself is deleted.
    """
    __tablename__ = "appeal_activities"
    __table_args__ = (
        Index("idx_appeal_activities_appeal_time", "appeal_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    appeal_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("appeals.id", ondelete="CASCADE"), nullable=False
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    details: Mapped[dict | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )

    appeal: Mapped["Appeal"] = relationship(back_populates="activities")


class ClaimRiskAnalysis(Base):
    """Denial-risk result returned by the external AI service, stored verbatim."""
    __tablename__ = "claim_risk_analyses"
    __table_args__ = (
        Index("idx_claim_risk_claim_time", "claim_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    claim_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("claims.id", ondelete="CASCADE"), nullable=False
    )
    risk_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    risk_level: Mapped[str | None] = mapped_column(String(20), nullable=True)
    model_version: Mapped[str | None] = mapped_column(String(100), nullable=True)
    response: Mapped[dict] = mapped_column(nullable=False, default=dict)
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )

    claim: Mapped["Claim"] = relationship(back_populates="risk_analyses")


# =============================================================================
# Public Lead Capture (not tenant-scoped)
# =============================================================================

class DemoRequest(Base):
    __tablename__ = "demo_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    organization_name: Mapped[str] = mapped_column(String(255), nullable=False)
    organization_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    monthly_claim_volume: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), default=LeadStatus.PENDING.value, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )


class ContactSubmission(Base):
    __tablename__ = "contact_submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str | None] = mapped_column(String(255), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    source: Mapped[str] = mapped_column(String(50), default="website", nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), default=LeadStatus.UNREAD.value, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )


class NewsletterSubscriber(Base):
    __tablename__ = "newsletter_subscribers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subscribed: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    subscribed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    unsubscribed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    source: Mapped[str] = mapped_column(String(50), default="website", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )


# =============================================================================
# Background Jobs
# =============================================================================

class Job(Base):
    """
    Background job for async processing.

    Used for: best-effort CRM sync.
    Worker polls for pending jobs and processes them.
    """
    __tablename__ = "jobs"
    __table_args__ = (
        Index("idx_jobs_pending", "status", "run_at"),
        Index("idx_jobs_org", "organization_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=True
    )

    job_type: Mapped[str] = mapped_column(String(50), nullable=False)
    payload: Mapped[dict] = mapped_column(nullable=False, default=dict)
    run_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=DEFAULT_JOB_STATUS.value,
        server_default=text(f"'{DEFAULT_JOB_STATUS.value}'"),
        nullable=False,
    )
    attempts: Mapped[int] = mapped_column(
        Integer, default=0, server_default=text("0"), nullable=False
    )
    max_attempts: Mapped[int] = mapped_column(
        Integer, default=3, server_default=text("3"), nullable=False
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Idempotency key for deduplication
    idempotency_key: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
