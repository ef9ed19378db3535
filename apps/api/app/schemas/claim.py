"""Pydantic schemas for claims and denial-risk analyses."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.patient import PatientSummary


class ClaimCreate(BaseModel):
    """
    Request to create a claim.

    Parent ids are plain strings; malformed ids resolve to "not found".
    """
    patient_id: str = Field(..., min_length=1)
    claim_number: str = Field(..., min_length=1, max_length=64)
    service_date: date
    billed_amount: float = Field(..., ge=0)
    payer_id: str | None = None
    filing_date: date | None = None
    allowed_amount: float | None = None
    paid_amount: float | None = None
    procedure_codes: list[str] | None = None
    diagnosis_codes: list[str] | None = None
    provider_npi: str | None = None
    rendering_provider: str | None = None
    place_of_service: str | None = None
    denial_reason: str | None = None
    denial_code: str | None = None
    denial_date: date | None = None
    notes: str | None = None
    status: str | None = None
    denial_risk_score: float | None = None
    denial_risk_level: str | None = None

    @field_validator("claim_number", mode="before")
    @classmethod
    def strip_claim_number(cls, v):
        # Whitespace-only values fail min_length and report as missing
        return v.strip() if isinstance(v, str) else v


class ClaimUpdate(BaseModel):
    """Partial claim update. Tenant and audit columns are not accepted."""
    patient_id: str | None = None
    payer_id: str | None = None
    claim_number: str | None = Field(None, min_length=1, max_length=64)
    service_date: date | None = None
    filing_date: date | None = None
    billed_amount: float | None = Field(None, ge=0)
    allowed_amount: float | None = None
    paid_amount: float | None = None
    procedure_codes: list[str] | None = None
    diagnosis_codes: list[str] | None = None
    provider_npi: str | None = None
    rendering_provider: str | None = None
    place_of_service: str | None = None
    denial_reason: str | None = None
    denial_code: str | None = None
    denial_date: date | None = None
    notes: str | None = None
    status: str | None = None
    denial_risk_score: float | None = None
    denial_risk_level: str | None = None

    @field_validator("claim_number", mode="before")
    @classmethod
    def strip_claim_number(cls, v):
        return v.strip() if isinstance(v, str) else v


class ClaimRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    patient_id: UUID
    payer_id: UUID | None
    claim_number: str
    service_date: date
    filing_date: date | None
    billed_amount: float
    allowed_amount: float | None
    paid_amount: float | None
    procedure_codes: list[str] | None
    diagnosis_codes: list[str] | None
    provider_npi: str | None
    rendering_provider: str | None
    place_of_service: str | None
    denial_reason: str | None
    denial_code: str | None
    denial_date: date | None
    denial_risk_score: float | None
    denial_risk_level: str | None
    notes: str | None
    status: str
    created_at: datetime
    updated_at: datetime


class PayerSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    type: str | None


class ClaimAppealSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    appeal_number: str
    status: str
    outcome: str | None
    created_at: datetime


class ClaimListItem(ClaimRead):
    patient: PatientSummary | None = None
    payer: PayerSummary | None = None


class ClaimDetail(ClaimListItem):
    appeals: list[ClaimAppealSummary] = Field(default_factory=list)


class RiskAnalysisRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    claim_id: UUID
    risk_score: float | None
    risk_level: str | None
    model_version: str | None
    response: dict
    created_by: UUID | None
    created_at: datetime
