"""Pydantic schemas for patients."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PatientCreate(BaseModel):
    """Request to create a patient. Unknown keys are ignored."""
    mrn: str = Field(..., min_length=1, max_length=64)
    first_name: str = Field(..., min_length=1, max_length=128)
    last_name: str = Field(..., min_length=1, max_length=128)
    date_of_birth: date
    gender: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    insurance_provider: str | None = None
    insurance_member_id: str | None = None
    status: str | None = None

    @field_validator("mrn", "first_name", "last_name", mode="before")
    @classmethod
    def strip_required_text(cls, v):
        # Whitespace-only values fail min_length and report as missing
        return v.strip() if isinstance(v, str) else v


class PatientUpdate(BaseModel):
    """
    Partial patient update.

    id, organization_id, created_at and created_by are not fields here,
    so they are dropped from any payload that carries them.
    """
    mrn: str | None = Field(None, min_length=1, max_length=64)
    first_name: str | None = Field(None, min_length=1, max_length=128)
    last_name: str | None = Field(None, min_length=1, max_length=128)
    date_of_birth: date | None = None
    gender: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    insurance_provider: str | None = None
    insurance_member_id: str | None = None
    status: str | None = None

    @field_validator("mrn", "first_name", "last_name", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class PatientRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    mrn: str
    first_name: str
    last_name: str
    date_of_birth: date
    gender: str | None
    phone: str | None
    email: str | None
    address: str | None
    city: str | None
    state: str | None
    zip_code: str | None
    insurance_provider: str | None
    insurance_member_id: str | None
    status: str
    created_at: datetime
    updated_at: datetime


class ClaimStats(BaseModel):
    total: int = 0
    denied: int = 0
    appealed: int = 0


class PatientDetail(PatientRead):
    claim_stats: ClaimStats = Field(default_factory=ClaimStats)


class PatientSummary(BaseModel):
    """Patient fields embedded in claim responses."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    mrn: str
    first_name: str
    last_name: str
    date_of_birth: date
