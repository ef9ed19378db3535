"""Schemas for public lead-capture endpoints (camelCase on the wire)."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DemoRequestCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(..., alias="fullName", min_length=1)
    email: str = Field(..., min_length=1)
    organization_name: str = Field(..., alias="organizationName", min_length=1)
    organization_type: str | None = Field(None, alias="organizationType")
    monthly_claim_volume: str | None = Field(None, alias="monthlyClaimVolume")


class ContactCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    subject: str | None = None


class NewsletterSubscribe(BaseModel):
    email: str = Field(..., min_length=1)
    name: str | None = None
    source: str | None = None


class SubmissionRef(BaseModel):
    id: UUID


class LeadResponse(BaseModel):
    success: bool = True
    message: str
    data: SubmissionRef | None = None
