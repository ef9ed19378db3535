"""Pydantic schemas for API request/response models."""

from app.schemas.auth import Identity, TenantContext, TokenPayload
from app.schemas.common import DataResponse, ListResponse, MessageResponse
from app.schemas.patient import PatientCreate, PatientDetail, PatientRead, PatientUpdate
from app.schemas.claim import (
    ClaimCreate,
    ClaimDetail,
    ClaimListItem,
    ClaimRead,
    ClaimUpdate,
    RiskAnalysisRead,
)
from app.schemas.appeal import (
    AppealCreate,
    AppealDetail,
    AppealGenerateRequest,
    AppealGenerateResponse,
    AppealListItem,
    AppealRead,
    AppealUpdate,
)
from app.schemas.profile import ProfileRead, ProfileUpdate

__all__ = [
    # Auth
    "TokenPayload",
    "Identity",
    "TenantContext",
    # Envelopes
    "DataResponse",
    "ListResponse",
    "MessageResponse",
    # Patient
    "PatientCreate",
    "PatientUpdate",
    "PatientRead",
    "PatientDetail",
    # Claim
    "ClaimCreate",
    "ClaimUpdate",
    "ClaimRead",
    "ClaimListItem",
    "ClaimDetail",
    "RiskAnalysisRead",
    # Appeal
    "AppealCreate",
    "AppealUpdate",
    "AppealRead",
    "AppealListItem",
    "AppealDetail",
    "AppealGenerateRequest",
    "AppealGenerateResponse",
    # Profile
    "ProfileRead",
    "ProfileUpdate",
]
