"""Service layer modules."""

# Import service modules (not individual functions) for cleaner access
from app.services import activity_service
from app.services import job_service
from app.services import patient_service
from app.services import claim_service
from app.services import appeal_service
from app.services import appeal_letter_service
from app.services import analytics_service
from app.services import profile_service
from app.services import lead_service

__all__ = [
    "activity_service",
    "job_service",
    "patient_service",
    "claim_service",
    "appeal_service",
    "appeal_letter_service",
    "analytics_service",
    "profile_service",
    "lead_service",
]
