"""Appeal drafting: AI-first with a deterministic template fallback."""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from app.core.async_utils import run_async
from app.db.enums import AppealActivityType, AppealStatus
from app.db.models import Appeal, Claim
from app.schemas.appeal import AppealGenerateRequest
from app.schemas.claim import ClaimRead, PayerSummary
from app.schemas.patient import PatientSummary
from app.services import activity_service, appeal_service
from app.services.ai_service import AIClient, AIServiceError
from app.utils.normalization import parse_uuid

logger = logging.getLogger(__name__)

DEFAULT_DENIAL_REASON = "Medical Necessity"

MESSAGE_AI = "Appeal generated using AI"
MESSAGE_TEMPLATE_UNCONFIGURED = "Appeal generated using template (AI service not configured)"
MESSAGE_TEMPLATE_FALLBACK = "Appeal generated using template (AI service unavailable)"

LETTER_TEMPLATE = """\
[Organization Letterhead]

{today}

{payer_name}
Appeals Department
[Payer Address]

RE: Request for Reconsideration of Denied Claim

Patient: {patient_name}
Claim Number: {claim_number}
Date of Service: {service_date}
Billed Amount: ${billed_amount}
Reason Given for Denial: {reason}

To the Appeals Committee:

We ask that you reconsider the denial of the claim referenced above. We have
reviewed the stated reason for denial against the patient's medical record and
believe the claim qualifies for payment.

SERVICES PROVIDED:
The care delivered on {service_date} was medically necessary to treat the
patient's condition and was consistent with accepted standards of practice.

BASIS FOR APPEAL:
The claim was denied for "{reason}". We disagree with this determination:

1. The clinical findings at the time of service supported the care provided.
2. Treatment followed established clinical guidelines.
3. The submitted documentation substantiates the need for these services.

ENCLOSURES:
- Medical records for the date of service
- Physician notes and orders
- Relevant diagnostic results
- Letter of medical necessity from the treating physician

REQUEST:
Please overturn the denial and process this claim for payment under the terms
of the patient's plan. We are glad to supply any further information you need.

Sincerely,

[Provider Name]
[Provider NPI]
[Contact Information]
"""


class AppealGenerationError(Exception):
    pass


class GenerateClaimNotFoundError(AppealGenerationError):
    pass


def load_claim(db: Session, org_id: UUID, claim_id: object) -> Claim:
    parsed = parse_uuid(claim_id)
    claim = None
    if parsed:
        claim = (
            db.query(Claim)
            .options(joinedload(Claim.patient), joinedload(Claim.payer))
            .filter(Claim.id == parsed, Claim.organization_id == org_id)
            .first()
        )
    if not claim:
        raise GenerateClaimNotFoundError()
    return claim


def render_template_letter(claim: Claim, denial_reason: str | None, today: date | None = None) -> str:
    """Deterministic letter built only from stored claim data."""
    patient = claim.patient
    patient_name = f"{patient.first_name} {patient.last_name}" if patient else "Patient"
    return LETTER_TEMPLATE.format(
        today=(today or date.today()).isoformat(),
        payer_name=claim.payer.name if claim.payer else "Insurance Company",
        patient_name=patient_name,
        claim_number=claim.claim_number,
        service_date=claim.service_date.isoformat() if claim.service_date else "",
        billed_amount=f"{claim.billed_amount:.2f}" if claim.billed_amount is not None else "",
        reason=denial_reason or claim.denial_reason or DEFAULT_DENIAL_REASON,
    ).strip()


def build_ai_payload(claim: Claim, denial_reason: str | None, additional_context: str | None) -> dict:
    claim_data = ClaimRead.model_validate(claim).model_dump(mode="json")
    claim_data["patient"] = (
        PatientSummary.model_validate(claim.patient).model_dump(mode="json") if claim.patient else None
    )
    claim_data["payer"] = (
        PayerSummary.model_validate(claim.payer).model_dump(mode="json") if claim.payer else None
    )
    return {
        "claim": claim_data,
        "denial_reason": denial_reason or claim.denial_reason,
        "additional_context": additional_context,
    }


def generate_appeal(
    db: Session,
    org_id: UUID,
    user_id: UUID,
    request: AppealGenerateRequest,
    ai_client: AIClient,
) -> tuple[Appeal, bool, str]:
    """
    Draft and store an appeal for a claim.

    Returns (appeal, ai_used, message).

    Raises:
        GenerateClaimNotFoundError: Claim outside org
    """
    claim = load_claim(db, org_id, request.claim_id)
    denial_reason = request.denial_reason or claim.denial_reason

    letter = None
    confidence = None
    citations = None
    ai_used = False
    message = MESSAGE_TEMPLATE_UNCONFIGURED

    if ai_client.appeals_configured:
        try:
            draft = run_async(
                ai_client.generate_appeal(
                    build_ai_payload(claim, denial_reason, request.additional_context)
                )
            )
        except AIServiceError as e:
            logger.warning(
                "AI appeal generation failed, using template: %s",
                type(e).__name__,
                extra={"org_id": str(org_id), "claim_id": str(claim.id)},
            )
            message = MESSAGE_TEMPLATE_FALLBACK
        else:
            letter = draft.letter
            confidence = draft.confidence_score
            citations = draft.citations
            ai_used = True
            message = MESSAGE_AI

    if letter is None:
        letter = render_template_letter(claim, denial_reason)

    appeal = appeal_service.insert_appeal(
        db,
        org_id,
        claim,
        user_id,
        {
            "denial_reason": denial_reason,
            "letter_content": letter,
            "status": AppealStatus.DRAFT.value,
            "ai_generated": True,
            "ai_confidence_score": confidence,
            "ai_citations": citations,
            "deadline_date": appeal_service.default_deadline(claim),
        },
    )
    activity_service.record_activity(
        db,
        appeal_id=appeal.id,
        organization_id=org_id,
        activity_type=AppealActivityType.CREATED,
        user_id=user_id,
        description="AI-generated appeal created" if ai_used else "Template appeal created",
        details={"ai_generated": True, "confidence_score": confidence},
    )
    return appeal, ai_used, message
