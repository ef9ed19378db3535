"""Public lead capture: demo requests, contact form, newsletter."""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.enums import JobType, LeadStatus
from app.db.models import ContactSubmission, DemoRequest, NewsletterSubscriber
from app.jobs.utils import mask_email
from app.schemas.public import ContactCreate, DemoRequestCreate, NewsletterSubscribe
from app.services import job_service
from app.utils.normalization import is_valid_email, normalize_email, normalize_name

logger = logging.getLogger(__name__)

# At-most-once: the worker never re-runs a CRM sync
HUBSPOT_SYNC_MAX_ATTEMPTS = 1


class LeadServiceError(Exception):
    pass


class InvalidEmailError(LeadServiceError):
    def __init__(self):
        super().__init__("Invalid email format")


def _require_email(email: str) -> str:
    if not is_valid_email(email):
        raise InvalidEmailError()
    return normalize_email(email)


def hubspot_sync_key(demo_request_id) -> str:
    return f"hubspot_sync:{demo_request_id}"


def enqueue_hubspot_sync(db: Session, demo: DemoRequest) -> None:
    """
    Queue one CRM sync for a demo request.

    Failure to enqueue is logged and swallowed; the lead is already stored.
    """
    try:
        job_service.enqueue_job(
            db,
            job_type=JobType.HUBSPOT_SYNC,
            payload={"demo_request_id": str(demo.id)},
            idempotency_key=hubspot_sync_key(demo.id),
            max_attempts=HUBSPOT_SYNC_MAX_ATTEMPTS,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(
            "Failed to enqueue HubSpot sync for demo_request=%s: %s", demo.id, type(e).__name__
        )


def create_demo_request(db: Session, data: DemoRequestCreate) -> DemoRequest:
    email = _require_email(data.email)
    demo = DemoRequest(
        full_name=normalize_name(data.full_name),
        email=email,
        organization_name=data.organization_name.strip(),
        organization_type=data.organization_type,
        monthly_claim_volume=data.monthly_claim_volume,
        status=LeadStatus.PENDING.value,
    )
    db.add(demo)
    db.commit()
    db.refresh(demo)
    logger.info("Demo request received from %s", mask_email(email))

    enqueue_hubspot_sync(db, demo)
    return demo


def create_contact_submission(db: Session, data: ContactCreate) -> ContactSubmission:
    email = _require_email(data.email)
    submission = ContactSubmission(
        name=normalize_name(data.name),
        email=email,
        subject=data.subject,
        message=data.message,
        status=LeadStatus.UNREAD.value,
    )
    db.add(submission)
    db.commit()
    db.refresh(submission)
    logger.info("Contact submission received from %s", mask_email(email))
    return submission


def subscribe(db: Session, data: NewsletterSubscribe) -> NewsletterSubscriber:
    """Insert or re-activate a subscriber keyed by email."""
    email = _require_email(data.email)
    now = datetime.now(timezone.utc)
    subscriber = db.query(NewsletterSubscriber).filter(NewsletterSubscriber.email == email).first()
    if subscriber:
        subscriber.subscribed = True
        subscriber.subscribed_at = now
        subscriber.unsubscribed_at = None
        if data.name:
            subscriber.name = normalize_name(data.name)
    else:
        subscriber = NewsletterSubscriber(
            email=email,
            name=normalize_name(data.name),
            subscribed=True,
            subscribed_at=now,
            source=data.source or "website",
        )
        db.add(subscriber)
    db.commit()
    db.refresh(subscriber)
    return subscriber
