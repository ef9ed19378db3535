"""Public lead-capture endpoints (no auth, rate-limited per IP)."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.cors import register_resource_methods
from app.core.deps import get_db
from app.core.rate_limit import limiter, public_limit
from app.schemas.public import (
    ContactCreate,
    DemoRequestCreate,
    LeadResponse,
    NewsletterSubscribe,
    SubmissionRef,
)
from app.services import lead_service
from app.services.lead_service import InvalidEmailError

router = APIRouter(prefix="/api", tags=["public"])
for _path in ("/api/demo-request", "/api/contact", "/api/newsletter/subscribe"):
    register_resource_methods(_path, ("POST", "OPTIONS"))


@router.post("/demo-request", status_code=201, response_model=LeadResponse)
@limiter.limit(public_limit)
def submit_demo_request(
    request: Request,
    data: DemoRequestCreate,
    db: Session = Depends(get_db),
):
    """Store a demo request and queue a best-effort CRM sync."""
    try:
        demo = lead_service.create_demo_request(db, data)
    except InvalidEmailError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return LeadResponse(
        message="Demo request submitted successfully",
        data=SubmissionRef(id=demo.id),
    )


@router.post("/contact", status_code=201, response_model=LeadResponse)
@limiter.limit(public_limit)
def submit_contact(
    request: Request,
    data: ContactCreate,
    db: Session = Depends(get_db),
):
    try:
        submission = lead_service.create_contact_submission(db, data)
    except InvalidEmailError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return LeadResponse(
        message="Message sent successfully",
        data=SubmissionRef(id=submission.id),
    )


@router.post("/newsletter/subscribe", status_code=201, response_model=LeadResponse)
@limiter.limit(public_limit)
def subscribe_newsletter(
    request: Request,
    data: NewsletterSubscribe,
    db: Session = Depends(get_db),
):
    try:
        subscriber = lead_service.subscribe(db, data)
    except InvalidEmailError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return LeadResponse(
        message="Subscribed successfully",
        data=SubmissionRef(id=subscriber.id),
    )
