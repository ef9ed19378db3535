"""Tests for public lead capture and the at-most-once CRM sync job."""
import uuid

import httpx
import pytest
from httpx import AsyncClient

from app import worker
from app.db.enums import JobType
from app.db.models import ContactSubmission, DemoRequest, Job, NewsletterSubscriber
from app.jobs.handlers import hubspot as hubspot_handler
from app.services.hubspot_service import HubSpotClient
from app.services import job_service
from app.services.lead_service import HUBSPOT_SYNC_MAX_ATTEMPTS, hubspot_sync_key

DEMO_BODY = {
    "fullName": "  Ann   Lee ",
    "email": "Ann.Lee@NorthClinic.org",
    "organizationName": "North Clinic",
    "organizationType": "hospital",
    "monthlyClaimVolume": "1000-5000",
}


async def _submit_demo(client: AsyncClient) -> str:
    response = await client.post("/api/demo-request", json=DEMO_BODY)
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["success"] is True
    return body["data"]["id"]


def _job_for(db, demo_id: str) -> Job:
    db.expire_all()
    job = job_service.get_job_by_key(db, hubspot_sync_key(demo_id))
    assert job is not None
    return job


# =============================================================================
# Lead capture
# =============================================================================

@pytest.mark.asyncio
async def test_demo_request_stored_and_sync_enqueued(client: AsyncClient, db):
    demo_id = await _submit_demo(client)

    demo = db.get(DemoRequest, uuid.UUID(demo_id))
    assert demo.email == "ann.lee@northclinic.org"
    assert demo.full_name == "Ann Lee"
    assert demo.status == "pending"

    job = _job_for(db, demo_id)
    assert job.job_type == "hubspot_sync"
    assert job.status == "pending"
    assert job.max_attempts == HUBSPOT_SYNC_MAX_ATTEMPTS == 1
    assert job.payload == {"demo_request_id": demo_id}


@pytest.mark.asyncio
async def test_demo_request_invalid_email(client: AsyncClient, db):
    response = await client.post("/api/demo-request", json={**DEMO_BODY, "email": "not-an-email"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid email format"}
    assert db.query(DemoRequest).count() == 0


@pytest.mark.asyncio
async def test_demo_request_required_fields(client: AsyncClient):
    response = await client.post("/api/demo-request", json={"email": "ann@northclinic.org"})
    assert response.status_code == 400
    assert response.json() == {"error": "Required fields: fullName, organizationName"}


@pytest.mark.asyncio
async def test_contact_submission(client: AsyncClient, db):
    response = await client.post(
        "/api/contact",
        json={"name": "Bo", "email": "bo@northclinic.org", "message": "Pricing?", "subject": "Sales"},
    )
    assert response.status_code == 201
    assert response.json()["message"] == "Message sent successfully"

    submission = db.query(ContactSubmission).one()
    assert submission.status == "unread"
    assert submission.subject == "Sales"


@pytest.mark.asyncio
async def test_newsletter_resubscribe_keeps_one_row(client: AsyncClient, db):
    first = await client.post("/api/newsletter/subscribe", json={"email": "Cy@NorthClinic.org"})
    assert first.status_code == 201

    db.query(NewsletterSubscriber).update({"subscribed": False})
    db.commit()

    second = await client.post("/api/newsletter/subscribe", json={"email": "cy@northclinic.org", "name": "Cy"})
    assert second.status_code == 201
    assert second.json()["data"]["id"] == first.json()["data"]["id"]

    db.expire_all()
    subscriber = db.query(NewsletterSubscriber).one()
    assert subscriber.subscribed is True
    assert subscriber.name == "Cy"


# =============================================================================
# Worker
# =============================================================================

@pytest.mark.asyncio
async def test_worker_skips_sync_when_crm_unconfigured(client: AsyncClient, db):
    demo_id = await _submit_demo(client)

    processed = await worker.run_once(db)
    assert processed == 1

    job = _job_for(db, demo_id)
    assert job.status == "completed"
    assert db.get(DemoRequest, uuid.UUID(demo_id)).status == "pending"


@pytest.mark.asyncio
async def test_worker_failed_sync_is_not_retried(client: AsyncClient, db, monkeypatch):
    demo_id = await _submit_demo(client)
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500, json={"message": "internal"})

    monkeypatch.setattr(
        hubspot_handler,
        "_default_client",
        lambda: HubSpotClient(access_token="hs-token", transport=httpx.MockTransport(handler)),
    )

    assert await worker.run_once(db) == 1
    job = _job_for(db, demo_id)
    assert job.status == "failed"
    assert job.attempts == 1
    assert "HubSpotError" in job.last_error
    assert len(calls) == 1

    # A second pass never picks the job up again
    assert await worker.run_once(db) == 0
    assert len(calls) == 1

    # The lead itself is unaffected
    assert db.get(DemoRequest, uuid.UUID(demo_id)).status == "pending"


@pytest.mark.asyncio
async def test_worker_successful_sync_marks_contacted(client: AsyncClient, db, monkeypatch):
    demo_id = await _submit_demo(client)

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/contacts/search"):
            return httpx.Response(200, json={"results": []})
        if request.url.path.endswith("/contacts"):
            return httpx.Response(201, json={"id": "501"})
        return httpx.Response(201, json={"id": "901"})

    monkeypatch.setattr(
        hubspot_handler,
        "_default_client",
        lambda: HubSpotClient(access_token="hs-token", transport=httpx.MockTransport(handler)),
    )

    await worker.run_once(db)

    job = _job_for(db, demo_id)
    assert job.status == "completed"
    assert job.completed_at is not None
    assert db.get(DemoRequest, uuid.UUID(demo_id)).status == "contacted"


@pytest.mark.asyncio
async def test_unknown_job_type_fails_without_retry(db):
    job = Job(job_type="mystery", payload={}, max_attempts=1)
    db.add(job)
    db.commit()

    await worker.run_once(db)

    db.refresh(job)
    assert job.status == "failed"
    assert "Unknown job type" in job.last_error


def test_enqueue_is_idempotent_per_key(db):
    first = job_service.enqueue_job(db, JobType.HUBSPOT_SYNC, {"demo_request_id": "x"}, idempotency_key="k-1")
    second = job_service.enqueue_job(db, JobType.HUBSPOT_SYNC, {"demo_request_id": "y"}, idempotency_key="k-1")
    assert second.id == first.id
    assert db.query(Job).count() == 1
