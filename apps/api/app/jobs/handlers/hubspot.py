"""HubSpot CRM sync job handlers."""

from __future__ import annotations

import logging
from uuid import UUID

from app.db.enums import LeadStatus
from app.db.models import DemoRequest
from app.jobs.utils import mask_email

logger = logging.getLogger(__name__)


def _default_client():
    from app.core.deps import get_hubspot_client

    return get_hubspot_client()


async def process_hubspot_sync(db, job, client=None) -> None:
    """
    Push a demo request to HubSpot as a contact plus deal.

    Payload:
        - demo_request_id: UUID of the DemoRequest row
    """
    demo_request_id = (job.payload or {}).get("demo_request_id")
    if not demo_request_id:
        raise ValueError("Missing demo_request_id in job payload")

    demo = db.get(DemoRequest, UUID(demo_request_id))
    if not demo:
        raise ValueError(f"DemoRequest {demo_request_id} not found")

    client = client or _default_client()
    result = await client.sync_demo_request(
        email=demo.email,
        full_name=demo.full_name,
        organization_name=demo.organization_name,
        organization_type=demo.organization_type,
        monthly_claim_volume=demo.monthly_claim_volume,
    )
    if result.skipped:
        return

    demo.status = LeadStatus.CONTACTED.value
    db.commit()
    logger.info(
        "HubSpot sync done for %s (contact=%s deal=%s)",
        mask_email(demo.email),
        result.contact_id,
        result.deal_id,
    )
