"""HubSpot CRM client for best-effort lead sync.

Called only from the background worker. Every call is a single attempt;
failures surface as HubSpotError for the job to record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from app.jobs.utils import mask_email
from app.utils.normalization import split_full_name

logger = logging.getLogger(__name__)

CONTACTS_PATH = "/crm/v3/objects/contacts"
CONTACT_SEARCH_PATH = "/crm/v3/objects/contacts/search"
DEALS_PATH = "/crm/v3/objects/deals"
DEAL_TO_CONTACT_ASSOCIATION_TYPE = 3
DEFAULT_TIMEOUT = 15.0


class HubSpotError(Exception):
    """Transport failure or non-2xx response from HubSpot."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HubSpotSyncResult:
    contact_id: str | None = None
    deal_id: str | None = None
    skipped: bool = False


def _compact(properties: dict) -> dict:
    return {key: value for key, value in properties.items() if value}


class HubSpotClient:
    def __init__(
        self,
        access_token: str = "",
        base_url: str = "https://api.hubapi.com",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token)

    async def _request(self, method: str, path: str, payload: dict) -> dict:
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(method, path, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise HubSpotError(f"HubSpot request failed: {type(e).__name__}") from e

        if response.status_code >= 300:
            raise HubSpotError(
                f"HubSpot API error: {response.status_code}", status_code=response.status_code
            )
        try:
            return response.json()
        except ValueError:
            return {}

    async def find_contact_by_email(self, email: str) -> dict | None:
        data = await self._request(
            "POST",
            CONTACT_SEARCH_PATH,
            {
                "filterGroups": [
                    {"filters": [{"propertyName": "email", "operator": "EQ", "value": email}]}
                ]
            },
        )
        results = data.get("results") or []
        return results[0] if results else None

    async def create_contact(
        self,
        email: str,
        first_name: str | None = None,
        last_name: str | None = None,
        company: str | None = None,
    ) -> dict | None:
        """
        Create a contact.

        A 409 (contact already exists) is not an error; the existing contact
        is looked up and returned instead.
        """
        properties = _compact(
            {"email": email, "firstname": first_name, "lastname": last_name, "company": company}
        )
        try:
            return await self._request("POST", CONTACTS_PATH, {"properties": properties})
        except HubSpotError as e:
            if e.status_code == 409:
                logger.info("HubSpot contact already exists for %s", mask_email(email))
                return await self.find_contact_by_email(email)
            raise

    async def upsert_contact(
        self,
        email: str,
        first_name: str | None = None,
        last_name: str | None = None,
        company: str | None = None,
    ) -> dict | None:
        existing = await self.find_contact_by_email(email)
        if existing:
            return existing
        return await self.create_contact(email, first_name, last_name, company)

    async def create_deal(
        self,
        name: str,
        description: str | None = None,
        contact_id: str | None = None,
    ) -> dict:
        body: dict = {
            "properties": _compact(
                {
                    "dealname": name,
                    "pipeline": "default",
                    "dealstage": "appointmentscheduled",
                    "description": description,
                }
            )
        }
        if contact_id:
            body["associations"] = [
                {
                    "to": {"id": contact_id},
                    "types": [
                        {
                            "associationCategory": "HUBSPOT_DEFINED",
                            "associationTypeId": DEAL_TO_CONTACT_ASSOCIATION_TYPE,
                        }
                    ],
                }
            ]
        return await self._request("POST", DEALS_PATH, body)

    async def sync_demo_request(
        self,
        *,
        email: str,
        full_name: str,
        organization_name: str,
        organization_type: str | None = None,
        monthly_claim_volume: str | None = None,
        create_deal: bool = True,
    ) -> HubSpotSyncResult:
        """Upsert the contact and open a demo deal linked to it."""
        if not self.is_configured:
            logger.info("HubSpot not configured - skipping sync")
            return HubSpotSyncResult(skipped=True)

        first_name, last_name = split_full_name(full_name)
        contact = await self.upsert_contact(
            email, first_name=first_name, last_name=last_name, company=organization_name
        )
        result = HubSpotSyncResult(contact_id=str(contact["id"]) if contact and contact.get("id") else None)

        if create_deal and result.contact_id:
            deal = await self.create_deal(
                name=f"Demo Request - {organization_name}",
                description=(
                    f"Organization Type: {organization_type or 'N/A'}\n"
                    f"Monthly Claim Volume: {monthly_claim_volume or 'N/A'}"
                ),
                contact_id=result.contact_id,
            )
            result.deal_id = str(deal.get("id")) if deal.get("id") else None
        return result
