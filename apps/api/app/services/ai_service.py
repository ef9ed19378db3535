"""Client for the external AI service (appeal drafting and denial-risk scoring).

The service is a black box reached over HTTPS. No inference happens here;
responses are relayed and stored as returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from app.jobs.utils import safe_url

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    """Transport failure or non-2xx response from the AI service."""

    pass


class AIServiceNotConfiguredError(AIServiceError):
    """The endpoint URL for this capability is not set."""

    pass


@dataclass
class AppealDraft:
    letter: str
    confidence_score: float | None = None
    citations: list | None = field(default=None)


def _as_float(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _as_citations(value: object) -> list | None:
    if value is None or isinstance(value, list):
        return value
    return [value]


class AIClient:
    """Thin async client. One instance per request; no retries."""

    def __init__(
        self,
        appeals_url: str = "",
        risk_url: str = "",
        api_key: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.appeals_url = appeals_url
        self.risk_url = risk_url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @property
    def appeals_configured(self) -> bool:
        return bool(self.appeals_url)

    @property
    def risk_configured(self) -> bool:
        return bool(self.risk_url)

    async def _post(self, url: str, payload: dict) -> dict:
        if not url:
            raise AIServiceNotConfiguredError("AI endpoint not configured")

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("AI request failed: %s (%s)", safe_url(url), type(e).__name__)
            raise AIServiceError(f"AI request failed: {type(e).__name__}") from e

        if response.status_code >= 300:
            logger.warning("AI service returned %s for %s", response.status_code, safe_url(url))
            raise AIServiceError(f"AI service returned {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise AIServiceError("AI service returned invalid JSON") from e
        if not isinstance(data, dict):
            raise AIServiceError("AI service returned unexpected payload")
        return data

    async def generate_appeal(self, payload: dict) -> AppealDraft:
        """
        Ask the AI service for an appeal letter.

        Raises:
            AIServiceNotConfiguredError: appeals URL unset
            AIServiceError: transport error, non-2xx, or no letter in the response
        """
        data = await self._post(self.appeals_url, payload)
        letter = data.get("letter")
        if not isinstance(letter, str) or not letter.strip():
            raise AIServiceError("AI service returned no letter")
        return AppealDraft(
            letter=letter,
            confidence_score=_as_float(data.get("confidence_score")),
            citations=_as_citations(data.get("citations")),
        )

    async def score_denial_risk(self, payload: dict) -> dict:
        """
        Ask the AI service to score a claim. Returns the JSON body verbatim.

        Raises:
            AIServiceNotConfiguredError: risk URL unset
            AIServiceError: transport error or non-2xx
        """
        return await self._post(self.risk_url, payload)
