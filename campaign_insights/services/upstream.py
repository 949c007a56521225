"""
Upstream campaign analytics API client.

Thin async wrapper around the third-party email-campaign API (Instantly v2).
It performs the HTTP calls and parses the JSON into RawCampaignRecord /
CampaignDetail models; all reshaping happens in services/analytics.py.

Endpoints used:
- GET {base_url}/campaigns/analytics?id=&start_date=&end_date=
    Returns a JSON array of campaign analytics records.
- GET {base_url}/campaigns/{id}
    Returns one campaign's metadata (status, email_list, ...). 404 when unknown.

Failure policy:
    Transport errors, timeouts, non-2xx statuses (other than 404 on the detail
    lookup) and payloads that do not match the expected shape all raise
    UpstreamUnavailableError. The client never retries.
"""

import logging
from typing import Any, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from campaign_insights.core.config import Settings
from campaign_insights.core.exceptions import UpstreamUnavailableError
from campaign_insights.models.schemas import (
    AnalyticsFilter,
    CampaignDetail,
    RawCampaignRecord,
)


logger = logging.getLogger(__name__)

ANALYTICS_PATH: str = "/campaigns/analytics"
CAMPAIGN_PATH: str = "/campaigns/{campaign_id}"


class AnalyticsApiClient:
    """
    Async client for the upstream analytics API.

    The httpx.AsyncClient is owned by whoever created it (the FastAPI lifespan
    in production, a test fixture in tests); pass one in to share a
    connection pool or to inject an httpx.MockTransport.
    """

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    @classmethod
    def build_http_client(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> httpx.AsyncClient:
        """Create the shared httpx.AsyncClient configured from settings."""
        return httpx.AsyncClient(
            base_url=settings.upstream_base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {settings.upstream_api_key}",
                "Accept": "application/json",
            },
            timeout=settings.upstream_timeout_seconds,
            transport=transport,
        )

    async def _get(self, path: str, params: Optional[dict] = None) -> httpx.Response:
        try:
            return await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Upstream request to {path} failed: {e}")
            raise UpstreamUnavailableError(f"Upstream request failed: {e}") from e

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Upstream returned non-JSON body from {response.url.path}")
            raise UpstreamUnavailableError("Upstream returned an invalid response") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Upstream {response.url.path} returned {response.status_code}: "
                f"{response.text[:500]}"
            )
            raise UpstreamUnavailableError(
                f"Upstream returned status {response.status_code}"
            ) from e

    async def fetch_analytics(
        self,
        analytics_filter: Optional[AnalyticsFilter] = None,
    ) -> List[RawCampaignRecord]:
        """
        Fetch campaign analytics records.

        Args:
            analytics_filter: Optional campaign id and date window. Only the
                set fields are sent as query parameters.

        Returns:
            Records in the order the upstream returned them.

        Raises:
            UpstreamUnavailableError: On transport error, non-2xx status or
                unexpected payload shape.
        """
        params = (analytics_filter or AnalyticsFilter()).to_params()
        response = await self._get(ANALYTICS_PATH, params=params)
        self._raise_for_status(response)
        payload = self._json(response)

        if not isinstance(payload, list):
            logger.error(f"Upstream analytics payload is {type(payload).__name__}, expected list")
            raise UpstreamUnavailableError("Upstream returned an unexpected analytics payload")

        try:
            records = [RawCampaignRecord.model_validate(item) for item in payload]
        except ValidationError as e:
            logger.error(f"Upstream analytics record failed validation: {e}")
            raise UpstreamUnavailableError("Upstream returned malformed analytics records") from e

        logger.info(f"Fetched {len(records)} analytics records (filter={params})")
        return records

    async def fetch_campaign_detail(self, campaign_id: str) -> Optional[CampaignDetail]:
        """
        Fetch one campaign's status and mailbox list.

        Args:
            campaign_id: Campaign identifier.

        Returns:
            CampaignDetail, or None when the upstream does not know the campaign.

        Raises:
            UpstreamUnavailableError: On transport error, non-2xx status other
                than 404, or unexpected payload shape.
        """
        response = await self._get(CAMPAIGN_PATH.format(campaign_id=quote(campaign_id, safe="")))
        if response.status_code == 404:
            logger.info(f"Campaign {campaign_id} not found upstream")
            return None
        self._raise_for_status(response)
        payload = self._json(response)

        try:
            return CampaignDetail.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Upstream campaign {campaign_id} failed validation: {e}")
            raise UpstreamUnavailableError("Upstream returned a malformed campaign") from e
