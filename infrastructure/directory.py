# ============================================================================
# DIRECTORY CLIENT (MICROSOFT GRAPH)
# ============================================================================
# STATUS: Infrastructure - External directory API client
# PURPOSE: Caller profile and direct reports via Graph
# EXPORTS: DirectoryClient
# DEPENDENCIES: httpx, config.DirectoryConfig, core.models.UserProfile
# ============================================================================
"""
Directory Client.

Calls Microsoft Graph with the caller's delegated bearer token. One
client per request, since the token belongs to the caller.

Failure policy:
    get_me and get_direct_reports raise UpstreamError on HTTP
    errors and transport failures. get_profile_or_none is the non-fatal
    variant for optional enrichment and returns None instead.

Usage:
    async with DirectoryClient(token) as directory:
        profile = await directory.get_profile_or_none()
        reports = await directory.get_direct_reports()
"""

from typing import Any, Dict, List, Optional

import httpx

from config import DirectoryConfig, get_config
from config.defaults import DirectoryDefaults
from core.models import UserProfile
from exceptions import UpstreamError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "DirectoryClient")

_USER_ODATA_TYPE = "#microsoft.graph.user"


class DirectoryClient:
    """Microsoft Graph client for profile and reporting-line lookups."""

    def __init__(
        self,
        access_token: Optional[str],
        config: Optional[DirectoryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            access_token: Delegated Graph token for the caller
            config: Directory settings (defaults to get_config().directory)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.config = config or get_config().directory
        self.base_url = self.config.base_url.rstrip('/')
        self._access_token = access_token
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            if self._access_token:
                headers["Authorization"] = f"Bearer {self._access_token}"
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout_seconds),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "DirectoryClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        if not self._access_token:
            raise UpstreamError("No directory access token available for the caller")

        client = await self._get_client()
        try:
            response = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            logger.warning(f"Directory timeout after {self.config.timeout_seconds}s: {url}")
            raise UpstreamError(f"Directory API timeout after {self.config.timeout_seconds}s") from e
        except httpx.RequestError as e:
            logger.warning(f"Directory request error: {e}")
            raise UpstreamError(f"Directory API request error: {e}") from e

        if response.status_code >= 400:
            logger.warning(f"Directory API {response.status_code} for {url}: {response.text[:200]}")
            raise UpstreamError(f"Directory API error {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("Directory API returned invalid JSON") from e

    async def get_me(self) -> UserProfile:
        """Profile of the caller."""
        data = await self._get_json(
            f"{self.base_url}/me",
            params={"$select": DirectoryDefaults.PROFILE_FIELDS},
        )
        return UserProfile.model_validate(data)

    async def get_direct_reports(self) -> List[UserProfile]:
        """
        Users reporting directly to the caller.

        Follows @odata.nextLink paging. Non-user directory objects (org
        contacts) are skipped.
        """
        reports: List[UserProfile] = []
        url: Optional[str] = f"{self.base_url}/me/directReports"
        params: Optional[Dict[str, str]] = {"$select": DirectoryDefaults.PROFILE_FIELDS}
        while url:
            data = await self._get_json(url, params=params)
            for item in data.get("value", []):
                odata_type = item.get("@odata.type")
                if odata_type and odata_type != _USER_ODATA_TYPE:
                    continue
                reports.append(UserProfile.model_validate(item))
            url = data.get("@odata.nextLink")
            # nextLink already carries the query string
            params = None
        return reports

    async def get_profile_or_none(self) -> Optional[UserProfile]:
        """Caller profile, or None when the directory is unavailable."""
        try:
            return await self.get_me()
        except UpstreamError as e:
            logger.warning(f"Profile enrichment skipped: {e}")
            return None
