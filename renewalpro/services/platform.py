"""Backend platform client: auth-provider admin API and hosted billing sessions.

Payment processing, checkout pages and user management all live on the
platform; this service only asks it for session URLs and user listings.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from renewalpro.core.config import settings
from renewalpro.core.exceptions import PlatformError

logger = logging.getLogger(__name__)


class PlatformClient:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 15,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={
                "apikey": self._api_key,
                "Authorization": f"Bearer {self._api_key}",
            },
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Platform %s %s returned %s", method, path, exc.response.status_code
            )
            raise PlatformError(
                f"Platform request failed with status {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Platform %s %s failed: %s", method, path, exc)
            raise PlatformError("Platform is unavailable, please try again") from exc

    # ------------------------------------------------------------------
    # Billing
    # ------------------------------------------------------------------

    async def create_checkout_session(
        self, *, user_id: str, email: Optional[str], tier: str, billing_cycle: str
    ) -> str:
        body = await self._request(
            "POST",
            "/functions/v1/create-checkout",
            json={
                "user_id": user_id,
                "email": email,
                "tier": tier,
                "billing_cycle": billing_cycle,
            },
        )
        url = body.get("url")
        if not url:
            raise PlatformError("Checkout session did not return a URL")
        return url

    async def create_portal_session(self, *, user_id: str, return_url: str) -> str:
        body = await self._request(
            "POST",
            "/functions/v1/customer-portal",
            json={"user_id": user_id, "return_url": return_url},
        )
        url = body.get("url")
        if not url:
            raise PlatformError("Billing portal did not return a URL")
        return url

    # ------------------------------------------------------------------
    # Auth admin
    # ------------------------------------------------------------------

    async def list_user_emails(self) -> Dict[str, str]:
        """Map auth user id to email for every user the platform knows about."""
        body = await self._request("GET", "/auth/v1/admin/users")
        users = body.get("users", []) if isinstance(body, dict) else []
        return {u["id"]: u["email"] for u in users if u.get("id") and u.get("email")}


_client: Optional[PlatformClient] = None


def get_platform() -> PlatformClient:
    """FastAPI dependency returning the process-wide platform client."""
    global _client
    if _client is None:
        _client = PlatformClient(
            settings.platform_url, settings.platform_api_key, settings.platform_timeout
        )
    return _client
