"""HTTP request/response client built on httpx."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .base import RestClient, RestResponse, RestTransportError

logger = logging.getLogger(__name__)


class HttpxRestClient(RestClient):
    """REST client authenticating with a bot token."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://discord.com/api/v10",
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={
                "Authorization": f"Bot {token}",
                "User-Agent": "DiscordBot (trinketbot, 0.1.0)",
            },
        )

    async def call(self, method: str, path: str, body: Any = None) -> RestResponse:
        try:
            response = await self._client.request(method, path, json=body)
        except httpx.HTTPError as e:
            logger.error(f"REST {method} {path} failed: {e}")
            raise RestTransportError(f"{method} {path} failed: {e}") from e
        try:
            parsed = response.json() if response.content else {}
        except ValueError:
            parsed = {}
        if response.status_code >= 400:
            logger.error(f"REST {method} {path} -> {response.status_code}: {parsed}")
        return RestResponse(status_code=response.status_code, body=parsed)

    async def aclose(self) -> None:
        await self._client.aclose()
