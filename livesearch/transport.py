"""HTTP transport between the widget and the search endpoint.

Uses httpx. The anti-forgery token is fetched once from ``/nonce`` and sent
with every search as a form field, mirroring what the rendered page embeds.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx

from .exceptions import TransportError
from .widget import SearchQuery

logger = logging.getLogger(__name__)

AUTH_FAILURE_STATUSES = {401, 403}


class SearchTransport:
    def __init__(
        self,
        *,
        base_url: str,
        nonce: Optional[str] = None,
        search_path: str = "/search",
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.nonce = nonce
        self.search_path = search_path
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Accept": "application/json"},
        )

    async def fetch_nonce(self) -> str:
        try:
            async with self._client() as client:
                resp = await client.get("/nonce")
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, json.JSONDecodeError) as exc:
            raise TransportError(f"Could not obtain a security token: {exc}") from exc
        self.nonce = str(data.get("nonce", ""))
        self.search_path = str(data.get("search_url") or self.search_path)
        return self.nonce

    async def search(self, query: SearchQuery) -> Dict[str, Any]:
        """POST the query and return the decoded ``{success, data}`` envelope."""
        if self.nonce is None:
            await self.fetch_nonce()
        form = query.to_form(self.nonce or "")
        try:
            async with self._client() as client:
                resp = await client.post(self.search_path, data=form)
        except httpx.HTTPError as exc:
            raise TransportError(f"Search request failed: {exc}") from exc

        if resp.status_code in AUTH_FAILURE_STATUSES:
            raise TransportError(f"Search request rejected with HTTP {resp.status_code}")
        try:
            envelope = resp.json()
        except json.JSONDecodeError as exc:
            raise TransportError(f"Undecodable search response: {exc}") from exc
        if not isinstance(envelope, dict):
            raise TransportError(f"Unexpected search response: {envelope!r}")
        logger.debug("search q=%r status=%s success=%s", query.text, resp.status_code, envelope.get("success"))
        return envelope
