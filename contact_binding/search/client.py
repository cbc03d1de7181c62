"""HTTP adapter for the cross-scope contact search endpoint."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from contact_binding.binding.types import ContactRecord
from contact_binding.config import get_settings
from contact_binding.kernel.errors import UpstreamError

logger = structlog.get_logger()


class HttpContactSearchClient:
    """
    `searchGlobal(query)` over HTTP.

    Calls `GET {search_api_url}{search_path}?search=<query>&limit=<n>` and
    accepts either a bare JSON list or `{"data": [...]}`. Timeouts are owned
    here, not by the search controller.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        path: str | None = None,
        timeout_seconds: float | None = None,
        limit: int | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self._base_url = (base_url or settings.search_api_url).rstrip("/")
        self._path = path or settings.search_path
        self._timeout_seconds = timeout_seconds or settings.search_timeout_seconds
        self._limit = limit or settings.search_result_limit
        self._headers = dict(headers or {})
        self._transport = transport

    async def __call__(self, query: str) -> list[ContactRecord]:
        return await self.search(query)

    async def search(self, query: str) -> list[ContactRecord]:
        payload = await self._request_json(
            params={"search": query, "limit": self._limit},
        )
        items = payload.get("data") if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            raise UpstreamError(
                code="search.invalid_response",
                message="Contact search returned an unexpected payload",
                meta={"type": type(items).__name__},
            )

        records: list[ContactRecord] = []
        for item in items:
            if not isinstance(item, dict) or item.get("id") is None:
                logger.debug("Skipping search item without id")
                continue
            records.append(ContactRecord.from_api(item))
        return records

    async def _request_json(self, *, params: dict[str, Any]) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout_seconds,
                headers=self._headers,
                transport=self._transport,
            ) as client:
                response = await client.get(self._path, params=params)
            if response.status_code >= 400:
                details: dict[str, Any] = {}
                if response.content:
                    try:
                        details = response.json()
                    except ValueError:
                        details = {"body": response.text[:500]}
                raise UpstreamError(
                    code="search.request_failed",
                    message="Contact search request failed",
                    status_code=502 if response.status_code >= 500 else response.status_code,
                    meta={"status_code": response.status_code, "details": details},
                )
            if not response.content:
                return []
            return response.json()
        except UpstreamError:
            raise
        except Exception as exc:
            raise UpstreamError(
                code="search.request_failed",
                message="Contact search request failed",
                meta={"error": str(exc), "path": self._path},
            ) from exc
