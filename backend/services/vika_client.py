from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from backend.config import Settings, get_settings

logger = logging.getLogger(__name__)

FIELD_KEY = "name"


class VikaError(Exception):
    """Transport or protocol failure talking to the Vika Fusion API."""


class VikaClient:
    """Thin async wrapper over the datasheet endpoints of the Vika Fusion API.

    Every call returns the vendor's JSON envelope (``success``, ``code``,
    ``message``, ``data``) untouched, including ``success: false`` answers.
    Only failures that leave no envelope to return raise :class:`VikaError`.
    Connection errors and timeouts on record calls are retried ``vika_request_retries`` times
    with a fixed ``vika_retry_delay`` in between.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.settings = settings or get_settings()
        self.datasheet_id = self.settings.vika_datasheet_id
        self._sleep = sleep
        self.client = httpx.AsyncClient(
            base_url=self.settings.vika_base_url,
            timeout=self.settings.vika_timeout,
            headers={"Authorization": f"Bearer {self.settings.vika_token}"},
            transport=transport,
        )

    @property
    def records_path(self) -> str:
        return f"/datasheets/{self.datasheet_id}/records"

    @property
    def attachments_path(self) -> str:
        return f"/datasheets/{self.datasheet_id}/attachments"

    async def query(self, view_id: str | None = None, **params: Any) -> dict[str, Any]:
        query_params = {"fieldKey": FIELD_KEY, **params}
        if view_id:
            query_params["viewId"] = view_id
        return await self._request("GET", self.records_path, params=query_params)

    async def create(self, records: list[dict[str, Any]]) -> dict[str, Any]:
        return await self._request("POST", self.records_path, json={"records": records, "fieldKey": FIELD_KEY})

    async def update(self, records: list[dict[str, Any]]) -> dict[str, Any]:
        return await self._request("PATCH", self.records_path, json={"records": records, "fieldKey": FIELD_KEY})

    async def delete(self, record_ids: list[str]) -> dict[str, Any]:
        return await self._request("DELETE", self.records_path, params={"recordIds": record_ids})

    async def upload_attachment(self, filename: str, content: bytes, content_type: str) -> dict[str, Any]:
        files = {"file": (filename, content, content_type)}
        # Single attempt; a failed upload falls back to the local copy.
        return await self._request("POST", self.attachments_path, retries=0, files=files)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, path: str, retries: int | None = None, **kwargs: Any) -> dict[str, Any]:
        if retries is None:
            retries = self.settings.vika_request_retries
        retries = max(0, retries)
        for attempt in range(retries + 1):
            try:
                response = await self.client.request(method, path, **kwargs)
            except httpx.TransportError as exc:
                if attempt < retries:
                    logger.warning(
                        "Vika %s %s failed (%s), retry %d/%d in %.1fs",
                        method, path, exc, attempt + 1, retries, self.settings.vika_retry_delay,
                    )
                    await self._sleep(self.settings.vika_retry_delay)
                    continue
                raise VikaError(f"{method} {path} failed: {exc}") from exc
            return self._decode(response)
        raise VikaError(f"{method} {path} failed")  # pragma: no cover

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise VikaError(f"Unexpected response from Vika (HTTP {response.status_code})") from exc
        if not isinstance(payload, dict):
            raise VikaError(f"Unexpected response from Vika (HTTP {response.status_code})")
        return payload
