from __future__ import annotations

import logging

import httpx

from backend.errors import UpstreamError

logger = logging.getLogger(__name__)


class ImageProxyController:
    """Fetches remote images server side so the browser never sends its own Referer.

    Any URL is fetched; there is no allow-list or size cap.
    """

    def __init__(self, client: httpx.AsyncClient, referer: str):
        self.client = client
        self.referer = referer

    async def fetch(self, url: str) -> tuple[bytes, str | None]:
        try:
            response = await self.client.get(url, headers={"Referer": self.referer})
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("Image proxy fetch of %s failed: %s", url, exc)
            raise UpstreamError("Failed to fetch image", error=str(exc)) from exc
        return response.content, response.headers.get("content-type")
