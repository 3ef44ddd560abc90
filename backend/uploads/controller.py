from __future__ import annotations

import logging
from typing import Any

from backend.config import Settings, get_settings
from backend.errors import GatewayError, PayloadTooLarge, UnsupportedMediaType
from backend.models.meeting_model import StoredUpload
from backend.services.image_utils import read_dimensions
from backend.services.local_storage import LocalUploadStorage
from backend.services.vika_client import VikaClient

ALLOWED_TYPES = ("image/jpeg", "image/png", "image/gif")


class UploadController:
    """Sends uploaded images to the datasheet's attachment store, keeping a local copy to fall back on."""

    def __init__(self, vika: VikaClient, storage: LocalUploadStorage, settings: Settings | None = None):
        self.vika = vika
        self.storage = storage
        self.settings = settings or get_settings()
        self.logger = logging.getLogger(__name__)

    def check(self, content_type: str | None, size: int) -> None:
        if content_type not in ALLOWED_TYPES:
            raise UnsupportedMediaType("Only image files may be uploaded", allowed=list(ALLOWED_TYPES))
        if size > self.settings.upload_max_bytes:
            raise PayloadTooLarge(f"File exceeds the {self.settings.upload_max_bytes} byte limit")

    async def upload(self, fieldname: str, filename: str, content_type: str | None, content: bytes) -> dict[str, Any]:
        self.check(content_type, len(content))
        self.logger.info("Upload received: %s (%s, %d bytes)", filename, content_type, len(content))

        path = self.storage.save(fieldname, filename, content)
        try:
            width, height = read_dimensions(path)
        except OSError as exc:
            self.logger.exception("Could not read image metadata for %s", path.name)
            raise GatewayError("Image upload failed", error=str(exc)) from exc

        stored = StoredUpload(
            original_name=filename,
            filename=path.name,
            size=len(content),
            mime_type=content_type,
            width=width,
            height=height,
        )

        try:
            response = await self.vika.upload_attachment(filename, content, content_type)
        except Exception:
            self.logger.exception("Vika attachment upload failed, serving %s locally", path.name)
            return self._local(stored)
        if not response.get("success"):
            self.logger.warning("Vika rejected attachment upload (%s), serving %s locally", response.get("message"), path.name)
            return self._local(stored)
        return {"success": True, "source": "vika", "data": response.get("data")}

    def _local(self, stored: StoredUpload) -> dict[str, Any]:
        attachment = self.storage.describe(stored)
        self.logger.info("Using local copy at %s", attachment.url)
        return {"success": True, "source": "local", "data": attachment.model_dump()}
