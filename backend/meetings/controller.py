from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Awaitable, Callable

from backend.config import Settings, get_settings
from backend.errors import UpstreamError, ValidationError
from backend.models.meeting_model import REQUIRED_FIELDS, MeetingFields
from backend.services.vika_client import VikaClient

logger = logging.getLogger(__name__)


def coerce_number(value: Any) -> int | float | None:
    """Numeric coercion for ``conference_date`` with JavaScript ``Number()`` semantics.

    Blank strings become 0; anything unparseable becomes None, which is what
    a NaN turns into once the payload is JSON encoded.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return int(number) if number.is_integer() else number


def missing_fields(payload: dict[str, Any]) -> list[str]:
    # Truthiness check: 0 and "" count as missing, "0" does not.
    return [name for name in REQUIRED_FIELDS if not payload.get(name)]


class MeetingsController:
    def __init__(
        self,
        vika: VikaClient,
        settings: Settings | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.vika = vika
        self.settings = settings or get_settings()
        self._sleep = sleep

    async def list_meetings(self) -> dict[str, Any]:
        try:
            response = await self.vika.query(view_id=self.settings.vika_view_id)
        except Exception as exc:
            logger.exception("Listing meeting records failed")
            raise UpstreamError("Internal server error", with_code=True, error=str(exc)) from exc
        if not response.get("success"):
            logger.error("Vika rejected record query: %s", response)
            raise UpstreamError("Failed to list meeting records", with_code=True, error=response)
        return _ok("Meeting records fetched", response.get("data"))

    async def create_meeting(self, payload: dict[str, Any]) -> dict[str, Any]:
        logger.info("Create meeting request: %s", payload)
        self._require_fields(payload)

        fields = self._build_fields(payload)
        exclude = None if payload.get("conference_picture") else {"conference_picture"}
        record = {"fields": fields.model_dump(exclude=exclude)}

        attempts = max(1, self.settings.create_retry_attempts)
        last_error: Any = None
        for attempt in range(1, attempts + 1):
            logger.info("Creating record, attempt %d/%d", attempt, attempts)
            try:
                response = await self.vika.create([record])
            except Exception as exc:
                logger.exception("Vika create call raised on attempt %d", attempt)
                last_error = str(exc)
            else:
                if response.get("success"):
                    return _ok("Meeting record created", response.get("data"))
                logger.error("Vika rejected record create on attempt %d: %s", attempt, response)
                last_error = response
            if attempt < attempts:
                logger.info("Retrying in %.1fs", self.settings.create_retry_delay)
                await self._sleep(self.settings.create_retry_delay)

        logger.error("Giving up on record create after %d attempts", attempts)
        raise UpstreamError("Failed to create meeting record", with_code=True, error=last_error)

    async def update_meeting(self, record_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        self._require_fields(payload)

        fields = self._build_fields(payload)
        picture = payload.get("conference_picture")
        # Omitting the picture clears it; an explicit empty list is kept.
        fields.conference_picture = picture if picture or picture == [] else None
        record = {"recordId": record_id, "fields": fields.model_dump()}

        response = await self._call("update", self.vika.update([record]))
        if not response.get("success"):
            logger.error("Vika rejected update of %s: %s", record_id, response)
            raise UpstreamError("Failed to update meeting record", with_code=True, error=response)
        return _ok("Meeting record updated", response.get("data"))

    async def delete_meeting(self, record_id: str) -> dict[str, Any]:
        response = await self._call("delete", self.vika.delete([record_id]))
        if not response.get("success"):
            logger.error("Vika rejected delete of %s: %s", record_id, response)
            raise UpstreamError("Failed to delete meeting record", with_code=True, error=response)
        return _ok("Meeting record deleted", response.get("data"))

    async def _call(self, action: str, pending: Awaitable[dict[str, Any]]) -> dict[str, Any]:
        try:
            return await pending
        except Exception as exc:
            logger.exception("Vika %s call raised", action)
            raise UpstreamError("Internal server error", with_code=True, error=str(exc)) from exc

    @staticmethod
    def _require_fields(payload: dict[str, Any]) -> None:
        missing = missing_fields(payload)
        if missing:
            logger.info("Missing required fields: %s", missing)
            raise ValidationError("Missing required fields", with_code=True, required=list(REQUIRED_FIELDS))

    @staticmethod
    def _build_fields(payload: dict[str, Any]) -> MeetingFields:
        return MeetingFields(
            conference_date=coerce_number(payload.get("conference_date")),
            conference_location=payload.get("conference_location"),
            conference_theme=payload.get("conference_theme"),
            conference_content=payload.get("conference_content"),
            conference_picture=payload.get("conference_picture"),
        )


def _ok(message: str, data: Any) -> dict[str, Any]:
    return {"code": 200, "success": True, "message": message, "data": data}
