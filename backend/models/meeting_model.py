from typing import Any

from pydantic import BaseModel

REQUIRED_FIELDS = ["conference_date", "conference_location", "conference_theme", "conference_content"]


class MeetingFields(BaseModel):
    """Field map sent to the datasheet, keyed by field name."""

    conference_date: int | float | None
    conference_location: Any
    conference_theme: Any
    conference_content: Any
    conference_picture: Any = None


class Attachment(BaseModel):
    id: str
    name: str
    size: int
    mimeType: str
    token: str
    width: int | None = None
    height: int | None = None
    url: str


class StoredUpload(BaseModel):
    original_name: str
    filename: str
    size: int
    mime_type: str
    width: int | None = None
    height: int | None = None
