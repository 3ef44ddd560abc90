from __future__ import annotations

import random
import secrets
import string
from pathlib import Path

from backend.models.meeting_model import Attachment, StoredUpload
from backend.utils.time_utils import now_millis

TOKEN_ALPHABET = string.ascii_lowercase + string.digits


class LocalUploadStorage:
    """Keeps uploaded images on local disk and describes them when the vendor is unavailable.

    Files are never expired or cleaned up.
    """

    def __init__(self, base_dir: Path, url_prefix: str = "/uploads"):
        self.base_dir = base_dir
        self.url_prefix = url_prefix.rstrip("/")
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def generate_filename(self, fieldname: str, original_name: str) -> str:
        suffix = Path(original_name or "").suffix
        return f"{fieldname}-{now_millis()}-{random.randint(0, 10**9)}{suffix}"

    def save(self, fieldname: str, original_name: str, content: bytes) -> Path:
        path = self.base_dir / self.generate_filename(fieldname, original_name)
        path.write_bytes(content)
        return path

    def url_for(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    def describe(self, upload: StoredUpload) -> Attachment:
        return Attachment(
            id=str(now_millis()),
            name=upload.original_name,
            size=upload.size,
            mimeType=upload.mime_type,
            token="".join(secrets.choice(TOKEN_ALPHABET) for _ in range(11)),
            width=upload.width,
            height=upload.height,
            url=self.url_for(upload.filename),
        )
