from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

ROOT_DIR = Path(__file__).resolve().parents[1]

SECRET_FIELDS = {"vika_token"}


class Settings(BaseSettings):
    api_host: str = "0.0.0.0"
    api_port: int = Field(3000, validation_alias=AliasChoices("api_port", "port"))
    api_debug: bool = False
    log_level: str = "INFO"
    cors_origins: Annotated[List[str], NoDecode] = ["*"]

    vika_token: str = ""
    vika_datasheet_id: str = ""
    vika_view_id: str | None = None
    vika_base_url: str = "https://api.vika.cn/fusion/v1"
    vika_timeout: float = 60.0
    vika_request_retries: int = 5
    vika_retry_delay: float = 3.0

    create_retry_attempts: int = 3
    create_retry_delay: float = 2.0

    upload_dir: Path = ROOT_DIR / "uploads"
    static_dir: Path = ROOT_DIR / "public"
    upload_max_bytes: int = 10 * 1024 * 1024
    proxy_referer: str = "https://vika.cn/"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            items = [item.strip() for item in value.split(",") if item.strip()]
            default_value = cls.model_fields["cors_origins"].default  # type: ignore[index]
            return items or default_value
        return value

    @field_validator("upload_dir", "static_dir")
    @classmethod
    def anchor_to_root(cls, value: Path) -> Path:
        # Relative directories are relative to the repository, not the working directory.
        return value if value.is_absolute() else ROOT_DIR / value

    def worst_case_create_seconds(self) -> float:
        """Upper bound for one create call: local retries around transport retries around the timeout."""
        per_call = (self.vika_request_retries + 1) * self.vika_timeout + self.vika_request_retries * self.vika_retry_delay
        attempts = max(1, self.create_retry_attempts)
        return attempts * per_call + (attempts - 1) * self.create_retry_delay

    class Config:
        env_file = str(ROOT_DIR / ".env")
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def env_template() -> str:
    """Render a ``.env`` file listing every setting with its default; secrets are left blank."""
    lines = ["# Meeting Records Gateway settings"]
    for name, field in Settings.model_fields.items():
        key = "PORT" if name == "api_port" else name.upper()
        value = "" if name in SECRET_FIELDS or field.default is None else field.default
        if isinstance(value, list):
            value = ",".join(value)
        elif isinstance(value, Path):
            value = value.relative_to(ROOT_DIR)
        lines.append(f"{key}={value}")
    return "\n".join(lines) + "\n"
