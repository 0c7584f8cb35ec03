from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # Content
    CONTENT_DIR: str = "content"
    CONTENT_EXTENSION: str = ".md"
    OUT_DIR: Optional[str] = None

    # Build
    STRICT: bool = False
    TAG_CASE_SENSITIVE: bool = True
    WORKERS: Optional[int] = Field(default=None, ge=1)
    WORDS_PER_MINUTE: int = 200

    # Logging
    LOG_LEVEL: str = "INFO"

    # Our own API Key
    FOLIO_API_KEY: str = ""

    @property
    def content_path(self) -> Path:
        return Path(self.CONTENT_DIR).expanduser()

    @property
    def out_path(self) -> Optional[Path]:
        return Path(self.OUT_DIR).expanduser() if self.OUT_DIR else None


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
