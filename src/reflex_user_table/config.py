"""Runtime settings for the data source, the HTTP client and the table.

Values are read from ``USER_TABLE_*`` environment variables (and a local
``.env`` file, if present), e.g.::

    USER_TABLE_USERS_FILE=data/users.json
    USER_TABLE_BACKEND_URL=http://localhost:8000
    USER_TABLE_PAGE_SIZE=50
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Settings shared by the backend, the CLI and the Reflex table."""

    model_config = SettingsConfigDict(
        env_prefix="USER_TABLE_",
        case_sensitive=False,
        extra="ignore",
    )

    # -- Data source --
    users_file: Path = Path("users.json")
    host: str = "127.0.0.1"
    # Reflex's frontend owns 3000, so the API defaults to the Reflex backend port.
    port: int = Field(8000, ge=1, le=65535)
    cors_origins: list[str] = ["*"]

    # -- Client --
    backend_url: str = "http://localhost:8000"
    request_timeout: float = Field(10.0, gt=0)
    page_size: int = Field(50, ge=1)

    # -- Table --
    row_height: int = Field(50, ge=1)
    viewport_height: int = Field(600, ge=1)
    overscan: int = Field(10, ge=0)
    debounce_ms: int = Field(200, ge=0)
    load_threshold_px: int = Field(200, ge=0)
    # Sessions of tabs that closed without unmounting are dropped after this.
    session_idle_seconds: float = Field(1800.0, gt=0)

    @field_validator("backend_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("backend_url must start with http:// or https://")
        return value.rstrip("/")

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""
    return Settings()
