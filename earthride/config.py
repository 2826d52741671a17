"""Centralized configuration via pydantic-settings.

Spreadsheet ids, tab names, cache/rotation tuning and API knobs live here.
Override any value via environment variable (e.g., ``BLOG_SHEET_NAME=posts``).
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # --- Google Sheets ---
    GOOGLE_SHEETS_ID: str = ""  # Spreadsheet holding the blog / drives / admins tabs
    GOOGLE_SERVICE_ACCOUNT_JSON: SecretStr = SecretStr("")  # Inline service-account key (JSON)
    GOOGLE_SERVICE_ACCOUNT_FILE: str = ""  # Path to a service-account key file
    BLOG_SHEET_NAME: str = "blog"
    DRIVE_SHEET_NAME: str = "drives"
    ADMIN_SHEET_RANGE: str = "admins!A1:G1000"
    ADMIN_REQUIRED_FIELDS: list[str] = []  # Keys every admin record must carry on write

    # --- Presentation ---
    DRIVES_CACHE_TTL_SECONDS: int = 60
    BANNER_ROTATE_SECONDS: float = 5.0

    # --- API ---
    API_KEY: SecretStr = SecretStr("")  # When set, write routes require X-API-Key header
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]
    MAX_REQUEST_BODY_SIZE: int = 1_048_576  # 1 MiB; blog bodies carry full article content

    # --- Observability ---
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    VERSION: str = "0.1.0"

    model_config = {"env_prefix": "", "case_sensitive": True}

    @model_validator(mode="after")
    def validate_admin_range(self) -> "Settings":
        """The admin range must name its tab (``admins!A1:G1000``)."""
        tab, sep, cells = self.ADMIN_SHEET_RANGE.partition("!")
        if not sep or not tab or not cells:
            raise ValueError(
                f"ADMIN_SHEET_RANGE ({self.ADMIN_SHEET_RANGE!r}) must look like 'tab!A1:G1000'"
            )
        return self

    @model_validator(mode="after")
    def validate_rotation(self) -> "Settings":
        if self.BANNER_ROTATE_SECONDS <= 0:
            raise ValueError(
                f"BANNER_ROTATE_SECONDS ({self.BANNER_ROTATE_SECONDS}) must be positive"
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
