"""
StarTrack client configuration

All settings are read from STARTRACK_* environment variables (or a .env file).
Credentials have no defaults; clients can always be built from explicit
arguments instead of settings.
"""
import logging
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_API_HOST = "https://digitalapi.auspost.com.au"
DEFAULT_TIMEOUT_SECONDS = 15.0


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Credentials - NO DEFAULTS
    STARTRACK_API_KEY: str = ""
    STARTRACK_API_PASSWORD: str = ""
    STARTRACK_ACCOUNT_NUMBER: str = ""

    # Environment selection: switches /shipping/v1/ to /test/shipping/v1/
    STARTRACK_TEST_MODE: bool = False
    STARTRACK_API_HOST: str = DEFAULT_API_HOST

    # Bounded gateway timeout in seconds
    STARTRACK_TIMEOUT: float = DEFAULT_TIMEOUT_SECONDS

    # legacy | positional | reference
    STARTRACK_RECONCILIATION_MODE: str = "legacy"

    @field_validator("STARTRACK_API_HOST", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("STARTRACK_TIMEOUT")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("STARTRACK_TIMEOUT must be greater than zero")
        return v

    @field_validator("STARTRACK_RECONCILIATION_MODE", mode="before")
    @classmethod
    def normalize_mode(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in ("legacy", "positional", "reference"):
                raise ValueError(f"Unknown reconciliation mode: {v}")
        return v

    @property
    def has_credentials(self) -> bool:
        return bool(self.STARTRACK_API_KEY and self.STARTRACK_API_PASSWORD and self.STARTRACK_ACCOUNT_NUMBER)


@lru_cache()
def get_settings(env_file: Optional[str] = None) -> Settings:
    """Load settings once per process."""
    if env_file:
        settings = Settings(_env_file=env_file)
    else:
        settings = Settings()
    if not settings.has_credentials:
        logger.warning("StarTrack credentials are not fully configured")
    return settings
