"""Runtime configuration — env-driven.

Centralized config using pydantic-settings for environment variable
support. Reads from a .env file and BEACONKEEP_* environment variables.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CompanionConfig(BaseSettings):
    """Companion configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export BEACONKEEP_LOG_LEVEL=DEBUG
        export BEACONKEEP_RETRY_INTERVAL_SECONDS=10

    Or via .env file::

        BEACONKEEP_TOKEN_ENCODING=ascii
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BEACONKEEP_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Acquisition timing
    retry_interval_seconds: float = Field(default=5.0, gt=0)
    notification_ttl_seconds: float = Field(default=2.0, gt=0)

    # Token handling: the token must decode as text in this encoding
    token_encoding: str = "ascii"

    # Direct keychain probe
    keychain_service: str = "com.apple.account.DeviceLocator.search-party-token"
    keychain_binary: str = "security"
    probe_timeout_seconds: float = 5.0

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level singleton, import as `from beaconkeep.config import config`
config = CompanionConfig()
