"""Application configuration loaded from environment variables.

Settings for the HTTP surface, LLM providers, rate limiting, and the
interview's tunable thresholds. Uses pydantic-settings for validation and
.env file support.
"""

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # API
    # 0.0.0.0 binds to all network interfaces (required for Docker containers)
    api_host: str = "0.0.0.0"  # nosec B104
    api_port: int = 8000

    # CORS (Security)
    # Never set to ["*"] when allow_credentials=True
    allowed_origins: list[str] = ["http://localhost:3000"]

    # LLM Providers
    llm_provider: Literal["claude", "openai", "gemini"] = "claude"
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    google_api_key: str = ""
    llm_timeout_seconds: float = 30.0
    llm_max_tokens: int = 1024
    llm_temperature: float = 0.7

    # Application
    environment: str = "development"

    # Interview behaviour
    # Fields below this confidence are returned for confirmation, not merged.
    field_confidence_threshold: float = 0.7
    # Consecutive backend failures before the client is pointed at form mode.
    max_consecutive_errors: int = 3
    # Older history is dropped before it reaches the backend.
    max_history_messages: int = 40

    # Rate Limiting (Security)
    # Format: "count/period" (e.g., "10/minute", "100/hour")
    rate_limit_turns: str = "20/minute"
    rate_limit_enabled: bool = True  # Disable for testing
    # Any `limits` storage URI: "memory://", "redis://host:6379", ...
    rate_limit_storage_uri: str = "memory://"

    @model_validator(mode="after")
    def check_settings(self) -> "Settings":
        """Validate cross-field invariants.

        Checks:
        - CORS must not use wildcard origin (incompatible with credentials)
        - Confidence threshold must lie in [0, 1]
        - Consecutive error threshold must be positive
        - History window must be positive
        """
        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "This application uses credentials (cookies) which are "
                "incompatible with wildcard CORS origins."
            )
            raise ValueError(msg)

        if not 0.0 <= self.field_confidence_threshold <= 1.0:
            msg = (
                "FIELD_CONFIDENCE_THRESHOLD must be between 0 and 1. "
                f"Got: {self.field_confidence_threshold}"
            )
            raise ValueError(msg)

        if self.max_consecutive_errors <= 0:
            msg = (
                "MAX_CONSECUTIVE_ERRORS must be positive. "
                f"Got: {self.max_consecutive_errors}"
            )
            raise ValueError(msg)

        if self.max_history_messages <= 0:
            msg = (
                "MAX_HISTORY_MESSAGES must be positive. "
                f"Got: {self.max_history_messages}"
            )
            raise ValueError(msg)

        return self


settings = Settings()
