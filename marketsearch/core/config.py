"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Store credentials are read here once and passed into
clients at construction time; no other module reads the environment.
"""

from functools import lru_cache

from pydantic import BaseModel, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from marketsearch.core.constants import DEFAULT_SEARCH_DEADLINE_SECONDS


class RateLimitBudget(BaseModel):
    """Admitted calls per sliding window for one search channel."""

    max_requests: int
    window_seconds: int

    @classmethod
    def parse(cls, value: str) -> "RateLimitBudget":
        """Parse a 'max_requests/window_seconds' string (e.g. '60/60')."""
        try:
            max_requests, window_seconds = (int(p) for p in value.split("/", 1))
        except ValueError as e:
            raise ValueError(
                f"Rate limit must look like '<max_requests>/<window_seconds>', got: {value!r}"
            ) from e
        if max_requests < 1 or window_seconds < 1:
            raise ValueError("Rate limit values must be positive integers")
        return cls(max_requests=max_requests, window_seconds=window_seconds)


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    The store is optional at load time: when store_backend is 'postgrest'
    and STORE_URL is unset, the app starts and search degrades to empty
    results (logged), matching the behavior of a missing store config.
    """

    # App
    app_name: str = "marketsearch"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Store: "postgrest" (HTTP filter grammar) or "postgres" (SQLAlchemy)
    store_backend: str = "postgrest"
    store_url: str = ""
    store_service_key: SecretStr = SecretStr("")
    store_timeout_seconds: float = 10.0
    database_url: str = ""
    database_echo: bool = False

    # Thumbnails
    storage_public_base_url: str | None = None
    listing_photos_bucket: str = "listing-photos"

    # Search
    search_deadline_seconds: float = DEFAULT_SEARCH_DEADLINE_SECONDS

    # Rate limiting (limits storage URI: memory://, redis://host:port, ...)
    rate_limit_storage_uri: str = "memory://"
    predictive_search_rate_limit: str = "60/60"
    general_search_rate_limit: str = "30/60"

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("predictive_search_rate_limit", "general_search_rate_limit")
    @classmethod
    def validate_rate_limit(cls, value: str) -> str:
        RateLimitBudget.parse(value)
        return value

    @field_validator("search_deadline_seconds", "store_timeout_seconds")
    @classmethod
    def validate_positive_seconds(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Timeouts must be positive")
        return value

    @field_validator("telemetry_sample_rate")
    @classmethod
    def validate_sample_rate(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("telemetry_sample_rate must be between 0.0 and 1.0")
        return value

    @model_validator(mode="after")
    def validate_store(self) -> "Settings":
        """Validate store backend and backend-specific fields.

        - postgrest: STORE_SERVICE_KEY required whenever STORE_URL is set.
        - postgres: DATABASE_URL required.
        """
        if self.store_backend == "postgrest":
            if self.store_url and not self.store_service_key.get_secret_value():
                raise ValueError(
                    "STORE_SERVICE_KEY is required when STORE_URL is set. "
                    "Set in environment or .env file."
                )
        elif self.store_backend == "postgres":
            if not self.database_url:
                raise ValueError(
                    "DATABASE_URL is required when store_backend is 'postgres'. "
                    "Set in environment or .env file."
                )
        else:
            raise ValueError(
                f"store_backend must be 'postgrest' or 'postgres', got: {self.store_backend!r}"
            )
        return self

    @property
    def store_configured(self) -> bool:
        """True when the selected backend has what it needs to run queries."""
        if self.store_backend == "postgres":
            return bool(self.database_url)
        return bool(self.store_url and self.store_service_key.get_secret_value())

    @property
    def resolved_storage_public_base_url(self) -> str | None:
        """Public object URL prefix; derived from store_url when not set."""
        if self.storage_public_base_url:
            return self.storage_public_base_url.rstrip("/")
        if self.store_url:
            return self.store_url.rstrip("/") + "/storage/v1/object/public"
        return None

    @property
    def predictive_search_budget(self) -> RateLimitBudget:
        return RateLimitBudget.parse(self.predictive_search_rate_limit)

    @property
    def general_search_budget(self) -> RateLimitBudget:
        return RateLimitBudget.parse(self.general_search_rate_limit)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
