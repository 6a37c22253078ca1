"""
Centralized settings configuration using Pydantic BaseSettings.

All environment variables are defined here with types, defaults, and validation.
Use get_settings() for dependency injection compatibility in FastAPI.

Usage:
    from backend.settings import get_settings, Settings

    # In FastAPI endpoints (dependency injection)
    @app.get("/")
    def read_root(settings: Settings = Depends(get_settings)):
        return {"environment": settings.environment}

    # Direct access (module-level)
    settings = get_settings()
    print(settings.rtf_cache_driver)
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.core.tm_step_strategies import STEP_STRATEGIES


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production, test",
    )
    port: int = Field(
        default=4000,
        description="HTTP port used by `python -m backend`",
    )

    # -------------------------------------------------------------------------
    # Supabase Database
    # -------------------------------------------------------------------------
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL",
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key (full access)",
    )
    supabase_anon_key: Optional[str] = Field(
        default=None,
        description="Supabase anonymous key (limited access)",
    )

    @property
    def supabase_key(self) -> Optional[str]:
        """Get the best available Supabase key (service role preferred)."""
        return self.supabase_service_role_key or self.supabase_anon_key

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------
    supabase_jwt_secret: Optional[str] = Field(
        default=None,
        description="Supabase JWT secret used to verify HS256 access tokens",
    )
    supabase_jwt_audience: str = Field(
        default="authenticated",
        description="Expected audience claim of Supabase access tokens",
    )
    api_keys: str = Field(
        default="",
        description="Comma-separated list of valid API keys",
    )

    @property
    def api_keys_list(self) -> list[str]:
        """Parse API keys into a list."""
        return [k.strip() for k in self.api_keys.split(",") if k.strip()]

    # -------------------------------------------------------------------------
    # RtF Cache
    # -------------------------------------------------------------------------
    rtf_cache_driver: str = Field(
        default="memory",
        description="Cache driver: memory, redis (alias external), layered",
    )
    rtf_cache_layered: bool = Field(
        default=True,
        description="Wrap the redis driver with an in-memory L1 tier",
    )
    rtf_redis_url: Optional[str] = Field(
        default=None,
        description="Redis URL for the external cache tier",
    )
    rtf_week_goal_ttl_sec: int = Field(
        default=600,
        gt=0,
        description="Default TTL for cached week goals and forecasts (seconds)",
    )
    rtf_week_goals_l1_ttl_ms: int = Field(
        default=5000,
        gt=0,
        description="L1 TTL of the layered driver (milliseconds)",
    )
    rtf_etag_enabled: bool = Field(
        default=True,
        description="Emit ETags and honour If-None-Match on RtF reads",
    )

    # -------------------------------------------------------------------------
    # TM Adjustments
    # -------------------------------------------------------------------------
    enable_tm_events: bool = Field(
        default=True,
        description="Expose the TM adjustment ledger endpoints",
    )
    max_tm_event_delta_kg: float = Field(
        default=15.0,
        gt=0,
        description="Largest absolute TM change accepted per adjustment (kg)",
    )
    tm_auto_adjust_strategy: str = Field(
        default="rounding_increment",
        description="Step strategy for automatic TM increases after an AMRAP set",
    )

    # -------------------------------------------------------------------------
    # Workout Sessions
    # -------------------------------------------------------------------------
    workout_session_timeout_hours: float = Field(
        default=48,
        gt=0,
        description="Abort in-progress sessions idle for longer than this",
    )
    workout_session_sweep_interval_min: float = Field(
        default=30,
        description="Minutes between stale-session sweeps (minimum 5)",
    )
    workout_session_sweep_enabled: bool = Field(
        default=True,
        description="Run the stale-session sweep in the app lifespan",
    )

    # -------------------------------------------------------------------------
    # Observability
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )
    metrics_ip_allowlist: str = Field(
        default="127.0.0.1,::1",
        description="Comma-separated client IPs allowed to scrape /metrics",
    )

    @property
    def metrics_ip_allowlist_set(self) -> set[str]:
        return {ip.strip() for ip in self.metrics_ip_allowlist.split(",") if ip.strip()}

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    @field_validator("rtf_cache_driver")
    @classmethod
    def validate_cache_driver(cls, v: str) -> str:
        """Normalize the driver name; 'external' is an alias of 'redis'."""
        driver = v.strip().lower()
        if driver == "external":
            driver = "redis"
        if driver not in {"memory", "redis", "layered"}:
            raise ValueError(
                f"Invalid RTF cache driver '{v}'. Must be one of: memory, redis, external, layered"
            )
        return driver

    @field_validator("tm_auto_adjust_strategy")
    @classmethod
    def validate_tm_strategy(cls, v: str) -> str:
        """Reject unknown strategy names at startup rather than per request."""
        name = v.strip().lower()
        if name not in STEP_STRATEGIES:
            raise ValueError(
                f"Invalid TM auto-adjust strategy '{v}'. Must be one of: {sorted(STEP_STRATEGIES)}"
            )
        return name

    @field_validator("workout_session_sweep_interval_min")
    @classmethod
    def clamp_sweep_interval(cls, v: float) -> float:
        return max(v, 5)

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
