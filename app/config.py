from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ── Application ────────────────────────────────────────────────────────────
    app_name: str = "Energy Aggregation API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # ── Authentication (status endpoint only) ──────────────────────────────────
    api_key: str = "dev-api-key"

    # ── Database ───────────────────────────────────────────────────────────────
    database_url: str = "postgresql+asyncpg://wire:wire@db:5432/wire"
    database_read_only_url: str | None = None  # None → reads use database_url

    # ── Redis (query cache + Celery broker) ────────────────────────────────────
    redis_url: str = "redis://redis:6379/0"

    # ── Reading source ─────────────────────────────────────────────────────────
    energy_readings_file_path: str = "data/energy_readings.xlsx"
    energy_readings_sheet_name: str = "Sheet1"
    load_readings_on_startup: bool = True

    # ── Aggregation ────────────────────────────────────────────────────────────
    aggregate_cache_ttl_seconds: int = 300
    history_limit: int = 10

    @field_validator("aggregate_cache_ttl_seconds")
    @classmethod
    def validate_cache_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("aggregate_cache_ttl_seconds must be positive")
        return v

    @field_validator("history_limit")
    @classmethod
    def validate_history_limit(cls, v: int) -> int:
        if not 1 <= v <= 10:
            raise ValueError("history_limit must be between 1 and 10")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log_level '{v}'")
        return level

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
