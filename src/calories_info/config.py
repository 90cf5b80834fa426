"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from calories_info.domain.stats import DailyTargets

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    fdc_api_key: str | None = None
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_timeout_seconds: float = 1.5
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_timeout_seconds: float = 8.0
    translate_enabled: bool = True
    translate_base_url: str = "https://translate.googleapis.com/translate_a/single"
    translate_timeout_seconds: float = 2.0
    translate_source_language: str = "ru"
    translate_target_language: str = "en"
    search_default_limit: int = 10
    search_max_limit: int = 25
    search_mode: str = "fallback"
    search_use_estimator: bool = False
    search_cache_ttl_seconds: float = 3600.0
    daily_kcal_target: float | None = None
    daily_protein_target: float | None = None
    daily_fat_target: float | None = None
    daily_carbs_target: float | None = None
    stats_timezone: str = "UTC"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def daily_targets(self) -> DailyTargets:
        """Return the configured daily macro targets."""
        return DailyTargets(
            kcal=self.daily_kcal_target,
            protein=self.daily_protein_target,
            fat=self.daily_fat_target,
            carbs=self.daily_carbs_target,
        )


def blank_to_none(raw: str | None) -> str | None:
    """Treat empty or whitespace-only secrets as unset."""
    if raw is None:
        return None
    cleaned = raw.strip()
    return cleaned or None
