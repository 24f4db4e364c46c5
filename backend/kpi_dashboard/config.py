from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Restaurant KPI Dashboard API"
    # Oldest month (YYYY-MM) the period selector may navigate back to.
    earliest_supported_period: str = "2025-09"
    # Locale code used for period labels ("nl" or "en").
    period_locale: str = "nl"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
