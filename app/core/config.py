"""Application configuration via pydantic-settings.

Loads all settings from environment variables with sensible defaults.
A global `settings` singleton is available for import throughout the app.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Record store (Supabase)
    SUPABASE_URL: str
    SUPABASE_KEY: str
    CANDIDATES_TABLE: str = "candidates"

    # CV blob store
    UPLOAD_FOLDER: str = "uploads"

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Orphan CV sweep (0 disables the job)
    CV_SWEEP_INTERVAL_MINUTES: int = 0
    CV_SWEEP_MIN_AGE_MINUTES: int = 10

    # Logging
    LOG_LEVEL: str = "INFO"


settings = Settings()  # type: ignore[call-arg]
