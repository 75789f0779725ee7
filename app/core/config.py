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

    # Supabase
    SUPABASE_URL: str
    SUPABASE_KEY: str

    # Interview access tokens
    LINK_TOKEN_SECRET: str
    LINK_TOKEN_ALGORITHM: str = "HS256"
    SHARE_LINK_TTL_DAYS: int = 2
    EXAM_LINK_TTL_DAYS: int = 30
    INTERVIEW_FRONTEND_URL: str = "http://localhost:3000"

    # Multiple-choice answers are graded in the browser; disable to strip them
    EXPOSE_MCQ_ANSWERS: bool = True

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Logging
    LOG_LEVEL: str = "INFO"


settings = Settings()  # type: ignore[call-arg]
