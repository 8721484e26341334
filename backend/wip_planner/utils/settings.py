from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


ENV_PATH = Path(__file__).resolve().parents[2] / "configs/.env"
SECRETS_ENV_PATH = Path(__file__).resolve().parents[2] / "configs/secrets/.env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=[str(SECRETS_ENV_PATH), str(ENV_PATH)],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # App
    APP_ENV: str = "dev"
    APP_NAME: str = "wip-planner"
    LOG_LEVEL: str = "INFO"
    BASE_URL: str = "http://localhost:3000"
    API_BASE_URL: str = "http://localhost:8000"

    # Database
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "wip_planner"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""

    # Session
    SESSION_SECRET: str = "change-me-in-production"
    SESSION_COOKIE_NAME: str = "wip_session"
    SESSION_MAX_AGE_DAYS: int = 30
    SESSION_COOKIE_SECURE: bool = False

    # Identity providers
    AZURE_AD_CLIENT_ID: str | None = None
    AZURE_AD_CLIENT_SECRET: str | None = None
    AZURE_AD_TENANT_ID: str | None = None
    GOOGLE_CLIENT_ID: str | None = None
    GOOGLE_CLIENT_SECRET: str | None = None

    # Comma separated, empty means any domain may sign in
    ALLOWED_EMAIL_DOMAINS: str = ""

    # Receipts
    RECEIPT_MAX_BYTES: int = 10 * 1024 * 1024
    DEFAULT_CURRENCY: str = "INR"

    # Google Cloud Storage (optional receipt storage)
    GOOGLE_CLOUD_PROJECT_ID: str | None = None
    GOOGLE_CLOUD_BUCKET_NAME: str | None = None
    GOOGLE_APPLICATION_CREDENTIALS: str | None = None

    @computed_field
    @property
    def DATABASE_URL(self) -> str:  # noqa: N802 (FastAPI convention)
        return (
            f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def allowed_domains(self) -> list[str]:
        return [d.strip().lower() for d in self.ALLOWED_EMAIL_DOMAINS.split(",") if d.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
