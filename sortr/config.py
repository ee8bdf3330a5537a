import logging
from functools import lru_cache

from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_QUERY_LIMIT = 100
MAX_QUERY_LIMIT = 500

_MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_ENV: str = "development"
    BASE_URL: str = "http://localhost:8000"
    # No default: the process must not start without a signing secret.
    SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 7 * 24 * 60
    DATABASE_URL: str = "sqlite:///./data/sortr.db"
    UPLOAD_DIR: str = "data/uploads"
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    RATE_LIMIT_MAX_ATTEMPTS: int = 5
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:8080"]
    FIRST_ADMIN_USER: str | None = None
    FIRST_ADMIN_PASS: str | None = None
    GOOGLE_CLIENT_ID: str | None = None
    LOG_LEVEL: str = "INFO"

    @property
    def is_test(self) -> bool:
        return self.APP_ENV == "test"


def check_settings(settings: Settings) -> None:
    if len(settings.SECRET_KEY) < _MIN_SECRET_LENGTH:
        if settings.APP_ENV == "production":
            raise RuntimeError("SECRET_KEY is too short for production. Generate one with: openssl rand -base64 32")
        logger.warning("SECRET_KEY is shorter than %d characters, use a stronger one outside development", _MIN_SECRET_LENGTH)

    if settings.FIRST_ADMIN_USER and settings.FIRST_ADMIN_PASS in (None, "", "admin123"):
        if settings.APP_ENV == "production":
            raise RuntimeError("FIRST_ADMIN_PASS must be set to a real password in production")
        logger.warning("FIRST_ADMIN_PASS is empty or a default value, change it in .env")


@lru_cache
def load_settings() -> Settings:
    """Build the process settings once. Raises if SECRET_KEY is missing."""
    settings = Settings()
    check_settings(settings)
    return settings


def get_settings(request: Request) -> Settings:
    """Dependency: the settings instance the running app was built with."""
    return request.app.state.settings
