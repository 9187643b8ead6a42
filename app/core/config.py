"""Application configuration powered by pydantic-settings."""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CorsMode = Literal["allowlist", "open", "disabled"]


class Settings(BaseSettings):
    """Centralized strongly-typed configuration loaded from `.env`."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    PROJECT_NAME: str = "Message Service"
    PROJECT_VERSION: str = "1.0.0"

    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # allowlist: echo only known origins; open: wildcard; disabled: rely on the dev proxy
    CORS_MODE: CorsMode = "allowlist"
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
        "http://localhost:3000",
    ]
    CORS_ALLOW_CREDENTIALS: bool = True

    FRONTEND_HOST: str = "0.0.0.0"
    FRONTEND_PORT: int = 5173
    API_BASE_URL: str = Field("http://localhost:3000", description="Backend origin the frontend dev proxy forwards /api to")
    API_MESSAGE_PATH: str = "/api/message"
    # unset: the view resolves API_MESSAGE_PATH against the page origin, through the /api proxy
    VIEW_BASE_URL: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Cache and return a singleton Settings instance to avoid re-parsing env."""
    return Settings()


settings = get_settings()
