# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres in production, SQLite for local dev/tests)
      - JWT_SECRET (HS256 secret shared with Supabase Auth)

    Optional:
      - SUPABASE_URL / SUPABASE_KEY (login + signup through Supabase Auth)
      - SUPABASE_SERVICE_ROLE_KEY (media uploads to Supabase Storage)
    """

    PROJECT_NAME: str = "Gul Autos API"
    API_V1_STR: str = "/api"

    DATABASE_URL: str

    # JWT verification (backend-side)
    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    # Supabase
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    STORAGE_BUCKET: str = "media"

    # Session cookie
    AUTH_COOKIE_NAME: str = "accessToken"
    COOKIE_SECURE: bool = True
    COOKIE_MAX_AGE_SECONDS: int = 24 * 60 * 60

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]

    # Products with stock at or below this count as "low stock"
    LOW_STOCK_THRESHOLD: int = 5

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
