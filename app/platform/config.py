from functools import lru_cache
from pathlib import Path
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "PureBreed Pork Store API"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = False
    CORS_ALLOW_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # ── Database ────────────────────────────────
    DATABASE_URL: str

    # ── Identity provider (Supabase auth admin API) ──
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    IDENTITY_TIMEOUT: int = 15

    # ── Email Configuration ─────────────────────
    RESEND_API_KEY: str = ""
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_TIMEOUT: int = 30
    MAIL_FROM_ADDRESS: str = "onboarding@resend.dev"
    ADMIN_PIN_FROM_NAME: str = "Admin Access"
    STORE_FROM_NAME: str = "PureBreed Pork"

    # ── Admin PIN login ─────────────────────────
    ADMIN_PIN_TTL_MINUTES: int = 10
    ADMIN_DEFAULT_FULL_NAME: str = "Admin"
    ADMIN_ROLE: str = "admin"

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parent.parent.parent / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
