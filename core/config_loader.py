from __future__ import annotations
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Leave Ledger"
    DATABASE_URL: str = "sqlite:///./leave_ledger.db"
    DB_ECHO: bool = False
    BACKEND_CORS_ORIGINS: List[str] = []
    LOG_LEVEL: str = "INFO"
    # "text" or "json"
    LOG_FORMAT: str = "text"
    # IANA zone used to decide which calendar day "today" is
    TIMEZONE: str = "UTC"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
