"""Application configuration using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    APP_NAME: str = "Numbers Lottery"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # Auth (tokens are issued elsewhere, only verified here)
    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"

    # Storage
    LOTTERY_DB_PATH: Path = Path("./data/lottery.json")
    CORRUPTION_POLICY: Literal["reset", "backup", "fail"] = "reset"

    # Lottery limits
    MAX_TICKETS_PER_DRAW: int = 1000
    MAX_TICKETS_PER_USER: int = 100
    TICKETS_PAGE_SIZE: int = 20

    # Access policy
    ADMIN_ROLE: str = "admin"
    ADMIN_EMAIL_SUFFIX: str = "@admin.com"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Path | None = Path("logs/app.log")

    # Scheduled draws
    AUTO_DRAW_ENABLED: bool = False
    AUTO_DRAW_DAY_OF_WEEK: str = "tue,fri"
    AUTO_DRAW_HOUR: int = 21
    AUTO_DRAW_MINUTE: int = 0


settings = Settings()
