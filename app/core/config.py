# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration — all env-driven, read once at import.
Single source of truth for every tunable parameter.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "roster-service")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8005"))

    # Empty DATABASE_URL keeps records in process memory.
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))

    # Empty EMAIL_API_URL switches to the logging mock transport.
    EMAIL_API_URL: str = os.getenv("EMAIL_API_URL", "")
    EMAIL_API_KEY: str = os.getenv("EMAIL_API_KEY", "")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", "membership@example.com")
    EMAIL_TIMEOUT: float = float(os.getenv("EMAIL_TIMEOUT", "5.0"))

    REMINDER_HORIZON_DAYS: int = int(os.getenv("REMINDER_HORIZON_DAYS", "7"))
    REMINDER_TIMEZONE: str = os.getenv("REMINDER_TIMEZONE", "UTC")

    SWEEP_ENABLED: bool = os.getenv("SWEEP_ENABLED", "true").lower() == "true"
    SWEEP_INTERVAL_SECONDS: float = float(os.getenv("SWEEP_INTERVAL_SECONDS", "86400"))
    SWEEP_WAIT_FIRST: bool = os.getenv("SWEEP_WAIT_FIRST", "false").lower() == "true"

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
