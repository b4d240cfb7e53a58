"""Application configuration settings."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_default_database_url() -> str:
    """Get the default database URL, using the data volume path if available."""
    if os.path.isdir("/data"):
        return "sqlite:////data/homeops.db"
    return "sqlite:///./homeops.db"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "HomeOps"
    VERSION: str = "0.1.0"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Database - defaults to the data volume path if /data exists
    DATABASE_URL: str = _get_default_database_url()

    # Residence layout
    FLOOR_COUNT: int = 3

    # Utility portals
    SEDAPAL_EMAIL: str = ""
    SEDAPAL_PASSWORD: str = ""
    LUZDELSUR_EMAIL: str = ""
    LUZDELSUR_PASSWORD: str = ""
    CALIDDA_EMAIL: str = ""
    CALIDDA_PASSWORD: str = ""
    PROVIDER_TIMEOUT: float = 30.0

    # Chat bot
    GROUP_JID: str = ""
    TRIGGER_KEYWORD: str = "!reporte"
    TRIGGER_PAYMENTS: str = "!pagos"
    TRIGGER_MEDIDOR: str = "!medidor"
    TRIGGER_PISO: str = "!piso"
    SCHEDULE_DAY: int = 26
    SCHEDULE_HOUR: int = 9

    # Meter OCR
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"

    # Email
    RESEND_API_KEY: str = ""
    EMAIL_FROM: str = "HomeOps <onboarding@resend.dev>"
    EMAIL_TO: str = ""


settings = Settings()
