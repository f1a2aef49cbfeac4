# ==================================================================================
# core/config.py — Tenancy backend configuration (Pydantic v2 settings)
# ==================================================================================
from enum import Enum
from typing import Optional
import sys

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class Edition(str, Enum):
    COMMUNITY = "community"
    ENTERPRISE = "enterprise"
    CLOUD = "cloud"


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    # ------------------------
    # DATABASE CONFIG
    # ------------------------
    DATABASE_URL: str = "sqlite:///./tenantflow.db"

    # ------------------------
    # SECURITY CONFIG
    # ------------------------
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # ------------------------
    # DEPLOYMENT EDITION
    # ------------------------
    # community deployments skip every sign-up / sign-in policy gate
    EDITION: Edition = Edition.COMMUNITY
    CLOUD_PLATFORM_ID: Optional[int] = None

    # ------------------------
    # SIDE CHANNELS
    # ------------------------
    TELEMETRY_ENABLED: bool = False
    TELEMETRY_URL: Optional[str] = None
    NEWSLETTER_URL: Optional[str] = None
    OUTBOUND_TIMEOUT_SECONDS: float = 5.0

    # ------------------------
    # BILLING WEBHOOKS
    # ------------------------
    APPSUMO_TOKEN: Optional[str] = None

    # ------------------------
    # FRONTEND / INVITATIONS
    # ------------------------
    FRONTEND_URL: str = "http://localhost:5173"
    INVITATION_VALID_DAYS: int = 7

    # ------------------------
    # ENVIRONMENT SETTINGS
    # ------------------------
    ENVIRONMENT: Environment = Environment.DEVELOPMENT
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    @property
    def IS_PRODUCTION(self) -> bool:
        """Convenience helper to check if running in production"""
        return self.ENVIRONMENT == Environment.PRODUCTION

    @property
    def IS_COMMUNITY(self) -> bool:
        return self.EDITION == Edition.COMMUNITY

    # ------------------------
    # Pydantic v2 Settings
    # ------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# ------------------------
# Global Settings Loader
# ------------------------
try:
    settings = Settings()
except ValidationError as e:
    print("❌ Environment configuration error — missing or invalid settings!")
    print(e)
    sys.exit(1)
