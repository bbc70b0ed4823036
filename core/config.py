"""
Configuration module for Clinic Service API.
Uses Pydantic BaseSettings for validation - app fails fast if required config is missing.
"""
import logging

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings with validation.
    Required fields will cause the app to fail fast if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # MongoDB Configuration
    clinic_svc_mongo_uri: str = Field(default="mongodb://localhost:27017", description="MongoDB connection URI")
    clinic_svc_mongo_db: str = Field(default="clinic", description="MongoDB database name")
    clinic_svc_mongo_timeout_ms: int = Field(default=5000, description="Server selection timeout in milliseconds")

    # API Configuration
    clinic_svc_host: str = Field(default="0.0.0.0", description="API host")
    clinic_svc_port: int = Field(default=3000, description="API port")
    clinic_svc_reload: bool = Field(default=False, description="Enable hot reload")

    # Pagination defaults for list endpoints
    clinic_svc_default_per_page: int = Field(default=30, ge=1, description="Default page size")
    clinic_svc_max_per_page: int = Field(default=100, ge=1, description="Maximum page size")

    # Token Authentication Configuration
    clinic_svc_jwt_secret: str = Field(
        ...,  # Required - no default means fail fast if missing
        description="Secret used to sign and verify bearer tokens",
        min_length=32,
    )
    clinic_svc_jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    clinic_svc_jwt_expiration_minutes: int = Field(default=15, ge=1, description="Access token lifetime")

    @model_validator(mode="after")
    def validate_pagination(self) -> "Settings":
        """Keep the default page size inside the allowed range."""
        if self.clinic_svc_default_per_page > self.clinic_svc_max_per_page:
            logger.warning(
                "Default page size exceeds maximum, clamping",
                extra={
                    "default_per_page": self.clinic_svc_default_per_page,
                    "max_per_page": self.clinic_svc_max_per_page,
                }
            )
            self.clinic_svc_default_per_page = self.clinic_svc_max_per_page
        return self


# Create global settings instance - fails fast if required config is missing
settings = Settings()

API_HOST = settings.clinic_svc_host
API_PORT = settings.clinic_svc_port
API_RELOAD = settings.clinic_svc_reload

MONGO_URI = settings.clinic_svc_mongo_uri
MONGO_DB = settings.clinic_svc_mongo_db

DEFAULT_PER_PAGE = settings.clinic_svc_default_per_page
MAX_PER_PAGE = settings.clinic_svc_max_per_page
