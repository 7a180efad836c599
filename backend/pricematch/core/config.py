"""
Application configuration using pydantic-settings.

WHAT: Centralized config from environment variables
WHY: Type-safe, validated config with sensible defaults
HOW: Pydantic BaseSettings reads from .env and environment
"""

from pydantic_settings import BaseSettings
from pydantic import field_validator
from pathlib import Path


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App metadata
    APP_NAME: str = "PriceMatch Blind Negotiation"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./data/pricematch.db"

    # Blob storage (attachments)
    STORAGE_DIR: str = "./data/uploads"
    STORAGE_PUBLIC_BASE_URL: str = "http://localhost:8000/files"
    MAX_ATTACHMENT_BYTES: int = 10 * 1024 * 1024  # 10MB

    # Negotiation policy
    DEFAULT_EXPIRATION_DAYS: int = 7
    MAX_EXPIRATION_DAYS: int = 30
    DEAL_VALIDITY_DAYS: int = 7
    AGREED_PRICE_SPLIT: float = 0.5  # 0.5 = midpoint of buyer max and seller min

    # CORS - accepts comma-separated string or list
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, list):
            return ",".join(v)
        return v

    @field_validator("AGREED_PRICE_SPLIT")
    @classmethod
    def validate_split(cls, v: float) -> float:
        """Split must stay inside the overlap."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("AGREED_PRICE_SPLIT must be between 0 and 1")
        return v

    def get_cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "./data/logs/app.log"

    class Config:
        env_file = [
            str(Path(__file__).parent.parent.parent.parent / ".env"),  # repo root
            str(Path(__file__).parent.parent.parent / ".env"),  # backend/.env (fallback)
        ]
        env_file_encoding = "utf-8"
        case_sensitive = True


# Singleton instance
settings = Settings()
