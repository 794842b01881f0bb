"""
Bodyshop Operations Configuration
Core settings for the workshop operations API
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    # Application Info
    APP_NAME: str = "Bodyshop Operations API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./bodyshop.db"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    # CORS
    ALLOWED_HOSTS: List[str] = ["*"]  # Change in production
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",  # dashboard frontend
        "http://localhost:5173",
    ]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Path = Path("logs")
    LOG_FILE: str = "app.log"
    ERROR_LOG_FILE: str = "error.log"
    LOG_TO_FILE: bool = True

    # Business Logic Settings
    DEFAULT_CURRENCY: str = "IDR"
    MANAGER_ROLE_KEYWORD: str = "Manager"

    # Precision
    CURRENCY_DECIMAL_PLACES: int = 2
    QUANTITY_DECIMAL_PLACES: int = 3

    # API Configuration
    API_V1_STR: str = "/api/v1"
    DOCS_URL: str = "/docs"
    REDOC_URL: str = "/redoc"
    OPENAPI_URL: str = "/openapi.json"

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        """Accept any casing for the log level"""
        return v.upper()

    @field_validator("QUANTITY_DECIMAL_PLACES", "CURRENCY_DECIMAL_PLACES")
    @classmethod
    def check_places(cls, v: int) -> int:
        if v < 0 or v > 6:
            raise ValueError("decimal places must be between 0 and 6")
        return v


# Global settings instance
settings = Settings()

# Database connection string for SQLAlchemy
DATABASE_URL = settings.DATABASE_URL
