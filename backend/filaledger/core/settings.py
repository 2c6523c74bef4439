"""
FilaLedger - Configuration Management with pydantic-settings

Provides validated, type-safe configuration from environment variables.
All settings can be overridden via environment variables or .env file.
"""
from functools import lru_cache
from typing import Annotated, Optional, List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with validation.

    Environment variables take precedence over .env file values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # ===================
    # Application Settings
    # ===================
    PROJECT_NAME: str = "FilaLedger"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = Field(default=False, description="Enable debug mode")
    ENVIRONMENT: str = Field(default="development", description="deployment environment")

    # ===================
    # Storage Settings
    # ===================
    DATABASE_URL: str = Field(
        default="sqlite:///./filaledger.db",
        description="SQLAlchemy URL of the local store (sqlite:// for in-memory)"
    )
    SEED_BUILTIN_DATA: bool = Field(
        default=True,
        description="Seed the built-in taxonomy and preset catalog into an empty store"
    )

    # ===================
    # Statistics
    # ===================
    RECENT_RECORDS_LIMIT: int = Field(default=5, ge=1, description="Recent print records shown in statistics")

    # ===================
    # CORS Settings
    # ===================
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="Allowed CORS origins"
    )

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse comma-separated string to list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ===================
    # Printer Cloud Integration (optional, read-only)
    # ===================
    PRINTER_CLOUD_ENABLED: bool = Field(default=False, description="Poll the vendor cloud for print tasks")
    PRINTER_CLOUD_API_URL: str = Field(
        default="https://api.bambulab.com",
        description="Vendor cloud API base URL"
    )
    PRINTER_CLOUD_ACCESS_TOKEN: Optional[str] = Field(default=None, description="Bearer token for the vendor cloud")
    PRINTER_CLOUD_TASK_LIMIT: int = Field(default=50, ge=1, description="Number of recent tasks to fetch")
    PRINTER_CLOUD_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0, description="HTTP timeout for vendor calls")

    # ===================
    # Logging Settings
    # ===================
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="json", description="Log format: json or text")
    LOG_FILE: Optional[str] = Field(default=None, description="Log file path (optional)")
    AUDIT_LOG_FILE: Optional[str] = Field(default="./logs/audit.log", description="Audit log file path")

    @field_validator("LOG_FORMAT")
    @classmethod
    def normalize_log_format(cls, v: str) -> str:
        """Only json and text are understood; anything else falls back to json."""
        v = v.strip().lower()
        return v if v in ("json", "text") else "json"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.ENVIRONMENT.lower() == "development"

    @property
    def printer_cloud_configured(self) -> bool:
        """Polling needs both the switch and a token."""
        return self.PRINTER_CLOUD_ENABLED and bool(self.PRINTER_CLOUD_ACCESS_TOKEN)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to avoid re-reading environment on every call.
    """
    return Settings()


# Global settings instance
settings = get_settings()
