"""
Engine configuration management with environment-based settings.
"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from functools import lru_cache

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
_LOG_FORMATS = {"json", "text"}


class Settings(BaseSettings):
    """Main engine settings."""

    # ============= Application Settings =============
    APP_NAME: str = "QBank Authoring"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development")

    # ============= Bulk Import Settings =============
    IMPORT_MAX_WORKERS: int = Field(default=4, ge=1)
    IMPORT_TIMEOUT_SECONDS: Optional[float] = Field(default=None, gt=0)
    IMPORT_MAX_RECORDS: int = Field(default=10000, ge=1)
    CSV_LIST_SEPARATOR: str = Field(default="|", min_length=1, max_length=1)

    # ============= Listing Settings =============
    DEFAULT_PAGE_SIZE: int = Field(default=20, ge=1)
    MAX_PAGE_SIZE: int = Field(default=100, ge=1)

    # ============= Validation Settings =============
    ESSAY_MIN_WORD_LIMIT: int = 10  # below this an essay word limit only warns

    # ============= Logging Settings =============
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = str(v).strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")
        return level

    @field_validator("LOG_FORMAT", mode="before")
    @classmethod
    def normalize_log_format(cls, v: str) -> str:
        fmt = str(v).strip().lower()
        if fmt not in _LOG_FORMATS:
            raise ValueError(f"LOG_FORMAT must be one of {sorted(_LOG_FORMATS)}")
        return fmt

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT.lower() == "production"

    def is_development(self) -> bool:
        """Check if running in development."""
        return self.ENVIRONMENT.lower() == "development"

    def is_testing(self) -> bool:
        """Check if running in testing."""
        return self.ENVIRONMENT.lower() == "testing"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

