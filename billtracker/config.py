"""Configuration management for the bill tracker."""

import logging
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Storage
    storage_backend: Literal["sqlite", "memory"] = "sqlite"
    data_dir: Path = Path.home() / ".billtracker"

    # Development mode
    dev_mode: bool = True

    # Insight tuning
    high_usage_units: float = 500.0  # Latest bill above this gets the "high usage" tips
    alert_multiplier: float = 1.5  # Default alert threshold = average units * multiplier

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # STORAGE_BACKEND and storage_backend both work
        extra="ignore",
    )

    @property
    def db_path(self) -> Path:
        """Get the SQLite database path."""
        suffix = "dev" if self.dev_mode else "prod"
        return self.data_dir / f"bills_{suffix}.db"

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def log_config(self) -> None:
        """Log current configuration."""
        logger.info("Storage backend:   %s", self.storage_backend)
        if self.storage_backend == "sqlite":
            logger.info("Database:          %s", self.db_path)
        logger.info("Dev mode:          %s", self.dev_mode)
        logger.info("High usage units:  %s", self.high_usage_units)
        logger.info("Alert multiplier:  %s", self.alert_multiplier)
        logger.info("API host:          %s:%s", self.api_host, self.api_port)


# Global settings instance
settings = Settings()
