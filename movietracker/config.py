"""Configuration loading from .env file."""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file
load_dotenv()


class Config:
    """Application configuration."""

    # Remote movie service
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:3000/")
    NETWORK_TIMEOUT: int = int(os.getenv("NETWORK_TIMEOUT", "30"))  # seconds

    # Local store
    DATABASE_PATH: Path = Path(os.getenv("DATABASE_PATH", "data/movies.db"))

    # Options
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    SEARCH_DEBOUNCE_MS: int = int(os.getenv("SEARCH_DEBOUNCE_MS", "300"))
    SEARCH_MIN_LENGTH: int = int(os.getenv("SEARCH_MIN_LENGTH", "2"))

    # Web interface
    WEB_PORT: int = int(os.getenv("WEB_PORT", "19876"))
    SYNC_INTERVAL: int = int(os.getenv("SYNC_INTERVAL", "0"))  # minutes, 0 = off

    @classmethod
    def validate(cls) -> list[str]:
        """Validate configuration. Returns list of errors."""
        errors = []

        if not cls.API_BASE_URL.startswith(("http://", "https://")):
            errors.append("API_BASE_URL must start with http:// or https://")

        if cls.NETWORK_TIMEOUT <= 0:
            errors.append("NETWORK_TIMEOUT must be a positive number of seconds")

        if cls.SYNC_INTERVAL < 0:
            errors.append("SYNC_INTERVAL must be 0 (disabled) or a number of minutes")

        if cls.SEARCH_DEBOUNCE_MS < 0:
            errors.append("SEARCH_DEBOUNCE_MS must not be negative")

        return errors

    @classmethod
    def ensure_directories(cls) -> None:
        """Create database and logs directories if they don't exist."""
        cls.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
        Path("logs").mkdir(parents=True, exist_ok=True)
