"""Application configuration."""

import os

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Boost rules
    reference_timezone: str = os.getenv("REFERENCE_TIMEZONE", "America/New_York")
    daily_boost_cap: int = int(os.getenv("DAILY_BOOST_CAP", "3"))

    # Storage
    database_path: str = os.getenv("DATABASE_PATH", "data/boosts.db")

    # Server
    server_host: str = os.getenv("SERVER_HOST", "0.0.0.0")
    server_port: int = int(os.getenv("SERVER_PORT", "8000"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = False


settings = Settings()
