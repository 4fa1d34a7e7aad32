"""Configuration loading for the apportionment CLI and database access.

Loads settings from .env file and environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

SUPPORTED_URL_PREFIXES = ("sqlite", "postgresql", "mysql")


@dataclass
class AppConfig:
    """Runtime configuration."""

    database_url: str = "sqlite:///./condosplit.db"
    """SQLAlchemy database URL (default: local SQLite)"""

    log_file: str = "logs/condosplit.log"
    """Path to log file (default: logs/condosplit.log)"""


def load_config(env_file: str | Path = ".env") -> AppConfig:
    """
    Load configuration from .env file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (DATABASE_URL, LOG_FILE)
    2. .env file in project root
    3. Default values

    Returns:
        AppConfig with all settings

    Raises:
        ValueError: If DATABASE_URL uses an unsupported backend
    """
    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)

    database_url = os.getenv("DATABASE_URL", AppConfig.database_url)
    log_file = os.getenv("LOG_FILE", AppConfig.log_file)

    if not database_url.startswith(SUPPORTED_URL_PREFIXES):
        raise ValueError(
            f"Unsupported DATABASE_URL: {database_url}. "
            f"Expected one of: {', '.join(SUPPORTED_URL_PREFIXES)}"
        )

    return AppConfig(database_url=database_url, log_file=log_file)
