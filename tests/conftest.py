"""Pytest configuration for tests - in-memory SQLite sessions and shared fixtures."""

import logging
import os
from datetime import date

# Keep the CLI and config tests away from any developer database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from condosplit.models import Base  # noqa: E402
from condosplit.services.split_settings import SplitSettings  # noqa: E402


@pytest.fixture
def db_session():
    """Create test database session."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def default_settings() -> SplitSettings:
    return SplitSettings()


@pytest.fixture
def january():
    return date(2025, 1, 1), date(2025, 1, 31)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers and level that setup_logging attached during a test."""
    logger = logging.getLogger("condosplit")
    original_level = logger.level
    yield
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(original_level)
