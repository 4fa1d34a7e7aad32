"""Database connection, session management and schema bootstrap."""

import logging

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from condosplit.models import Base, Setting
from condosplit.services.split_settings import DEFAULT_SETTINGS

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str) -> Engine:
    """Create engine (SQLite uses StaticPool for simplicity in dev/test)."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create session factory bound to an engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> int:
    """Create all tables and insert default settings that are not present yet.

    Existing setting values are never overwritten.

    Returns:
        Number of settings inserted
    """
    Base.metadata.create_all(engine)

    session_factory = create_session_factory(engine)
    with session_factory() as db:
        existing = set(db.execute(select(Setting.key)).scalars().all())
        inserted = 0
        for key, (value, description) in DEFAULT_SETTINGS.items():
            if key in existing:
                continue
            db.add(Setting(key=key, value=value, description=description))
            inserted += 1
        db.commit()

    logger.info("Schema ready, %d default settings inserted", inserted)
    return inserted


__all__ = [
    "create_db_engine",
    "create_session_factory",
    "init_db",
]
