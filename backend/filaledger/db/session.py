"""
Database session management

The store is a single local SQLite database holding materials, presets,
print records and taxonomy labels. Sessions are opened per store call by
filaledger.services.store.Store, never shared between threads.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import logging

from filaledger.core.settings import settings
from filaledger.db.base import Base

logger = logging.getLogger(__name__)


def _is_memory_url(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:")


def create_db_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    In-memory SQLite needs a single shared connection (StaticPool), otherwise
    every checkout would see a fresh, empty database.
    """
    kwargs = {"echo": False}  # Set to True for SQL query logging
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_url(database_url):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def make_session_factory(bind: Engine) -> sessionmaker:
    # Entities returned from the store outlive their session; keep attributes loaded.
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


def init_db(bind: Engine) -> None:
    """Create all tables that do not exist yet."""
    # Import models so they register on Base.metadata
    from filaledger import models  # noqa: F401

    Base.metadata.create_all(bind=bind)
    logger.info("Database schema ready", extra={"url": str(bind.url)})


logger.info(f"Database: {settings.DATABASE_URL}")

engine = create_db_engine(settings.DATABASE_URL)

SessionLocal = make_session_factory(engine)
