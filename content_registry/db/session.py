"""Database session management and initialization."""

import logging
import threading
from collections.abc import Generator
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session as SQLAlchemySession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import Config
from .models import Base

logger = logging.getLogger(__name__)

_ALEMBIC_INI = Path(__file__).resolve().parent.parent.parent / "alembic.ini"

# Global engine and session factory
_engine = None
_SessionLocal = None

# Held for the lifetime of each session on a StaticPool engine
_single_connection_lock = threading.RLock()


def get_database_url() -> str:
    """Get database URL from configuration."""
    return Config.DATABASE_URL


def is_memory_url(database_url: str) -> bool:
    return database_url.startswith("sqlite") and (
        ":memory:" in database_url or database_url.rstrip("/") in ("sqlite:", "sqlite:/")
    )


def build_engine(database_url: str) -> Engine:
    """Create an engine with dialect-appropriate pooling."""
    echo = Config.DEBUG

    if is_memory_url(database_url):
        # One shared connection, so executor threads all see the same database
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )

    if database_url.startswith("sqlite"):
        # SQLite needs special handling for check_same_thread
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=echo,
        )

    # PostgreSQL / MySQL with connection pooling
    return create_engine(
        database_url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        echo=echo,
    )


def get_engine() -> Engine:
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        _engine = build_engine(get_database_url())
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine(),
        )
    return _SessionLocal


def reset_engine():
    """Dispose the global engine and session factory (useful for testing)."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def init_db():
    """Initialize the database: run Alembic migrations to head.

    In-memory SQLite cannot be migrated by Alembic (it opens its own
    connection, which would be a different database), so it goes straight
    to create_all().
    """
    database_url = get_database_url()
    if is_memory_url(database_url):
        Base.metadata.create_all(bind=get_engine())
        logger.info("In-memory database initialized via create_all")
        return

    try:
        from alembic import command
        from alembic.config import Config as AlembicConfig

        alembic_cfg = AlembicConfig(str(_ALEMBIC_INI))
        alembic_cfg.set_main_option("script_location", str(_ALEMBIC_INI.parent / "alembic"))
        # Override the URL with our environment-aware one
        alembic_cfg.set_main_option("sqlalchemy.url", database_url)
        alembic_cfg.attributes["configure_logger"] = False
        command.upgrade(alembic_cfg, "head")
        logger.info(f"Database initialized via Alembic: {database_url}")
    except Exception as e:
        # Fallback to create_all if Alembic isn't set up for this deployment
        logger.warning(f"Alembic migration failed ({e}), falling back to create_all()")
        Base.metadata.create_all(bind=get_engine())
        logger.info(f"Database initialized via create_all: {database_url}")


def _uses_single_connection(session_factory: sessionmaker) -> bool:
    bind = session_factory.kw.get("bind")
    return bind is not None and isinstance(bind.pool, StaticPool)


@contextmanager
def get_session(
    session_factory: Optional[sessionmaker] = None,
) -> Generator[SQLAlchemySession, None, None]:
    """Context manager for database sessions.

    Commits on clean exit, rolls back and re-raises on any exception.
    Sessions on a single-connection (StaticPool) engine run one at a time.

    Usage:
        with get_session() as session:
            session.query(...)
    """
    SessionLocal = session_factory or get_session_factory()
    guard = _single_connection_lock if _uses_single_connection(SessionLocal) else nullcontext()
    with guard:
        session = SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
