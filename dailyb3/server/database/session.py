"""SQLAlchemy database session management.

This module provides database engine configuration, session factory,
and dependency injection for FastAPI endpoints.
"""

import logging
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from dailyb3.server.config import settings

logger = logging.getLogger(__name__)

# SQLAlchemy declarative base for ORM models
Base = declarative_base()

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine, making the directory of a SQLite file if needed.

    Args:
        database_url: SQLAlchemy database URL
        echo: Log SQL statements

    Returns:
        SQLAlchemy engine
    """
    if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
        db_dir = Path(database_url[len("sqlite:///"):]).parent
        if not db_dir.exists():
            db_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created database directory: {db_dir}")

    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
        echo=echo,
    )


def init_engine() -> Engine:
    """Initialize the application engine from settings.

    Returns:
        Configured SQLAlchemy engine
    """
    global _engine

    if _engine is None:
        _engine = build_engine(settings.database_url, echo=settings.debug)
        logger.info(f"Database engine initialized: {settings.database_url}")

    return _engine


def get_session_factory() -> sessionmaker:
    """Get the application session factory."""
    global _SessionLocal

    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=init_engine())

    return _SessionLocal


def create_session_factory(database_url: str) -> sessionmaker:
    """Create tables on a database and return a session factory bound to it.

    Used by the CLI, which takes its database path on the command line.
    """
    engine = build_engine(database_url)
    _import_models()
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency for database sessions.

    Yields:
        SQLAlchemy database session, closed after the request
    """
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _import_models() -> None:
    # Register ORM models with Base.metadata
    from dailyb3.server.database import models  # noqa: F401


def create_tables() -> None:
    """Create all database tables."""
    engine = init_engine()
    _import_models()
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def check_database_connection() -> bool:
    """Check if database connection is working.

    Returns:
        True if connection is successful, False otherwise
    """
    try:
        engine = init_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
