"""
Database connection management for the ArtistHub API.
Handles SQLAlchemy engine creation, session management, and connection verification.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# SQLAlchemy Base for model declarations
Base = declarative_base()

# Engine and SessionLocal are initialized by configure_database()
engine = None
SessionLocal = None


def _engine_kwargs(database_url, engine_options):
    kwargs = dict(engine_options or {})
    if database_url.startswith('sqlite'):
        # SQLite does not support server-side pooling options
        for key in ('pool_size', 'max_overflow', 'pool_recycle'):
            kwargs.pop(key, None)
        kwargs.setdefault('connect_args', {'check_same_thread': False})
        if database_url in ('sqlite://', 'sqlite:///:memory:'):
            # One shared connection so every session sees the same in-memory DB
            kwargs['poolclass'] = StaticPool
    return kwargs


def configure_database(database_url, engine_options=None):
    """
    Create the engine and session factory for the given URL.

    Replaces any previously configured engine, which is disposed.
    """
    global engine, SessionLocal

    if not database_url:
        logger.error("DATABASE_URL is not set!")
        raise RuntimeError(
            "DATABASE_URL not configured. Please set the DATABASE_URL environment variable."
        )

    if engine is not None:
        engine.dispose()

    try:
        engine = create_engine(database_url, **_engine_kwargs(database_url, engine_options))
    except Exception as e:
        logger.error(f"Failed to create database engine: {e}")
        raise RuntimeError(f"Failed to connect to database: {e}")

    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    logger.info(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
    return SessionLocal


def get_engine():
    """Get the configured SQLAlchemy engine."""
    if engine is None:
        raise RuntimeError("Database not configured. Call configure_database() first.")
    return engine


def get_session_factory():
    """Get the configured session factory."""
    if SessionLocal is None:
        raise RuntimeError("Database not configured. Call configure_database() first.")
    return SessionLocal


@contextmanager
def get_db_session(session_factory=None):
    """
    Context manager for getting a database session.
    Commits on success, rolls back on any exception.

    Example:
        with get_db_session() as db:
            customers = db.query(Customer).all()
    """
    factory = session_factory or get_session_factory()
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_db_connection():
    """
    Verify that the database connection is working.
    Returns True if connection is successful, raises exception otherwise.
    """
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        logger.debug("Database connection verified successfully")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise RuntimeError(f"Cannot connect to database: {e}")


def init_db():
    """
    Initialize the database by creating all tables.
    """
    # Import models to ensure they're registered with Base
    from database import models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())
    logger.info("Database tables created/verified")
