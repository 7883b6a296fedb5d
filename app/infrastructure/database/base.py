"""Database base configuration"""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.domain.errors import ConcurrencyConflictError
from app.infrastructure.config.settings import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str):
    """Create an engine with connect args matching the database type"""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # in-memory databases live in a single connection
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        logger.info("Using SQLite database: %s", database_url)
        return create_engine(database_url, **kwargs)

    if database_url.startswith("postgresql"):
        logger.info(
            "Using PostgreSQL database: %s@%s:%s", settings.DB_NAME, settings.DB_HOST, settings.DB_PORT
        )
        return create_engine(
            database_url,
            pool_pre_ping=True,  # Verify connections before using
            pool_size=10,
            max_overflow=20,
        )

    raise ValueError(f"Unsupported database URL: {database_url}")


engine = build_engine(settings.get_database_url())

# autocommit=False: the unit of work commits explicitly
# autoflush=False: repositories flush when they need generated state
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db():
    """Get database session

    This is a FastAPI dependency that provides a database session.
    The session is automatically closed after the request completes.
    Units of work built on it commit their own transactions.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        logger.exception("Database session error")
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind=None):
    """Initialize database - create all tables"""
    from app.infrastructure.database import models  # noqa: F401  register models

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database schema ready")


# lock timeout, serialization failure, deadlock
_RETRYABLE_PGCODES = {"55P03", "40001", "40P01"}


def _is_lock_failure(error: OperationalError) -> bool:
    if getattr(error.orig, "pgcode", None) in _RETRYABLE_PGCODES:
        return True
    return "database is locked" in str(error.orig).lower()


@contextmanager
def translate_conflicts():
    """Re-raise concurrent-writer failures as ``ConcurrencyConflictError``"""
    try:
        yield
    except IntegrityError as e:
        raise ConcurrencyConflictError(str(e.orig)) from e
    except OperationalError as e:
        if _is_lock_failure(e):
            raise ConcurrencyConflictError(str(e.orig)) from e
        raise
