"""
Database connection and session management.
"""
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import OperationalError, DBAPIError
from sqlalchemy.pool import StaticPool
from typing import Generator, Optional
import logging
import time

from gate_relay.core.config import get_settings

logger = logging.getLogger(__name__)

engine = None
SessionLocal = None


def _normalize_url(url: str) -> str:
    # Some hosting providers hand out postgres:// URLs
    if url.startswith('postgres://'):
        return url.replace('postgres://', 'postgresql://', 1)
    return url


def init_db(database_url: Optional[str] = None, max_retries: int = 3, retry_delay: float = 1.0):
    """
    Initialize the database engine and session factory with retry logic.
    Call this once at application startup.

    Args:
        database_url: Override for the configured DATABASE_URL
        max_retries: Number of connection attempts
        retry_delay: Seconds to wait between retries

    Raises:
        RuntimeError: If connection fails after all retries
    """
    global engine, SessionLocal

    url = _normalize_url(database_url or get_settings().database_url)

    if url.startswith('sqlite'):
        engine_kwargs = {'connect_args': {'check_same_thread': False}}
        if ':memory:' in url:
            engine_kwargs['poolclass'] = StaticPool
    else:
        engine_kwargs = {
            'pool_pre_ping': True,  # Verify connections before using
            'pool_recycle': 3600,
        }

    for attempt in range(max_retries):
        try:
            engine = create_engine(url, echo=False, **engine_kwargs)

            # Test connection
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))

            SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
            logger.info(f"Database initialized: {url.split('@')[1] if '@' in url else url.split('://')[0]}")
            return

        except (OperationalError, DBAPIError) as e:
            logger.warning(f"Database connection attempt {attempt + 1}/{max_retries} failed: {e}")
            if attempt < max_retries - 1:
                time.sleep(retry_delay * (attempt + 1))
            else:
                logger.error(f"Database initialization failed after {max_retries} attempts")
                raise RuntimeError(f"Failed to connect to database: {e}") from e


def get_db() -> Generator[Session, None, None]:
    """
    Get a database session (FastAPI dependency).

    Usage:
        @router.get("/publicKey")
        async def list_keys(db: Session = Depends(get_db)):
            ...
    """
    if not SessionLocal:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    db = SessionLocal()
    try:
        yield db
    except (OperationalError, DBAPIError) as e:
        logger.error(f"Database session error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def create_tables(bind=None):
    """
    Create registry tables if they do not exist yet.

    Args:
        bind: Engine or connection to use (defaults to the initialized engine)
    """
    target = bind if bind is not None else engine
    if target is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    from .models import Base
    Base.metadata.create_all(bind=target)
    logger.info("Database tables created")
