"""
Document store connection, session dependency and store-call wrapper.

The Database object owns the engine and its connection pool. It is built
once in the application lifespan, stored on app.state and disposed on
shutdown; request handlers receive sessions through get_db.
"""

import functools
import logging
import uuid
from typing import Callable, Generator, TypeVar

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.core.config import settings
from app.core.exceptions import InvalidIdentifierError, StoreError

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()

T = TypeVar("T")


class Database:
    """
    Engine + session factory for one store URL.

    SQLite URLs (used by tests and local runs) get a single shared
    connection so an in-memory database survives across sessions.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 10,
    ):
        if url.startswith("sqlite"):
            self.engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                url,
                pool_pre_ping=True,  # Verify connections before using them
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
            )
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        # Import models so they register on Base.metadata
        from app.models import bid, job  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def build_database() -> Database:
    """Create the process-wide Database from settings."""
    return Database(
        settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
    )


def init_db(database: Database) -> None:
    """
    Initialize database.

    Creates the jobs and bids tables (including the unique bid constraint)
    when they do not exist yet.
    """
    database.create_all()


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency function to get database session.
    Used in FastAPI endpoints with Depends(get_db)
    """
    db = request.app.state.database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def parse_document_id(value: str) -> str:
    """
    Normalize a document identifier taken from a URL.

    Raises:
        InvalidIdentifierError: If the value is not a UUID
    """
    try:
        return str(uuid.UUID(value))
    except (ValueError, AttributeError, TypeError):
        raise InvalidIdentifierError(value)


def store_operation(name: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Wrap a repository function taking the session as first argument.

    Transient connection failures (OperationalError) are retried with
    exponential backoff up to STORE_RETRY_ATTEMPTS. Any SQLAlchemy error
    left after that is rolled back and re-raised as StoreError.
    Application errors (ConflictError, ...) pass through untouched.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(db: Session, *args, **kwargs) -> T:
            def rollback_before_retry(retry_state: RetryCallState) -> None:
                db.rollback()
                logger.warning(
                    f"Store operation '{name}' failed (attempt {retry_state.attempt_number}), retrying: "
                    f"{retry_state.outcome.exception()}"
                )

            retryer = Retrying(
                stop=stop_after_attempt(max(settings.STORE_RETRY_ATTEMPTS, 1)),
                wait=wait_exponential(multiplier=0.1, max=2),
                retry=retry_if_exception_type(OperationalError),
                before_sleep=rollback_before_retry,
                reraise=True,
            )
            try:
                return retryer(func, db, *args, **kwargs)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Store operation '{name}' failed: {e}")
                raise StoreError(name, context={"error": str(e)}) from e

        return wrapper

    return decorator
