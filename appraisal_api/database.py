import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_DELAY = 5.0


def build_engine(database_url: str, **kwargs) -> Engine:
    # Support both PostgreSQL and SQLite
    if database_url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        return create_engine(database_url, connect_args=connect_args, **kwargs)
    return create_engine(database_url, pool_pre_ping=True, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@dataclass
class ConnectResult:
    ok: bool
    attempts: int
    error: Optional[BaseException] = None


def connect_with_retry(
    engine: Engine,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    delay: float = DEFAULT_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> ConnectResult:
    """
    Acquire and immediately release one pooled connection.

    Tries up to `max_attempts` times with a fixed `delay` (seconds) between
    failures. Does not exit the process; the caller decides what a failed
    result means.
    """
    def log_failed_attempt(retry_state: RetryCallState) -> None:
        logger.warning(
            f"Database connection attempt {retry_state.attempt_number}/{max_attempts} "
            f"failed: {retry_state.outcome.exception()}",
            extra={"attempt": retry_state.attempt_number},
        )

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(delay),
        retry=retry_if_exception_type(SQLAlchemyError),
        sleep=sleep,
        before_sleep=log_failed_attempt,
        reraise=True,
    )

    attempts = 0
    try:
        for attempt in retrying:
            with attempt:
                attempts = attempt.retry_state.attempt_number
                with engine.connect():
                    pass
    except SQLAlchemyError as e:
        logger.error(f"Could not connect to database after {attempts} attempts: {e}")
        return ConnectResult(ok=False, attempts=attempts, error=e)

    logger.info(f"Connected to database on attempt {attempts}/{max_attempts}")
    return ConnectResult(ok=True, attempts=attempts)


def get_db(request: Request):
    """
    Session Provider: Provides a database session per request from the
    application's context. Commit/rollback is handled in the store layer.
    """
    db = request.app.state.context.session_factory()
    try:
        yield db
    finally:
        db.close()
