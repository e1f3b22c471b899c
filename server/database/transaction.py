"""
Retryable unit of work.

A unit of work is a function taking a Session. It reads, validates and
stages writes; `run_in_transaction` commits it, and on a transient write
conflict rolls everything back and runs the function again from the top on a
fresh session. Nothing outside the function is retried, so it must not have
side effects beyond the session.

Conflicts are detected by the store, not by the caller:
- StaleDataError: an UPDATE matched no row at the version we read
  (models with `version_id_col`)
- IntegrityError on a unique constraint: a racing transaction inserted the
  same row first
- OperationalError: SQLite "database is locked", PostgreSQL serialization
  failures and deadlocks
"""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from arena.core.errors import TransientConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# PostgreSQL serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES = {"40001", "40P01"}
UNIQUE_VIOLATION = "23505"


def is_transient(exc: Exception) -> bool:
    """Whether a storage error is a conflict worth retrying."""
    if isinstance(exc, StaleDataError):
        return True
    if isinstance(exc, (IntegrityError, OperationalError)):
        orig = exc.orig
        sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if isinstance(exc, IntegrityError):
            # Unique violations only; other constraint failures propagate
            return sqlstate == UNIQUE_VIOLATION or "UNIQUE constraint failed" in str(orig)
        if sqlstate in RETRYABLE_SQLSTATES:
            return True
        return "database is locked" in str(orig)
    return False


def run_in_transaction(
    session_factory: sessionmaker,
    work: Callable[[Session], T],
    max_attempts: int = 5,
    backoff_seconds: float = 0.01,
) -> T:
    """
    Run `work` in a transaction, retrying on write conflicts.

    Args:
        session_factory: Creates a fresh Session per attempt
        work: The unit of work; its return value is returned after commit
        max_attempts: Attempts before giving up
        backoff_seconds: Sleep between attempts, multiplied by the attempt number

    Returns:
        Whatever `work` returned on the attempt that committed

    Raises:
        TransientConflictError: Every attempt hit a write conflict
        Any other exception raised by `work`, after rolling back
    """
    for attempt in range(1, max_attempts + 1):
        with session_factory() as session:
            try:
                result = work(session)
                session.commit()
                return result
            except (StaleDataError, IntegrityError, OperationalError) as e:
                session.rollback()
                if not is_transient(e):
                    raise
                logger.warning(f"Write conflict on attempt {attempt}/{max_attempts}: {e}")

        if attempt < max_attempts and backoff_seconds:
            time.sleep(backoff_seconds * attempt)

    logger.error(f"Transaction abandoned after {max_attempts} conflicting attempts")
    raise TransientConflictError(max_attempts)
