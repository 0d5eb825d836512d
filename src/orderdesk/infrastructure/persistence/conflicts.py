"""Translation of driver errors into the domain's retryable conflict."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from orderdesk.domain.exceptions import WriteConflictError

logger = structlog.get_logger(__name__)

# SQLSTATEs for serialization failure and deadlock.
_RETRYABLE_SQLSTATES = {"40001", "40P01"}
_RETRYABLE_MESSAGES = ("database is locked", "database is busy", "deadlock")


def is_write_conflict(exc: BaseException) -> bool:
    """True if *exc* means a concurrent transaction got in the way."""
    if isinstance(exc, StaleDataError):
        return True
    if not isinstance(exc, DBAPIError):
        return False
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _RETRYABLE_SQLSTATES:
        return True
    if isinstance(exc, OperationalError):
        message = str(orig).lower()
        return any(marker in message for marker in _RETRYABLE_MESSAGES)
    return False


@contextmanager
def translate_conflicts() -> Iterator[None]:
    try:
        yield
    except (DBAPIError, StaleDataError) as exc:
        if is_write_conflict(exc):
            cause = getattr(exc, "orig", None) or exc
            logger.debug("write_conflict_detected", error=str(cause))
            raise WriteConflictError() from exc
        raise
