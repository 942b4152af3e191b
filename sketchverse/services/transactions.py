# sketchverse/services/transactions.py
import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..config import Config
from .errors import ContentionError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Raised when another session committed first (version mismatch, unique
# key taken, or SQLite holding the write lock).
RETRYABLE_ERRORS = (StaleDataError, IntegrityError, OperationalError)


def run_in_transaction(
    db: Session,
    work: Callable[[Session], T],
    *,
    retries: int | None = None,
    label: str = "transaction",
) -> T:
    """
    Run ``work`` and commit, retrying on contention.

    ``work`` must do all of its reads through ``db`` so that a retry sees
    the state left by the writer that beat it. Nothing is half-applied:
    a failed attempt is rolled back before the next one starts.
    """
    attempts = max(1, retries if retries is not None else Config.TRANSACTION_RETRIES)

    last_exc = None
    for attempt in range(1, attempts + 1):
        try:
            result = work(db)
            db.commit()
            return result
        except RETRYABLE_ERRORS as exc:
            db.rollback()
            last_exc = exc
            logger.warning(
                "%s conflicted (attempt %d/%d): %s",
                label, attempt, attempts, exc.__class__.__name__,
            )
        except Exception:
            db.rollback()
            raise

    # A persistent constraint violation looks like contention from here;
    # keep the underlying error in the log and on __cause__.
    logger.error("%s gave up after %d attempts", label, attempts, exc_info=last_exc)
    raise ContentionError() from last_exc
