import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bakery_pos.exceptions import OrderError, TransactionFailure

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session, operation: str):
    """Commit on success, roll back everything on any failure.

    Expected outcomes (out of stock, already cancelled, ...) are re-raised
    untouched and logged at INFO. Database errors are logged with traceback
    and surfaced as ``TransactionFailure``; nothing is retried.
    """
    try:
        yield
        db.commit()
    except TransactionFailure:
        db.rollback()
        logger.exception("%s failed", operation)
        raise
    except OrderError as exc:
        db.rollback()
        logger.info("%s rejected: %s", operation, exc)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s failed: %s", operation, exc)
        raise TransactionFailure() from exc
    except Exception:
        db.rollback()
        raise
