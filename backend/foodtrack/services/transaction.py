# Overview: Unit-of-work helper shared by every multi-statement write.

from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import ConflictError, StorageError
from ..extensions import db

logger = logging.getLogger(__name__)


def _rollback() -> None:
    try:
        db.session.rollback()
    except SQLAlchemyError:
        # The original failure is what gets reported
        logger.exception("Rollback failed")


@contextmanager
def unit_of_work(*, conflict_message: str | None = None):
    """
    Run a block of statements as one transaction on the request's session.

    Commits when the block exits cleanly. Any exception rolls the whole
    transaction back before it propagates; database errors surface as
    StorageError (or ConflictError for integrity violations when the caller
    names one). There are no retries: the caller sees the first failure.

    Usage:
        with unit_of_work():
            db.session.add(recipe)
            db.session.flush()
            ...
    """
    try:
        yield db.session
        db.session.commit()
    except IntegrityError as exc:
        _rollback()
        if conflict_message:
            raise ConflictError(conflict_message) from exc
        logger.error("Integrity error during unit of work: %s", exc.orig)
        raise StorageError() from exc
    except SQLAlchemyError as exc:
        _rollback()
        logger.error("Database error during unit of work: %s", exc)
        raise StorageError() from exc
    except Exception:
        _rollback()
        raise
