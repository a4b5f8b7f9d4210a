# Overview: Transaction and row-locking helpers shared by the stock-mutating services.

from __future__ import annotations

from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import APIError, ServerError
from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


@contextmanager
def atomic(failure_message: str = "Internal server error"):
    """
    Run the block as one database transaction.

    Commits on success. Any error rolls the whole session back; typed API
    errors propagate unchanged and database errors surface as ServerError.
    There is no retry.
    """
    try:
        yield db.session
        db.session.commit()
    except APIError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(failure_message)
        raise ServerError(failure_message) from exc
    except Exception:
        db.session.rollback()
        raise
