# Overview: Transaction scoping, row locking and retry for contended writes.

from __future__ import annotations

import time

from flask import current_app, has_app_context
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from .errors import ServiceError, TransactionConflict, PersistenceFailure


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; begin_write() takes the
    database write lock there instead. populate_existing() refreshes any
    instance already in the identity map so validation sees current values.
    """
    return query.with_for_update().populate_existing()


def begin_write(session=None) -> None:
    """
    Open the write transaction up front.

    On SQLite this issues BEGIN IMMEDIATE so the read-validate-write sequence
    runs under the single writer lock; a concurrent writer waits for the busy
    timeout and then fails with OperationalError.
    """
    session = session or db.session
    conn = session.connection()
    if conn.dialect.name != "sqlite":
        return
    if conn.connection.dbapi_connection.in_transaction:
        return
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def run_with_retry(func, *, session=None, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a transactional DB operation with retry on concurrency failures.

    Retries on OperationalError (locks, busy timeout) and StaleDataError
    (version_id conflicts). When attempts run out the caller gets
    TransactionConflict. Any other failure rolls back and is re-raised,
    with raw SQLAlchemy errors wrapped in PersistenceFailure.
    """
    session = session or db.session
    attempts = max(1, attempts)
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            session.rollback()
            if attempt >= attempts - 1:
                raise TransactionConflict(
                    "The operation conflicted with a concurrent change; please retry",
                    details={"attempts": attempts},
                ) from exc
            time.sleep(backoff_base * (2 ** attempt))
        except ServiceError:
            session.rollback()
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceFailure("Failed to persist changes") from exc
        except Exception:
            session.rollback()
            raise


def retry_settings() -> dict:
    """Retry knobs from app config when an app context is active."""
    if not has_app_context():
        return {"attempts": 3, "backoff_base": 0.1}
    return {
        "attempts": current_app.config.get("CHECKOUT_RETRY_ATTEMPTS", 3),
        "backoff_base": current_app.config.get("CHECKOUT_RETRY_BACKOFF", 0.1),
    }
