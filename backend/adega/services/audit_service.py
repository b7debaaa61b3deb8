# Overview: Service-layer operations for the activity log; append and read-only listing.

from __future__ import annotations

from ..extensions import db
from ..models import AuditLogEntry
"""
Activity Log Invariants (authoritative)

- Append-only: no updates, no deletes.
- Entries are flushed inside the caller's transaction; if the flush fails the
  caller's whole operation fails with it.
- The checkout engine writes entries but never reads them.
"""

ACTION_SALE = "sale"
ACTION_PAYMENT = "payment"
ACTION_CREATE_PRODUCT = "create_product"
ACTION_UPDATE_PRODUCT = "update_product"
ACTION_CREATE_CUSTOMER = "create_customer"
ACTION_CREATE_USER = "create_user"


def append_entry(operator_id: int | None, action: str, detail: str | None = None, *, session=None) -> AuditLogEntry:
    session = session or db.session
    entry = AuditLogEntry(operator_id=operator_id, action=action, detail=detail)
    session.add(entry)
    session.flush()  # ensures entry.id is assigned without committing
    return entry


def list_entries(operator_id: int | None = None, action: str | None = None, limit: int = 50) -> list[AuditLogEntry]:
    query = db.session.query(AuditLogEntry)
    if operator_id is not None:
        query = query.filter(AuditLogEntry.operator_id == operator_id)
    if action:
        query = query.filter(AuditLogEntry.action == action)
    return query.order_by(AuditLogEntry.id.desc()).limit(limit).all()
