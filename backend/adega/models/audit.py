from __future__ import annotations

from ..extensions import db
from adega.time_utils import to_utc_z


class AuditLogEntry(db.Model):
    """
    Append-only activity log.

    - Written inside the same DB transaction as the action it records.
    - No updates, no deletes.
    """
    __tablename__ = "activity_logs"
    __table_args__ = (
        db.Index("ix_activity_logs_operator_created", "operator_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    operator_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    action = db.Column(db.String(64), nullable=False, index=True)
    detail = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "operator_id": self.operator_id,
            "action": self.action,
            "detail": self.detail,
            "created_at": to_utc_z(self.created_at),
        }
