from __future__ import annotations

from ..extensions import db
from adega.time_utils import to_utc_z


ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"
VALID_ROLES = (ROLE_ADMIN, ROLE_EMPLOYEE)


class User(db.Model):
    """
    Operator accounts for attribution.

    WHY: Every sale, payment and audit entry names the operator who made it.
    Authentication happens upstream; this table is the identity of record.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default=ROLE_EMPLOYEE)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
