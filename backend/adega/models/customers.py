from __future__ import annotations

from ..extensions import db
from adega.time_utils import to_utc_z


class Customer(db.Model):
    """
    Customer master data and running on-account balance.

    DEBT: debt_cents equals the sum of on-account sale totals minus the sum of
    recorded payments. Only the checkout engine adds to it and only
    ledger_service.record_payment subtracts from it, both under a row lock.
    A payment larger than the balance leaves it negative by the overshoot.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.CheckConstraint("credit_limit_cents >= 0", name="ck_customers_credit_limit_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    # National tax id (CPF)
    document_number = db.Column(db.String(32), nullable=True)
    address = db.Column(db.String(255), nullable=True)

    credit_limit_cents = db.Column(db.Integer, nullable=False, default=0)
    debt_cents = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def available_credit_cents(self) -> int:
        return max(self.credit_limit_cents - self.debt_cents, 0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "document_number": self.document_number,
            "address": self.address,
            "credit_limit_cents": self.credit_limit_cents,
            "debt_cents": self.debt_cents,
            "available_credit_cents": self.available_credit_cents,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }


class CustomerPayment(db.Model):
    """Append-only record of a payment against a customer's debt."""
    __tablename__ = "customer_payments"
    __table_args__ = (
        db.CheckConstraint("amount_cents > 0", name="ck_customer_payments_amount_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    operator_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("payments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "operator_id": self.operator_id,
            "amount_cents": self.amount_cents,
            "created_at": to_utc_z(self.created_at),
        }
