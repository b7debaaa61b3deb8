from __future__ import annotations

from ..extensions import db
from adega.time_utils import to_utc_z


# Payment methods (closed set). ON_ACCOUNT is the only deferred one.
PAYMENT_CASH = "CASH"
PAYMENT_PIX = "PIX"
PAYMENT_DEBIT = "DEBIT"
PAYMENT_CREDIT = "CREDIT"
PAYMENT_ON_ACCOUNT = "ON_ACCOUNT"

INSTANT_PAYMENT_METHODS = (PAYMENT_CASH, PAYMENT_PIX, PAYMENT_DEBIT, PAYMENT_CREDIT)
DEFERRED_PAYMENT_METHODS = (PAYMENT_ON_ACCOUNT,)
VALID_PAYMENT_METHODS = INSTANT_PAYMENT_METHODS + DEFERRED_PAYMENT_METHODS


class Sale(db.Model):
    """
    Completed sale. Append-only: rows are written once by the checkout engine
    and never updated.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_created_at", "created_at"),
        db.Index("ix_sales_customer_created", "customer_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True)
    operator_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Sum of item line totals, computed server-side
    total_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(16), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("sales", lazy=True))
    operator = db.relationship("User")

    @property
    def is_on_account(self) -> bool:
        return self.payment_method in DEFERRED_PAYMENT_METHODS

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "operator_id": self.operator_id,
            "total_cents": self.total_cents,
            "payment_method": self.payment_method,
            "is_on_account": self.is_on_account,
            "created_at": to_utc_z(self.created_at),
        }


class SaleItem(db.Model):
    """Line item snapshot; unit_price_cents is frozen at time of sale."""
    __tablename__ = "sale_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sale_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    sale = db.relationship("Sale", backref=db.backref("items", lazy=True, order_by="SaleItem.id"))
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
        }
