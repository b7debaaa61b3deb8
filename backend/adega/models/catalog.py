from __future__ import annotations

from ..extensions import db
from adega.time_utils import to_utc_z


class Product(db.Model):
    """
    Product master data.

    Prices are authoritative in cents. The checkout engine reads sell_price_cents
    and stock inside its own transaction and never trusts client-supplied values.

    STOCK: never negative. The CHECK constraint backs up the engine's validation,
    and version_id turns a lost update into a StaleDataError instead of a silent
    overwrite.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        db.CheckConstraint("sell_price_cents >= 0", name="ck_products_sell_price_non_negative"),
        db.Index("ix_products_category_name", "category", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), nullable=False)
    sku = db.Column(db.String(64), nullable=True, unique=True)

    cost_price_cents = db.Column(db.Integer, nullable=False, default=0)
    sell_price_cents = db.Column(db.Integer, nullable=False)

    stock = db.Column(db.Integer, nullable=False, default=0)
    # Reorder threshold
    min_stock = db.Column(db.Integer, nullable=False, default=5)

    supplier = db.Column(db.String(255), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def needs_reorder(self) -> bool:
        return self.stock <= self.min_stock

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "sku": self.sku,
            "cost_price_cents": self.cost_price_cents,
            "sell_price_cents": self.sell_price_cents,
            "stock": self.stock,
            "min_stock": self.min_stock,
            "needs_reorder": self.needs_reorder,
            "supplier": self.supplier,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
