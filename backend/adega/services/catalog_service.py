# Overview: Service-layer operations for the product catalog; lookups, stock decrement and thin CRUD.

from __future__ import annotations

from ..extensions import db
from ..models import Product
from ..validation import coerce_int, coerce_cents, coerce_str
from . import audit_service
from .concurrency import lock_for_update, begin_write, run_with_retry, retry_settings
from .errors import ProductNotFound, InsufficientStock, ValidationError


# Client-writable product fields and their coercions
_PRODUCT_FIELDS = {
    "name": lambda v: coerce_str("name", v, required=True, max_length=255),
    "category": lambda v: coerce_str("category", v, required=True, max_length=64),
    "sku": lambda v: coerce_str("sku", v, max_length=64),
    "cost_price_cents": lambda v: coerce_cents("cost_price_cents", v),
    "sell_price_cents": lambda v: coerce_cents("sell_price_cents", v),
    "stock": lambda v: coerce_int("stock", v, minimum=0),
    "min_stock": lambda v: coerce_int("min_stock", v, minimum=0),
    "supplier": lambda v: coerce_str("supplier", v, max_length=255),
}
_REQUIRED_ON_CREATE = ("name", "category", "sell_price_cents")


def get_product(product_id: int, *, session=None, lock: bool = False) -> Product | None:
    session = session or db.session
    query = session.query(Product).filter_by(id=product_id)
    if lock:
        query = lock_for_update(query)
    return query.first()


def require_product(product_id: int, *, session=None, lock: bool = False) -> Product:
    product = get_product(product_id, session=session, lock=lock)
    if product is None:
        raise ProductNotFound(
            f"Product {product_id} not found",
            details={"product_id": product_id},
        )
    return product


def list_products(category: str | None = None) -> list[Product]:
    query = db.session.query(Product)
    if category:
        query = query.filter(Product.category == category)
    return query.order_by(Product.name, Product.id).all()


def list_low_stock() -> list[Product]:
    """Products at or below their reorder threshold."""
    return (
        db.session.query(Product)
        .filter(Product.stock <= Product.min_stock)
        .order_by(Product.stock, Product.name)
        .all()
    )


def decrement_stock(product: Product, quantity: int) -> Product:
    """
    Take quantity units out of a locked product row.

    Never lets stock go below zero; the flush carries the version_id check.
    """
    if quantity <= 0:
        raise ValidationError("quantity must be a positive integer")
    if product.stock < quantity:
        raise InsufficientStock(
            f"Insufficient stock for {product.name}",
            details={
                "product_id": product.id,
                "product_name": product.name,
                "requested_quantity": quantity,
                "available": product.stock,
            },
        )
    product.stock = product.stock - quantity
    return product


def _clean_product_payload(payload: dict, *, partial: bool) -> dict:
    unknown = set(payload) - set(_PRODUCT_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
    if not partial:
        missing = [f for f in _REQUIRED_ON_CREATE if payload.get(f) is None]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    return {key: _PRODUCT_FIELDS[key](value) for key, value in payload.items()}


def create_product(operator_id: int, payload: dict) -> Product:
    cleaned = _clean_product_payload(payload, partial=False)

    def _op():
        begin_write()
        if cleaned.get("sku") and db.session.query(Product).filter_by(sku=cleaned["sku"]).first():
            raise ValidationError(f"SKU {cleaned['sku']} already exists")
        product = Product(**cleaned)
        db.session.add(product)
        db.session.flush()
        audit_service.append_entry(
            operator_id,
            audit_service.ACTION_CREATE_PRODUCT,
            f"Created product #{product.id}: {product.name}",
        )
        db.session.commit()
        return product

    return run_with_retry(_op, **retry_settings())


def update_product(product_id: int, operator_id: int, patch: dict) -> Product:
    cleaned = _clean_product_payload(patch, partial=True)
    if not cleaned:
        raise ValidationError("No fields to update")

    def _op():
        begin_write()
        product = require_product(product_id, lock=True)
        for key, value in cleaned.items():
            if key in _REQUIRED_ON_CREATE and value is None:
                raise ValidationError(f"{key} cannot be empty")
            setattr(product, key, value)
        audit_service.append_entry(
            operator_id,
            audit_service.ACTION_UPDATE_PRODUCT,
            f"Updated product #{product.id}: {', '.join(sorted(cleaned))}",
        )
        db.session.commit()
        return product

    return run_with_retry(_op, **retry_settings())
