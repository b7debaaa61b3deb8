"""
Sales Service - single-transaction checkout

WHY: A sale touches stock, the customer ledger and the activity log. All of it
must commit together or not at all, and two operators selling the last units
of a product at the same time must not both succeed.

TRANSACTION SHAPE (one checkout = one exclusive transaction):
1. Price every line from the current Product row (client prices are never read)
2. Insert the Sale with the computed total
3. Insert one SaleItem snapshot per cart line and decrement stock
4. ON_ACCOUNT: add the total to the customer's debt
5. Append one activity log entry
Validation reads happen inside the same transaction, under the write lock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from flask import current_app, has_app_context

from ..extensions import db
from ..models import Sale, SaleItem, Product
from ..models.sales import VALID_PAYMENT_METHODS, DEFERRED_PAYMENT_METHODS, PAYMENT_ON_ACCOUNT
from ..money import format_cents
from ..validation import coerce_int
from . import audit_service, catalog_service, ledger_service
from .concurrency import lock_for_update, begin_write, run_with_retry, retry_settings
from .errors import (
    ValidationError,
    ProductNotFound,
    InsufficientStock,
    CustomerRequiredForCredit,
    CreditLimitExceeded,
)


# Wire aliases accepted for payment methods
PAYMENT_METHOD_ALIASES = {
    "FIADO": PAYMENT_ON_ACCOUNT,
    "ON-ACCOUNT": PAYMENT_ON_ACCOUNT,
}


@dataclass(frozen=True)
class CartLine:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class CheckoutResult:
    sale_id: int
    total_cents: int

    def to_dict(self) -> dict:
        return {
            "sale_id": self.sale_id,
            "total_cents": self.total_cents,
            "total": format_cents(self.total_cents),
        }


def normalize_payment_method(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            "payment_method is required",
            details={"allowed": list(VALID_PAYMENT_METHODS)},
        )
    method = value.strip().upper()
    method = PAYMENT_METHOD_ALIASES.get(method, method)
    if method not in VALID_PAYMENT_METHODS:
        raise ValidationError(
            f"Unknown payment method: {value}",
            details={"allowed": list(VALID_PAYMENT_METHODS)},
        )
    return method


def parse_cart(line_items: Iterable[Any] | None) -> list[CartLine]:
    """Validate the cart shape. Accepts dicts or CartLine instances."""
    if not line_items:
        raise ValidationError("Cart must contain at least one item")

    lines = []
    for index, item in enumerate(line_items):
        if isinstance(item, CartLine):
            product_id, quantity = item.product_id, item.quantity
        elif isinstance(item, dict):
            product_id, quantity = item.get("product_id"), item.get("quantity")
        else:
            raise ValidationError(f"items[{index}] must be an object with product_id and quantity")

        if product_id is None:
            raise ValidationError(f"items[{index}].product_id is required")
        if quantity is None:
            raise ValidationError(f"items[{index}].quantity is required")

        lines.append(CartLine(
            product_id=coerce_int(f"items[{index}].product_id", product_id, minimum=1),
            quantity=coerce_int(f"items[{index}].quantity", quantity, minimum=1),
        ))
    return lines


def _credit_limit_enforced(override: bool | None) -> bool:
    if override is not None:
        return override
    if has_app_context():
        return bool(current_app.config.get("ENFORCE_CREDIT_LIMIT", False))
    return False


def _load_products(session, lines: list[CartLine]) -> dict[int, Product]:
    product_ids = sorted({line.product_id for line in lines})
    rows = lock_for_update(
        session.query(Product).filter(Product.id.in_(product_ids)).order_by(Product.id)
    ).all()
    products = {p.id: p for p in rows}

    for line in lines:
        if line.product_id not in products:
            raise ProductNotFound(
                f"Product {line.product_id} not found",
                details={"product_id": line.product_id},
            )
    return products


def _validate_stock(lines: list[CartLine], products: dict[int, Product]) -> None:
    demand: dict[int, int] = {}
    for line in lines:
        demand[line.product_id] = demand.get(line.product_id, 0) + line.quantity

    insufficient = []
    for product_id, qty in demand.items():
        product = products[product_id]
        if product.stock < qty:
            insufficient.append({
                "product_id": product_id,
                "product_name": product.name,
                "requested_quantity": qty,
                "available": product.stock,
            })

    if insufficient:
        first = insufficient[0]
        raise InsufficientStock(
            f"Insufficient stock for {first['product_name']}: "
            f"requested {first['requested_quantity']}, available {first['available']}",
            details={"items": insufficient},
        )


def checkout(
    operator_id: int,
    payment_method: str,
    line_items: Iterable[Any],
    customer_id: int | None = None,
    *,
    session=None,
    enforce_credit_limit: bool | None = None,
) -> CheckoutResult:
    """
    Sell a cart atomically.

    Raises ValidationError, ProductNotFound, CustomerNotFound, InsufficientStock,
    CustomerRequiredForCredit, CreditLimitExceeded, TransactionConflict or
    PersistenceFailure. On any of them nothing is persisted.

    session is the storage handle; it defaults to the app's scoped session.
    """
    session = session or db.session

    if operator_id is None:
        raise ValidationError("operator_id is required")
    method = normalize_payment_method(payment_method)
    lines = parse_cart(line_items)
    if customer_id is not None:
        customer_id = coerce_int("customer_id", customer_id, minimum=1)

    is_deferred = method in DEFERRED_PAYMENT_METHODS
    if is_deferred and customer_id is None:
        raise CustomerRequiredForCredit("A customer is required for on-account sales")

    check_credit = _credit_limit_enforced(enforce_credit_limit)

    def _op():
        begin_write(session)

        products = _load_products(session, lines)
        customer = None
        if customer_id is not None:
            customer = ledger_service.require_customer(customer_id, session=session, lock=True)

        _validate_stock(lines, products)

        priced = []
        total_cents = 0
        for line in lines:
            unit_price_cents = products[line.product_id].sell_price_cents
            line_total_cents = unit_price_cents * line.quantity
            priced.append((line, unit_price_cents, line_total_cents))
            total_cents += line_total_cents

        if is_deferred and check_credit:
            projected = customer.debt_cents + total_cents
            if projected > customer.credit_limit_cents:
                raise CreditLimitExceeded(
                    f"Credit limit exceeded for {customer.name}",
                    details={
                        "customer_id": customer.id,
                        "credit_limit_cents": customer.credit_limit_cents,
                        "debt_cents": customer.debt_cents,
                        "sale_total_cents": total_cents,
                    },
                )

        sale = Sale(
            customer_id=customer_id,
            operator_id=operator_id,
            total_cents=total_cents,
            payment_method=method,
        )
        session.add(sale)
        session.flush()

        for line, unit_price_cents, line_total_cents in priced:
            session.add(SaleItem(
                sale_id=sale.id,
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price_cents=unit_price_cents,
                line_total_cents=line_total_cents,
            ))
            catalog_service.decrement_stock(products[line.product_id], line.quantity)

        if is_deferred:
            ledger_service.adjust_debt(customer, total_cents)

        audit_service.append_entry(
            operator_id,
            audit_service.ACTION_SALE,
            f"Sale #{sale.id} - Total: {format_cents(total_cents)} - Method: {method}",
            session=session,
        )

        session.commit()
        return CheckoutResult(sale_id=sale.id, total_cents=total_cents)

    return run_with_retry(_op, session=session, **retry_settings())


# =============================================================================
# READ-ONLY ACCESS (reporting)
# =============================================================================

def get_sale(sale_id: int) -> Sale | None:
    return db.session.get(Sale, sale_id)


def list_sales(
    customer_id: int | None = None,
    operator_id: int | None = None,
    since: datetime | None = None,
    limit: int = 100,
) -> list[Sale]:
    query = db.session.query(Sale)
    if customer_id is not None:
        query = query.filter(Sale.customer_id == customer_id)
    if operator_id is not None:
        query = query.filter(Sale.operator_id == operator_id)
    if since is not None:
        query = query.filter(Sale.created_at >= since)
    return query.order_by(Sale.id.desc()).limit(limit).all()
