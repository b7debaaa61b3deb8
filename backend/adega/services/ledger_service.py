# Overview: Service-layer operations for the customer ledger; debt charges and payments.

"""
Customer Ledger

WHY: On-account ("fiado") sales are settled later against a running balance.
debt_cents must always equal the on-account sale totals minus recorded
payments, so both directions go through a locked row and a version check.

DESIGN PRINCIPLES:
- Charges happen only inside the checkout transaction (adjust_debt(+total))
- Payments are their own short transaction (record_payment)
- Every payment is stored as a CustomerPayment row and audited
- A payment always lowers debt by exactly its amount; an overshoot leaves it negative
"""

from __future__ import annotations

from ..extensions import db
from ..models import Customer, CustomerPayment
from ..money import format_cents
from ..validation import coerce_cents, coerce_str
from . import audit_service
from .concurrency import lock_for_update, begin_write, run_with_retry, retry_settings
from .errors import CustomerNotFound, ValidationError


def get_customer(customer_id: int, *, session=None, lock: bool = False) -> Customer | None:
    session = session or db.session
    query = session.query(Customer).filter_by(id=customer_id)
    if lock:
        query = lock_for_update(query)
    return query.first()


def require_customer(customer_id: int, *, session=None, lock: bool = False) -> Customer:
    customer = get_customer(customer_id, session=session, lock=lock)
    if customer is None:
        raise CustomerNotFound(
            f"Customer {customer_id} not found",
            details={"customer_id": customer_id},
        )
    return customer


def list_customers(with_debt_only: bool = False) -> list[Customer]:
    query = db.session.query(Customer)
    if with_debt_only:
        query = query.filter(Customer.debt_cents > 0)
    return query.order_by(Customer.name, Customer.id).all()


def create_customer(operator_id: int, payload: dict) -> Customer:
    """Thin create; new customers always start with zero debt."""
    customer = Customer(
        name=coerce_str("name", payload.get("name"), required=True, max_length=255),
        phone=coerce_str("phone", payload.get("phone"), max_length=32),
        document_number=coerce_str("document_number", payload.get("document_number"), max_length=32),
        address=coerce_str("address", payload.get("address"), max_length=255),
        credit_limit_cents=coerce_cents("credit_limit_cents", payload.get("credit_limit_cents") or 0),
        debt_cents=0,
    )

    def _op():
        db.session.add(customer)
        db.session.flush()
        audit_service.append_entry(
            operator_id,
            audit_service.ACTION_CREATE_CUSTOMER,
            f"Created customer #{customer.id}: {customer.name}",
        )
        db.session.commit()
        return customer

    return run_with_retry(_op, **retry_settings())


def adjust_debt(customer: Customer, amount_cents: int) -> Customer:
    """
    Apply a signed change to a locked customer's debt (positive = charge).

    Does not commit; callers own the transaction.
    """
    customer.debt_cents = customer.debt_cents + amount_cents
    return customer


def record_payment(customer_id: int, amount_cents: int, operator_id: int, *, session=None) -> CustomerPayment:
    """
    Record a payment against a customer's debt.

    Runs as one locked transaction: the debt decrease, the payment row and the
    audit entry commit together or not at all. Races with checkout are
    serialized by the same lock and version check, so neither update is lost.
    """
    session = session or db.session
    amount_cents = coerce_cents("amount_cents", amount_cents, minimum=1)
    if operator_id is None:
        raise ValidationError("operator_id is required")

    def _op():
        begin_write(session)
        customer = require_customer(customer_id, session=session, lock=True)
        adjust_debt(customer, -amount_cents)

        payment = CustomerPayment(
            customer_id=customer.id,
            operator_id=operator_id,
            amount_cents=amount_cents,
        )
        session.add(payment)
        session.flush()

        audit_service.append_entry(
            operator_id,
            audit_service.ACTION_PAYMENT,
            f"Payment #{payment.id} - Customer #{customer.id} - Amount: {format_cents(amount_cents)} "
            f"- Remaining debt: {format_cents(customer.debt_cents)}",
            session=session,
        )
        session.commit()
        return payment

    return run_with_retry(_op, session=session, **retry_settings())


def list_payments(customer_id: int) -> list[CustomerPayment]:
    return (
        db.session.query(CustomerPayment)
        .filter_by(customer_id=customer_id)
        .order_by(CustomerPayment.id)
        .all()
    )
