# Overview: Flask API routes for customers and debt payments.

from flask import Blueprint, request, jsonify, g, current_app

from ..services import ledger_service
from ..services.errors import ServiceError, ValidationError
from ..decorators import require_operator


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("/")
@require_operator
def list_customers_route():
    with_debt = request.args.get("with_debt", "").lower() in {"1", "true", "yes"}
    customers = ledger_service.list_customers(with_debt_only=with_debt)
    return jsonify({"customers": [c.to_dict() for c in customers]}), 200


@customers_bp.get("/<int:customer_id>")
@require_operator
def get_customer_route(customer_id: int):
    customer = ledger_service.get_customer(customer_id)
    if not customer:
        return jsonify({"error": "Customer not found"}), 404
    return jsonify({"customer": customer.to_dict()}), 200


@customers_bp.post("/")
@require_operator
def create_customer_route():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(ValidationError("Request body must be a JSON object").to_dict()), 400

    try:
        customer = ledger_service.create_customer(g.current_user.id, data)
        return jsonify({"customer": customer.to_dict()}), 201
    except ServiceError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.post("/<int:customer_id>/payments")
@require_operator
def record_payment_route(customer_id: int):
    """
    Record a payment against the customer's on-account debt.

    Body: {"amount_cents": int}
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(ValidationError("Request body must be a JSON object").to_dict()), 400
    if data.get("amount_cents") is None:
        return jsonify({"error": "amount_cents required"}), 400

    try:
        payment = ledger_service.record_payment(customer_id, data.get("amount_cents"), g.current_user.id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to record payment")
        return jsonify({"error": "Internal server error"}), 500

    customer = ledger_service.get_customer(customer_id)
    current_app.logger.info(
        "Payment %s of %s cents recorded for customer %s by operator %s",
        payment.id, payment.amount_cents, customer_id, g.current_user.id,
    )
    return jsonify({"payment": payment.to_dict(), "customer": customer.to_dict()}), 201


@customers_bp.get("/<int:customer_id>/payments")
@require_operator
def list_payments_route(customer_id: int):
    if not ledger_service.get_customer(customer_id):
        return jsonify({"error": "Customer not found"}), 404
    payments = ledger_service.list_payments(customer_id)
    return jsonify({"payments": [p.to_dict() for p in payments]}), 200
