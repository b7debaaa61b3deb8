# Overview: Flask API routes for sales; checkout and read-only sale lookups.

# backend/adega/routes/sales.py
from flask import Blueprint, request, jsonify, g, current_app

from ..services import sales_service
from ..services.errors import ServiceError, ValidationError
from ..decorators import require_operator
from ..time_utils import parse_iso_datetime


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("/")
@require_operator
def checkout_route():
    """
    Sell a cart.

    Body: {"customer_id": int|null, "payment_method": str,
           "items": [{"product_id": int, "quantity": int}, ...]}

    Prices and totals are computed server-side; any price in the body is ignored.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(ValidationError("Request body must be a JSON object").to_dict()), 400

    try:
        result = sales_service.checkout(
            operator_id=g.current_user.id,
            payment_method=data.get("payment_method"),
            line_items=data.get("items"),
            customer_id=data.get("customer_id"),
        )
    except ServiceError as e:
        if e.retryable:
            current_app.logger.warning("Checkout conflict for operator %s: %s", g.current_user.id, e)
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to check out sale")
        return jsonify({"error": "Internal server error"}), 500

    current_app.logger.info(
        "Sale %s checked out by operator %s (total_cents=%s)",
        result.sale_id, g.current_user.id, result.total_cents,
    )
    return jsonify(result.to_dict()), 201


@sales_bp.get("/")
@require_operator
def list_sales_route():
    customer_id = request.args.get("customer_id", type=int)
    operator_id = request.args.get("operator_id", type=int)
    limit = max(1, min(request.args.get("limit", default=100, type=int), 500))
    try:
        since = parse_iso_datetime(request.args.get("since"))
    except ValueError:
        return jsonify({"error": "since must be an ISO-8601 datetime"}), 400

    sales = sales_service.list_sales(
        customer_id=customer_id,
        operator_id=operator_id,
        since=since,
        limit=limit,
    )
    return jsonify({"sales": [s.to_dict() for s in sales]}), 200


@sales_bp.get("/<int:sale_id>")
@require_operator
def get_sale_route(sale_id: int):
    sale = sales_service.get_sale(sale_id)
    if not sale:
        return jsonify({"error": "Sale not found"}), 404

    return jsonify({
        "sale": sale.to_dict(),
        "items": [item.to_dict() for item in sale.items],
    }), 200
