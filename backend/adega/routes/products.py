# Overview: Flask API routes for the product catalog.

from flask import Blueprint, request, jsonify, g, current_app

from ..services import catalog_service
from ..services.errors import ServiceError, ValidationError
from ..decorators import require_operator, require_admin


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("/")
@require_operator
def list_products_route():
    products = catalog_service.list_products(category=request.args.get("category"))
    return jsonify({"products": [p.to_dict() for p in products]}), 200


@products_bp.get("/low-stock")
@require_operator
def low_stock_route():
    """Products at or below their reorder threshold."""
    products = catalog_service.list_low_stock()
    return jsonify({"products": [p.to_dict() for p in products]}), 200


@products_bp.get("/<int:product_id>")
@require_operator
def get_product_route(product_id: int):
    product = catalog_service.get_product(product_id)
    if not product:
        return jsonify({"error": "Product not found"}), 404
    return jsonify({"product": product.to_dict()}), 200


@products_bp.post("/")
@require_operator
@require_admin
def create_product_route():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(ValidationError("Request body must be a JSON object").to_dict()), 400

    try:
        product = catalog_service.create_product(g.current_user.id, data)
        return jsonify({"product": product.to_dict()}), 201
    except ServiceError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.put("/<int:product_id>")
@require_operator
@require_admin
def update_product_route(product_id: int):
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(ValidationError("Request body must be a JSON object").to_dict()), 400

    try:
        product = catalog_service.update_product(product_id, g.current_user.id, data)
        return jsonify({"product": product.to_dict()}), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.http_status
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500
