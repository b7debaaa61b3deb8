# Overview: Flask API routes for reading the activity log.

from flask import Blueprint, request, jsonify

from ..services import audit_service
from ..decorators import require_operator, require_admin


audit_bp = Blueprint("audit", __name__, url_prefix="/api/audit")


@audit_bp.get("/")
@require_operator
@require_admin
def list_audit_entries_route():
    entries = audit_service.list_entries(
        operator_id=request.args.get("operator_id", type=int),
        action=request.args.get("action"),
        limit=max(1, min(request.args.get("limit", default=50, type=int), 500)),
    )
    return jsonify({"entries": [e.to_dict() for e in entries]}), 200
