# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import operator_service


OPERATOR_HEADER = "X-Operator-Id"


def require_operator(f):
    """
    Resolve the acting operator for the request.

    The session is authenticated upstream; the authenticated operator's id
    arrives in the X-Operator-Id header. Sets g.current_user.

    Returns 401 if the header is missing, malformed, or names an unknown or
    inactive operator.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        raw = request.headers.get(OPERATOR_HEADER, "").strip()
        if not raw.isdigit():
            return jsonify({"error": "Operator identity required"}), 401

        user = operator_service.get_active_operator(int(raw))
        if user is None:
            return jsonify({"error": "Unknown or inactive operator"}), 401

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """Require the resolved operator to have the admin role. Use after @require_operator."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = getattr(g, "current_user", None)
        if user is None:
            return jsonify({"error": "Operator identity required"}), 401
        if not user.is_admin:
            return jsonify({"error": "Admin access required"}), 403
        return f(*args, **kwargs)

    return decorated_function
