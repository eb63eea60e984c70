# Overview: Flask API route for the dashboard read model; returns JSON responses.

"""
Dashboard Routes

SECURITY:
- Requires VIEW_DASHBOARD (organizer, treasurer and admin).
"""

from flask import Blueprint, jsonify, current_app

from ..decorators import require_auth, require_permission
from ..extensions import db
from ..services import dashboard_service


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/stats")
@require_auth
@require_permission("VIEW_DASHBOARD")
def dashboard_stats_route():
    try:
        return jsonify(dashboard_service.get_dashboard_stats())
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to build dashboard stats")
        return jsonify({"error": "Internal server error"}), 500
