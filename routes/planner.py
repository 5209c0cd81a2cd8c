# routes/planner.py
from __future__ import annotations

from flask import Blueprint, request, jsonify, current_app

from auth_guard import require_role
from datastore import DatastoreError, get_datastore
from services.planner import plan_routes

planner_bp = Blueprint("planner", __name__, url_prefix="/routes")


@planner_bp.get("/plan")
@require_role()
def plan():
    """
    GET /api/routes/plan?from=Airport&to=City
      -> { from, to, routes: [...], totalOptions }
    Matches active vehicles whose route name mentions either place.
    """
    origin = (request.args.get("from") or "").strip()
    destination = (request.args.get("to") or "").strip()
    if not origin or not destination:
        return jsonify(error="From and to locations are required"), 400

    try:
        vehicles = get_datastore().list_active_vehicles()
    except DatastoreError:
        current_app.logger.exception("[planner] active vehicles fetch failed")
        return jsonify(error="Failed to fetch routes"), 500

    routes = plan_routes(
        vehicles, origin, destination,
        default_fare=current_app.config.get("DEFAULT_ROUTE_FARE", 20),
    )
    return jsonify({"from": origin, "to": destination, "routes": routes, "totalOptions": len(routes)}), 200
