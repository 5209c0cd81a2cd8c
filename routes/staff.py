# routes/staff.py
from __future__ import annotations

from flask import Blueprint, jsonify, current_app

from auth_guard import require_role
from datastore import DatastoreError, get_datastore
from models.user import ROLE_STAFF
from services.stats import today_stats
from utils.clock import day_bounds, local_tz

staff_bp = Blueprint("staff", __name__, url_prefix="/staff")


@staff_bp.get("/stats")
@require_role(ROLE_STAFF, message="Only staff can access these stats")
def stats():
    tz = local_tz(current_app.config.get("APP_TIMEZONE"))
    start, end = day_bounds(tz)

    store = get_datastore()
    try:
        tickets = store.tickets_created_between(start.isoformat(), end.isoformat())
        active = store.count_active_vehicles()
    except DatastoreError:
        current_app.logger.exception("[staff] stats fetch failed day=%s", start.date())
        return jsonify(error="Failed to fetch stats"), 500

    return jsonify(todayStats=today_stats(
        tickets, active,
        avg_trip_capacity=current_app.config.get("AVG_TRIP_CAPACITY", 18),
    )), 200
