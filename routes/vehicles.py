# routes/vehicles.py
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from auth_guard import require_role
from datastore import DatastoreError, get_datastore
from models.user import ROLE_STAFF
from models.vehicle import STATUS_ACTIVE, Location
from services.vehicles import shape_vehicle_list
from utils.clock import now_iso
from utils.parse import as_number

vehicles_bp = Blueprint("vehicles", __name__, url_prefix="/vehicles")


@vehicles_bp.get("")
@require_role()
def list_vehicles():
    try:
        rows = get_datastore().list_vehicles()
    except DatastoreError:
        current_app.logger.exception("[vehicles] fetch failed")
        return jsonify(error="Failed to fetch vehicles"), 500
    return jsonify(shape_vehicle_list(rows)), 200


@vehicles_bp.get("/<vehicle_id>/location")
@require_role()
def get_location(vehicle_id: str):
    try:
        row = get_datastore().latest_location(vehicle_id)
    except DatastoreError:
        current_app.logger.exception("[vehicles] location fetch failed vehicle=%s", vehicle_id)
        return jsonify(error="Failed to fetch vehicle location"), 500

    if row is None:
        return jsonify(error="Vehicle location not found"), 404

    loc = Location.from_row(row)
    body = loc.to_json()
    body["vehicleId"] = vehicle_id
    return jsonify(body), 200


@vehicles_bp.post("/<vehicle_id>/location")
@require_role(ROLE_STAFF, message="Only staff can update vehicle locations")
def update_location(vehicle_id: str):
    """
    Append one position sample, then mark the vehicle active.

    Body: { "latitude": 14.59, "longitude": 120.98, "speed": 32, "heading": 90 }
    (`lat` / `lng` are accepted as aliases.)
    """
    data = request.get_json(silent=True) or {}
    raw_lat = data.get("latitude", data.get("lat"))
    raw_lng = data.get("longitude", data.get("lng"))
    if raw_lat is None or raw_lng is None or raw_lat == "" or raw_lng == "":
        return jsonify(error="Latitude and longitude are required"), 400

    lat, lng = as_number(raw_lat), as_number(raw_lng)
    if lat is None or lng is None:
        return jsonify(error="Latitude and longitude must be numbers"), 400
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return jsonify(error="Latitude or longitude out of range"), 400

    speed = as_number(data.get("speed")) or 0
    heading = as_number(data.get("heading")) or 0

    store = get_datastore()
    now = now_iso()
    try:
        row = store.insert_location({
            "vehicle_id": vehicle_id,
            "latitude": lat,
            "longitude": lng,
            "speed": speed,
            "heading": heading,
            "updated_by": g.identity.id,
            "created_at": now,
            "updated_at": now,
        })
    except DatastoreError:
        current_app.logger.exception("[vehicles] location insert failed vehicle=%s", vehicle_id)
        return jsonify(error="Failed to update vehicle location"), 500

    try:
        store.set_vehicle_status(vehicle_id, STATUS_ACTIVE, now=now)
    except DatastoreError:
        current_app.logger.exception("[vehicles] status update failed vehicle=%s; removing sample", vehicle_id)
        _discard_sample(row)
        return jsonify(error="Failed to update vehicle location"), 500

    current_app.logger.info(
        "[vehicles] location vehicle=%s lat=%.6f lng=%.6f by=%s", vehicle_id, lat, lng, g.identity.id
    )
    return jsonify(
        success=True,
        location={
            "vehicleId": vehicle_id,
            "latitude": lat,
            "longitude": lng,
            "timestamp": (row or {}).get("created_at", now),
        },
    ), 200


def _discard_sample(row: dict | None) -> None:
    if not row or row.get("id") is None:
        current_app.logger.error("[vehicles] cannot remove sample without id: %r", row)
        return
    try:
        get_datastore().delete_location(row["id"])
    except DatastoreError:
        current_app.logger.exception("[vehicles] sample id=%s left behind", row["id"])
