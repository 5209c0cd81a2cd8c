# routes/tickets.py
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from auth_guard import require_role
from datastore import DatastoreError, get_datastore
from models.ticket import STATUS_CONFIRMED, Ticket
from models.user import ROLE_TRAVELLER
from utils.clock import local_tz, now_utc
from utils.parse import as_number, as_text
from utils.ticket_id import generate_ticket_id

tickets_bp = Blueprint("tickets", __name__, url_prefix="/tickets")


@tickets_bp.post("/book")
@require_role(ROLE_TRAVELLER, message="Only travellers can book tickets")
def book_ticket():
    """
    Body: { "vehicleId": "...", "fromLocation": "Quiapo", "toLocation": "Cubao", "fare": 25 }
    (`from` / `to` are accepted as aliases.)
    """
    data = request.get_json(silent=True) or {}
    vehicle_id = as_text(data.get("vehicleId"))
    origin = as_text(data.get("fromLocation", data.get("from")))
    destination = as_text(data.get("toLocation", data.get("to")))
    raw_fare = data.get("fare")

    if not (vehicle_id and origin and destination) or raw_fare in (None, ""):
        return jsonify(error="All booking details are required"), 400

    fare = as_number(raw_fare)
    if fare is None or fare <= 0:
        return jsonify(error="Fare must be a positive number"), 400
    if fare.is_integer():
        fare = int(fare)

    store = get_datastore()
    try:
        vehicle = store.get_vehicle(vehicle_id)
    except DatastoreError:
        current_app.logger.exception("[tickets] vehicle lookup failed vehicle=%s", vehicle_id)
        return jsonify(error="Failed to book ticket"), 500
    if vehicle is None:
        return jsonify(error="Vehicle not found"), 404

    now = now_utc()
    tz = local_tz(current_app.config.get("APP_TIMEZONE"))
    ticket = Ticket(
        ticket_id=generate_ticket_id(int(now.timestamp() * 1000)),
        user_id=g.identity.id,
        vehicle_id=vehicle_id,
        from_location=origin,
        to_location=destination,
        fare_amount=fare,
        travel_date=now.astimezone(tz).date().isoformat(),
        booking_status=STATUS_CONFIRMED,
        created_at=now.isoformat(),
    )

    try:
        saved = store.insert_ticket(ticket.to_row())
    except DatastoreError:
        current_app.logger.exception("[tickets] insert failed ticket=%s", ticket.ticket_id)
        return jsonify(error="Failed to book ticket"), 500

    if saved:
        ticket = Ticket.from_row({**ticket.to_row(), **saved})

    current_app.logger.info(
        "[tickets] booked %s uid=%s vehicle=%s fare=%s", ticket.ticket_id, ticket.user_id, vehicle_id, fare
    )
    return jsonify(success=True, ticket=ticket.to_json(vehicle)), 201


@tickets_bp.get("")
@require_role()
def list_tickets():
    try:
        rows = get_datastore().list_tickets(g.identity.id)
    except DatastoreError:
        current_app.logger.exception("[tickets] fetch failed uid=%s", g.identity.id)
        return jsonify(error="Failed to fetch tickets"), 500

    return jsonify([Ticket.from_row(r).to_json(r.get("vehicle")) for r in rows]), 200
