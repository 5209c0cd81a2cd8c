# models/ticket.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

TABLE = "tickets"

STATUS_CONFIRMED = "confirmed"


@dataclass(frozen=True)
class Ticket:
    ticket_id: str
    user_id: str
    vehicle_id: str
    from_location: str
    to_location: str
    fare_amount: float
    travel_date: Optional[str] = None
    booking_status: str = STATUS_CONFIRMED
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Ticket":
        return cls(
            ticket_id=row["ticket_id"],
            user_id=str(row.get("user_id")),
            vehicle_id=str(row.get("vehicle_id")),
            from_location=row.get("from_location"),
            to_location=row.get("to_location"),
            fare_amount=row.get("fare_amount"),
            travel_date=row.get("travel_date"),
            booking_status=row.get("booking_status") or STATUS_CONFIRMED,
            created_at=row.get("created_at"),
        )

    def to_row(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "user_id": self.user_id,
            "vehicle_id": self.vehicle_id,
            "from_location": self.from_location,
            "to_location": self.to_location,
            "fare_amount": self.fare_amount,
            "booking_status": self.booking_status,
            "travel_date": self.travel_date,
            "created_at": self.created_at,
            "updated_at": self.created_at,
        }

    def to_json(self, vehicle: Mapping[str, Any] | None = None) -> dict:
        vehicle = vehicle or {}
        return {
            "id": self.ticket_id,
            "vehicleNumber": vehicle.get("vehicle_number"),
            "route": vehicle.get("route_name"),
            "from": self.from_location,
            "to": self.to_location,
            "fare": self.fare_amount,
            "bookedAt": self.created_at,
            "travelDate": self.travel_date,
            "status": self.booking_status,
        }
