# models/vehicle.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

VEHICLES_TABLE = "vehicles"
LOCATIONS_TABLE = "vehicle_locations"

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"


@dataclass(frozen=True)
class Location:
    """One append-only position sample. The current location is the newest row."""
    vehicle_id: str
    latitude: float
    longitude: float
    speed: float = 0
    heading: float = 0
    created_at: Optional[str] = None
    updated_by: Optional[str] = None
    id: Optional[Any] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Location":
        return cls(
            id=row.get("id"),
            vehicle_id=str(row.get("vehicle_id")),
            latitude=row.get("latitude"),
            longitude=row.get("longitude"),
            speed=row.get("speed") or 0,
            heading=row.get("heading") or 0,
            created_at=row.get("created_at"),
            updated_by=row.get("updated_by"),
        )

    def to_json(self) -> dict:
        return {
            "vehicleId": self.vehicle_id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timestamp": self.created_at,
            "speed": self.speed,
            "heading": self.heading,
        }


@dataclass(frozen=True)
class Vehicle:
    id: str
    number: Optional[str] = None
    route: Optional[str] = None
    status: Optional[str] = None
    capacity: Optional[int] = None
    type: Optional[str] = None
    next_stop: Optional[str] = None
    eta: Optional[str] = None
    base_fare: Optional[float] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Vehicle":
        return cls(
            id=row["id"],
            number=row.get("vehicle_number"),
            route=row.get("route_name"),
            status=row.get("status"),
            capacity=row.get("capacity"),
            type=row.get("vehicle_type"),
            next_stop=row.get("next_stop"),
            eta=row.get("eta"),
            base_fare=row.get("base_fare"),
            created_at=row.get("created_at"),
        )

    def to_json(self, location: Location | None = None) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "route": self.route,
            "status": self.status,
            "capacity": self.capacity,
            "type": self.type,
            "lat": location.latitude if location else None,
            "lng": location.longitude if location else None,
            "lastUpdated": location.created_at if location else None,
            "nextStop": self.next_stop,
            "eta": self.eta,
        }
