# services/planner.py
"""
Route "planning": a case-insensitive substring match of the requested
origin / destination against each active vehicle's route name.

There is no trip computation here. Fare falls back to a flat default and
the duration / departure strings are fixed display values.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

PLACEHOLDER_DURATION = "25-30 mins"
PLACEHOLDER_NEXT_DEPARTURE = "5 mins"


def route_matches(route_name: str | None, origin: str, destination: str) -> bool:
    name = (route_name or "").lower()
    return origin.lower() in name or destination.lower() in name


def plan_routes(
    vehicles: Iterable[Mapping[str, Any]],
    origin: str,
    destination: str,
    *,
    default_fare: float = 20,
) -> list[dict]:
    options = []
    for v in vehicles:
        if not route_matches(v.get("route_name"), origin, destination):
            continue
        options.append({
            "id": v.get("id"),
            "vehicleNumber": v.get("vehicle_number"),
            "route": v.get("route_name"),
            "type": v.get("vehicle_type"),
            "estimatedFare": v.get("base_fare") or default_fare,
            "estimatedDuration": PLACEHOLDER_DURATION,
            "nextDeparture": PLACEHOLDER_NEXT_DEPARTURE,
        })
    return options
