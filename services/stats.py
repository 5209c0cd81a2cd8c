# services/stats.py
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

# Display value on the staff dashboard; there is no shift ledger behind it.
PLACEHOLDER_SHIFT_HOURS = 6.2


def _to_number(x) -> Decimal:
    try:
        return Decimal(str(x))
    except (InvalidOperation, TypeError, ValueError):
        return Decimal(0)


def total_revenue(tickets: Iterable[Mapping[str, Any]]):
    total = sum((_to_number(t.get("fare_amount")) for t in tickets), Decimal(0))
    return int(total) if total == total.to_integral_value() else float(total)


def today_stats(
    tickets: list[Mapping[str, Any]],
    active_vehicles: int,
    *,
    avg_trip_capacity: int = 18,
) -> dict:
    """
    Rough dashboard numbers for one day. `trips` is passengers divided by an
    assumed average load, not a count of real trips.
    """
    passengers = len(tickets)
    return {
        "passengers": passengers,
        "revenue": total_revenue(tickets),
        "trips": passengers // max(int(avg_trip_capacity), 1),
        "hours": PLACEHOLDER_SHIFT_HOURS,
        "activeVehicles": active_vehicles or 0,
    }
