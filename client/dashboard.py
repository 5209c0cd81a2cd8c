# client/dashboard.py
from __future__ import annotations

from typing import Iterable, Mapping, Optional


def _vehicle_line(v: Mapping) -> str:
    where = "no position yet"
    if v.get("lat") is not None and v.get("lng") is not None:
        where = f"{v['lat']:.5f},{v['lng']:.5f}"
    return f"  {v.get('number') or '?':<14} {v.get('route') or '':<28} {v.get('status') or '':<9} {where}"


def render_traveller(vehicles: Iterable[Mapping]) -> str:
    vehicles = list(vehicles)
    lines = ["Live Vehicles"]
    if not vehicles:
        lines.append("  Loading vehicles...")
    lines.extend(_vehicle_line(v) for v in vehicles)
    return "\n".join(lines)


def render_staff(stats: Optional[Mapping]) -> str:
    lines = ["Staff Dashboard"]
    today = (stats or {}).get("todayStats")
    if not today:
        lines.append("  Stats unavailable.")
        return "\n".join(lines)
    lines += [
        f"  Passengers today : {today.get('passengers', 0)}",
        f"  Revenue today    : {today.get('revenue', 0)}",
        f"  Trips (estimate) : {today.get('trips', 0)}",
        f"  Hours on duty    : {today.get('hours', 0)}",
        f"  Active vehicles  : {today.get('activeVehicles', 0)}",
    ]
    return "\n".join(lines)


def render_dashboard(user: Mapping, vehicles: Iterable[Mapping], stats: Optional[Mapping] = None) -> str:
    """Header plus the view for the user's role."""
    header = f"LokYatra | Welcome, {user.get('name') or user.get('email') or 'traveller'}"
    role = user.get("role")
    if role == "staff":
        body = render_staff(stats)
    elif role == "traveller":
        body = render_traveller(vehicles)
    else:
        body = "No dashboard for this account."
    return f"{header}\n{body}"
