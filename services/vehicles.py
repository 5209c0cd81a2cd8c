# services/vehicles.py
from __future__ import annotations

import datetime as dt
from typing import Any, Iterable, Mapping

from models.vehicle import LOCATIONS_TABLE, Location, Vehicle
from utils.clock import parse_ts

_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)


def _ts_key(row: Mapping[str, Any]) -> dt.datetime:
    return parse_ts(row.get("created_at")) or _EPOCH


def latest_location(rows: Iterable[Mapping[str, Any]] | None) -> Location | None:
    """Newest location row by created_at, or None. Rows arrive in no particular order."""
    rows = [r for r in (rows or []) if r]
    if not rows:
        return None
    return Location.from_row(max(rows, key=_ts_key))


def order_vehicles(rows: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """Newest registration first; ties broken by id so the list is stable across calls."""
    rows = list(rows)
    rows.sort(key=lambda r: str(r.get("id")))
    rows.sort(key=_ts_key, reverse=True)
    return rows


def shape_vehicle_list(rows: Iterable[Mapping[str, Any]]) -> list[dict]:
    return [
        Vehicle.from_row(row).to_json(latest_location(row.get(LOCATIONS_TABLE)))
        for row in order_vehicles(rows)
    ]
