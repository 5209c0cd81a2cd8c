# client/markers.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping


@dataclass
class Marker:
    vehicle_id: str
    lat: float
    lng: float
    popup: str


def popup_text(vehicle: Mapping) -> str:
    return f"{vehicle.get('number')} | Route: {vehicle.get('route')}"


def _placeable(vehicle: Mapping) -> bool:
    return (
        vehicle.get("status") == "active"
        and vehicle.get("lat") is not None
        and vehicle.get("lng") is not None
    )


class MarkerBoard:
    """
    Map markers keyed by vehicle id. `sync` moves markers that already
    exist, adds new ones, and drops markers whose vehicle is gone, inactive,
    or has no position.
    """

    def __init__(self):
        self.markers: Dict[str, Marker] = {}

    def sync(self, vehicles: Iterable[Mapping]) -> Dict[str, list]:
        seen = set()
        added, moved = [], []
        for v in vehicles:
            if not _placeable(v):
                continue
            vid = str(v["id"])
            seen.add(vid)
            marker = self.markers.get(vid)
            if marker is None:
                self.markers[vid] = Marker(vid, v["lat"], v["lng"], popup_text(v))
                added.append(vid)
            else:
                if (marker.lat, marker.lng) != (v["lat"], v["lng"]):
                    moved.append(vid)
                marker.lat, marker.lng = v["lat"], v["lng"]
                marker.popup = popup_text(v)

        removed = [vid for vid in self.markers if vid not in seen]
        for vid in removed:
            del self.markers[vid]
        return {"added": added, "moved": moved, "removed": removed}
