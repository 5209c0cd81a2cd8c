#!/usr/bin/env python3
# seed.py

from datastore import Datastore
from models.vehicle import STATUS_INACTIVE
from utils.clock import now_iso

# Demo fleet definition
DEMO_VEHICLES = [
    {"vehicle_number": "DL-1PC-0421", "route_name": "Downtown Express", "vehicle_type": "bus",
     "capacity": 40, "next_stop": "Central Square", "eta": "4 mins", "base_fare": 25},
    {"vehicle_number": "DL-1PC-0587", "route_name": "Airport Shuttle", "vehicle_type": "bus",
     "capacity": 32, "next_stop": "Terminal 2", "eta": "9 mins", "base_fare": 60},
    {"vehicle_number": "DL-3CA-1190", "route_name": "University - City Centre", "vehicle_type": "minibus",
     "capacity": 18, "next_stop": "Library Gate", "eta": "2 mins", "base_fare": None},
]


def seed_vehicles(store: Datastore) -> int:
    """
    Inserts the demo vehicles that are not there yet (matched by vehicle
    number). New vehicles start inactive until a staff member posts a
    location. Safe to run more than once.
    """
    created = 0
    for row in DEMO_VEHICLES:
        if store.find_vehicle_by_number(row["vehicle_number"]):
            print(f"🔄 {row['vehicle_number']} already present, skipping.")
            continue
        now = now_iso()
        store.insert_vehicle({**row, "status": STATUS_INACTIVE, "created_at": now, "updated_at": now})
        print(f"➕ Created vehicle `{row['vehicle_number']}` on {row['route_name']}.")
        created += 1
    return created


if __name__ == "__main__":
    from app import create_app

    app = create_app()
    with app.app_context():
        n = seed_vehicles(app.extensions["datastore"])
    print(f"✅ Seeded {n} vehicle(s).")
