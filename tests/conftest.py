# tests/conftest.py
from __future__ import annotations

import itertools
import uuid

import pytest

from app import create_app
from config import TestingConfig
from datastore import AuthServiceError, Datastore, DatastoreError
from models.vehicle import LOCATIONS_TABLE
from utils.clock import now_iso, parse_ts


class FakeDatastore(Datastore):
    """
    In-memory stand-in for the Supabase-backed adapter. Records every call
    in `calls`; method names put in `fail` raise the adapter's error type.
    """

    AUTH_METHODS = {"verify_token", "sign_up", "sign_in", "sign_out", "delete_identity"}

    def __init__(self):
        super().__init__("http://supabase.test", "test-anon-key", "test-service-key")
        self.users: dict[str, dict] = {}      # email -> {id, email, password}
        self.tokens: dict[str, str] = {}      # token -> user id
        self.profiles: dict[str, dict] = {}
        self.vehicles: list[dict] = []
        self.locations: list[dict] = []
        self.tickets: list[dict] = []
        self.calls: list[str] = []
        self.fail: set[str] = set()
        self.revoked: list[str] = []
        self.deleted_identities: list[str] = []
        self._ids = itertools.count(1)

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail:
            if name in self.AUTH_METHODS:
                raise AuthServiceError(f"{name} unavailable")
            raise DatastoreError(f"{name} failed")

    def _issue_token(self, user_id: str) -> dict:
        token = f"tok-{uuid.uuid4().hex}"
        self.tokens[token] = user_id
        return {"access_token": token, "refresh_token": f"r-{token}", "token_type": "bearer", "expires_in": 3600}

    # ── helpers for tests ─────────────────────────────────
    def add_user(self, email: str, role: str | None, *, name: str = "Test User",
                 password: str = "secret123", profile: bool = True) -> str:
        uid = f"user-{next(self._ids)}"
        self.users[email] = {"id": uid, "email": email, "password": password}
        if profile:
            self.profiles[uid] = {"id": uid, "email": email, "name": name, "phone": "555-0100", "role": role}
        return self._issue_token(uid)["access_token"]

    def user_id(self, token: str) -> str:
        return self.tokens[token]

    def add_vehicle(self, **fields) -> dict:
        row = {
            "id": fields.pop("id", f"veh-{next(self._ids)}"),
            "vehicle_number": "V-001",
            "route_name": "Downtown Express",
            "status": "active",
            "capacity": 40,
            "vehicle_type": "bus",
            "next_stop": None,
            "eta": None,
            "base_fare": None,
            "created_at": now_iso(),
        }
        row.update(fields)
        self.vehicles.append(row)
        return row

    def add_location(self, vehicle_id: str, lat: float, lng: float, created_at: str, **fields) -> dict:
        row = {"id": next(self._ids), "vehicle_id": vehicle_id, "latitude": lat, "longitude": lng,
               "speed": 0, "heading": 0, "updated_by": None, "created_at": created_at}
        row.update(fields)
        self.locations.append(row)
        return row

    # ── auth ──────────────────────────────────────────────
    def verify_token(self, token):
        self._call("verify_token")
        uid = self.tokens.get(token)
        if uid is None:
            raise AuthServiceError("invalid JWT: unable to parse or verify signature")
        email = next(u["email"] for u in self.users.values() if u["id"] == uid)
        return {"id": uid, "email": email}

    def sign_up(self, email, password):
        self._call("sign_up")
        if email in self.users:
            raise AuthServiceError("User already registered", 422)
        if len(password) < 6:
            raise AuthServiceError("Password should be at least 6 characters", 422)
        uid = f"user-{next(self._ids)}"
        self.users[email] = {"id": uid, "email": email, "password": password}
        return {"id": uid, "email": email}, self._issue_token(uid)

    def sign_in(self, email, password):
        self._call("sign_in")
        user = self.users.get(email)
        if user is None or user["password"] != password:
            raise AuthServiceError("Invalid login credentials", 400)
        return {"id": user["id"], "email": email}, self._issue_token(user["id"])

    def sign_out(self, token):
        self._call("sign_out")
        self.tokens.pop(token, None)
        self.revoked.append(token)

    def delete_identity(self, user_id):
        self._call("delete_identity")
        self.users = {e: u for e, u in self.users.items() if u["id"] != user_id}
        self.tokens = {t: u for t, u in self.tokens.items() if u != user_id}
        self.deleted_identities.append(user_id)
        return True

    # ── profiles ──────────────────────────────────────────
    def get_profile(self, user_id):
        self._call("get_profile")
        row = self.profiles.get(user_id)
        return dict(row) if row else None

    def insert_profile(self, row):
        self._call("insert_profile")
        self.profiles[row["id"]] = dict(row)
        return dict(row)

    # ── vehicles ──────────────────────────────────────────
    def list_vehicles(self):
        self._call("list_vehicles")
        out = []
        for v in sorted(self.vehicles, key=lambda r: r["created_at"], reverse=True):
            locs = [dict(l) for l in self.locations if l["vehicle_id"] == v["id"]]
            out.append({**v, LOCATIONS_TABLE: locs})
        return out

    def list_active_vehicles(self):
        self._call("list_active_vehicles")
        return [dict(v) for v in self.vehicles if v["status"] == "active"]

    def count_active_vehicles(self):
        self._call("count_active_vehicles")
        return sum(1 for v in self.vehicles if v["status"] == "active")

    def get_vehicle(self, vehicle_id):
        self._call("get_vehicle")
        return next((dict(v) for v in self.vehicles if v["id"] == vehicle_id), None)

    def find_vehicle_by_number(self, number):
        self._call("find_vehicle_by_number")
        return next((dict(v) for v in self.vehicles if v["vehicle_number"] == number), None)

    def insert_vehicle(self, row):
        self._call("insert_vehicle")
        row = {"id": f"veh-{next(self._ids)}", **row}
        self.vehicles.append(row)
        return dict(row)

    def set_vehicle_status(self, vehicle_id, status, *, now):
        self._call("set_vehicle_status")
        for v in self.vehicles:
            if v["id"] == vehicle_id:
                v["status"] = status
                v["updated_at"] = now

    # ── locations ─────────────────────────────────────────
    def latest_location(self, vehicle_id):
        self._call("latest_location")
        rows = [l for l in self.locations if l["vehicle_id"] == vehicle_id]
        if not rows:
            return None
        return dict(max(rows, key=lambda r: parse_ts(r["created_at"])))

    def insert_location(self, row):
        self._call("insert_location")
        row = {"id": next(self._ids), **row}
        self.locations.append(row)
        return dict(row)

    def delete_location(self, location_id):
        self._call("delete_location")
        self.locations = [l for l in self.locations if l["id"] != location_id]

    # ── tickets ───────────────────────────────────────────
    def insert_ticket(self, row):
        self._call("insert_ticket")
        self.tickets.append(dict(row))
        return dict(row)

    def list_tickets(self, user_id):
        self._call("list_tickets")
        rows = [t for t in self.tickets if t["user_id"] == user_id]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        out = []
        for t in rows:
            v = next((v for v in self.vehicles if v["id"] == t["vehicle_id"]), {})
            out.append({**t, "vehicle": {"vehicle_number": v.get("vehicle_number"),
                                         "route_name": v.get("route_name")}})
        return out

    def tickets_created_between(self, start_iso, end_iso):
        self._call("tickets_created_between")
        start, end = parse_ts(start_iso), parse_ts(end_iso)
        return [
            {"fare_amount": t["fare_amount"], "created_at": t["created_at"]}
            for t in self.tickets
            if start <= parse_ts(t["created_at"]) < end
        ]


@pytest.fixture
def store():
    return FakeDatastore()


@pytest.fixture
def app(store):
    return create_app(TestingConfig, datastore=store)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def traveller(store):
    return store.add_user("rider@example.com", "traveller", name="Rita Rider")


@pytest.fixture
def staff(store):
    return store.add_user("crew@example.com", "staff", name="Sam Staff")


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
