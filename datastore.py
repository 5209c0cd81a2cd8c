# datastore.py
"""
Thin adapter over the managed backend (Supabase auth + PostgREST tables).

Every method is a single pass-through call. Table failures raise
DatastoreError; auth failures raise AuthServiceError carrying the provider's
message. Rows come back as plain dicts.

Tables used:
  - user_profiles      (id, email, name, phone, role, created_at, updated_at)
  - vehicles           (id, vehicle_number, route_name, status, capacity,
                        vehicle_type, next_stop, eta, base_fare, created_at, ...)
  - vehicle_locations  (id, vehicle_id, latitude, longitude, speed, heading,
                        updated_by, created_at, updated_at)   -- append-only
  - tickets            (ticket_id, user_id, vehicle_id, from_location,
                        to_location, fare_amount, travel_date,
                        booking_status, created_at, updated_at)
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from flask import Flask, current_app
from supabase import AuthError, Client, PostgrestAPIError, create_client
from supabase.lib.client_options import SyncClientOptions

from models import ticket as ticket_model
from models import user as user_model
from models import vehicle as vehicle_model

__all__ = ["Datastore", "DatastoreError", "AuthServiceError", "get_datastore"]

_log = logging.getLogger("datastore")


class DatastoreError(Exception):
    """A table read/write against the managed backend failed."""


class AuthServiceError(Exception):
    """The auth provider rejected a call. `message` is safe to show to clients."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


def _dump(obj: Any) -> dict | None:
    if obj is None:
        return None
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    return dict(obj)


def _first(resp) -> dict | None:
    rows = resp.data or []
    return rows[0] if rows else None


def _client_options() -> SyncClientOptions:
    # sessions belong to the caller; the server must never refresh them itself
    return SyncClientOptions(auto_refresh_token=False, persist_session=False)


class Datastore:
    """
    Usage:
      datastore = Datastore()
      datastore.init_app(app)          -> reads SUPABASE_* from app.config
      get_datastore().get_profile(uid) -> inside a request
    """

    def __init__(self, url: str = "", anon_key: str = "", service_key: str = ""):
        self.url = url
        self.anon_key = anon_key
        self.service_key = service_key
        self._client: Optional[Client] = None

    def init_app(self, app: Flask) -> None:
        self.url = self.url or app.config.get("SUPABASE_URL", "")
        self.anon_key = self.anon_key or app.config.get("SUPABASE_ANON_KEY", "")
        self.service_key = self.service_key or app.config.get("SUPABASE_SERVICE_ROLE_KEY", "")
        if not (self.url and self.anon_key):
            app.logger.warning("[datastore] SUPABASE_URL / SUPABASE_ANON_KEY not set; calls will fail")
        app.extensions["datastore"] = self

    # ───────────────────────── clients ─────────────────────────
    @property
    def client(self) -> Client:
        """Long-lived client for table calls and token checks (never signs in)."""
        if self._client is None:
            self._client = create_client(self.url, self.service_key or self.anon_key, options=_client_options())
        return self._client

    def _auth_client(self) -> Client:
        # sign-up / sign-in store a session on the client; keep that per call
        return create_client(self.url, self.anon_key, options=_client_options())

    def _run(self, query, what: str):
        try:
            return query.execute()
        except PostgrestAPIError as e:
            _log.error("[datastore] %s failed: %s", what, e.message)
            raise DatastoreError(f"{what} failed") from e
        except httpx.HTTPError as e:
            _log.error("[datastore] %s unreachable: %s", what, e)
            raise DatastoreError(f"{what} failed") from e

    # ───────────────────────── auth ────────────────────────────
    def verify_token(self, token: str) -> dict:
        try:
            resp = self.client.auth.get_user(token)
        except AuthError as e:
            raise AuthServiceError(e.message, getattr(e, "status", None)) from e
        except httpx.HTTPError as e:
            _log.warning("[datastore] token verification unreachable: %s", e)
            raise AuthServiceError("Token verification failed") from e
        if resp is None or resp.user is None:
            raise AuthServiceError("Invalid token")
        return _dump(resp.user)

    def sign_up(self, email: str, password: str) -> tuple[dict, dict | None]:
        try:
            resp = self._auth_client().auth.sign_up({"email": email, "password": password})
        except AuthError as e:
            raise AuthServiceError(e.message, getattr(e, "status", None)) from e
        except httpx.HTTPError as e:
            _log.warning("[datastore] auth provider unreachable during sign_up: %s", e)
            raise AuthServiceError("Authentication service unavailable") from e
        if resp.user is None:
            raise AuthServiceError("Signup failed")
        return _dump(resp.user), _dump(resp.session)

    def sign_in(self, email: str, password: str) -> tuple[dict, dict | None]:
        try:
            resp = self._auth_client().auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as e:
            raise AuthServiceError(e.message, getattr(e, "status", None)) from e
        except httpx.HTTPError as e:
            _log.warning("[datastore] auth provider unreachable during sign_in: %s", e)
            raise AuthServiceError("Authentication service unavailable") from e
        if resp.user is None:
            raise AuthServiceError("Invalid credentials")
        return _dump(resp.user), _dump(resp.session)

    def sign_out(self, token: str) -> None:
        try:
            self.client.auth.admin.sign_out(token)
        except AuthError as e:
            raise AuthServiceError(e.message, getattr(e, "status", None)) from e
        except httpx.HTTPError as e:
            _log.warning("[datastore] auth provider unreachable during sign_out: %s", e)
            raise AuthServiceError("Authentication service unavailable") from e

    def delete_identity(self, user_id: str) -> bool:
        """Remove an auth user. Returns False when no service-role key is configured."""
        if not self.service_key:
            return False
        try:
            self.client.auth.admin.delete_user(user_id)
        except AuthError as e:
            raise AuthServiceError(e.message, getattr(e, "status", None)) from e
        except httpx.HTTPError as e:
            _log.warning("[datastore] auth provider unreachable during delete_identity: %s", e)
            raise AuthServiceError("Authentication service unavailable") from e
        return True

    # ───────────────────────── profiles ────────────────────────
    def get_profile(self, user_id: str) -> dict | None:
        q = self.client.table(user_model.TABLE).select("*").eq("id", user_id).limit(1)
        return _first(self._run(q, "profile fetch"))

    def insert_profile(self, row: dict) -> dict:
        return _first(self._run(self.client.table(user_model.TABLE).insert(row), "profile insert"))

    # ───────────────────────── vehicles ────────────────────────
    def list_vehicles(self) -> list[dict]:
        """All vehicles, newest first, each embedding only its latest `vehicle_locations` row."""
        q = (
            self.client.table(vehicle_model.VEHICLES_TABLE)
            .select(f"*, {vehicle_model.LOCATIONS_TABLE}(*)")
            .order("created_at", desc=True)
            .order("created_at", desc=True, foreign_table=vehicle_model.LOCATIONS_TABLE)
            .limit(1, foreign_table=vehicle_model.LOCATIONS_TABLE)
        )
        return self._run(q, "vehicles fetch").data or []

    def list_active_vehicles(self) -> list[dict]:
        q = (
            self.client.table(vehicle_model.VEHICLES_TABLE)
            .select("*")
            .eq("status", vehicle_model.STATUS_ACTIVE)
        )
        return self._run(q, "active vehicles fetch").data or []

    def count_active_vehicles(self) -> int:
        q = (
            self.client.table(vehicle_model.VEHICLES_TABLE)
            .select("id", count="exact")
            .eq("status", vehicle_model.STATUS_ACTIVE)
        )
        return self._run(q, "active vehicles count").count or 0

    def get_vehicle(self, vehicle_id: str) -> dict | None:
        q = self.client.table(vehicle_model.VEHICLES_TABLE).select("*").eq("id", vehicle_id).limit(1)
        return _first(self._run(q, "vehicle fetch"))

    def find_vehicle_by_number(self, number: str) -> dict | None:
        q = (
            self.client.table(vehicle_model.VEHICLES_TABLE)
            .select("*")
            .eq("vehicle_number", number)
            .limit(1)
        )
        return _first(self._run(q, "vehicle lookup"))

    def insert_vehicle(self, row: dict) -> dict:
        return _first(self._run(self.client.table(vehicle_model.VEHICLES_TABLE).insert(row), "vehicle insert"))

    def set_vehicle_status(self, vehicle_id: str, status: str, *, now: str) -> None:
        q = (
            self.client.table(vehicle_model.VEHICLES_TABLE)
            .update({"status": status, "updated_at": now})
            .eq("id", vehicle_id)
        )
        self._run(q, "vehicle status update")

    # ───────────────────────── locations ───────────────────────
    def latest_location(self, vehicle_id: str) -> dict | None:
        q = (
            self.client.table(vehicle_model.LOCATIONS_TABLE)
            .select("*")
            .eq("vehicle_id", vehicle_id)
            .order("created_at", desc=True)
            .limit(1)
        )
        return _first(self._run(q, "location fetch"))

    def insert_location(self, row: dict) -> dict:
        return _first(self._run(self.client.table(vehicle_model.LOCATIONS_TABLE).insert(row), "location insert"))

    def delete_location(self, location_id: Any) -> None:
        q = self.client.table(vehicle_model.LOCATIONS_TABLE).delete().eq("id", location_id)
        self._run(q, "location delete")

    # ───────────────────────── tickets ─────────────────────────
    def insert_ticket(self, row: dict) -> dict:
        return _first(self._run(self.client.table(ticket_model.TABLE).insert(row), "ticket insert"))

    def list_tickets(self, user_id: str) -> list[dict]:
        """The user's tickets, newest first, with `vehicle` {vehicle_number, route_name} embedded."""
        q = (
            self.client.table(ticket_model.TABLE)
            .select("*, vehicle:vehicles(vehicle_number, route_name)")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
        )
        return self._run(q, "tickets fetch").data or []

    def tickets_created_between(self, start_iso: str, end_iso: str) -> list[dict]:
        q = (
            self.client.table(ticket_model.TABLE)
            .select("fare_amount, created_at")
            .gte("created_at", start_iso)
            .lt("created_at", end_iso)
        )
        return self._run(q, "ticket stats fetch").data or []


def get_datastore() -> Datastore:
    return current_app.extensions["datastore"]
