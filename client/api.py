# client/api.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

_log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000/api"

# (connect timeout, read timeout)
CONNECT_TIMEOUT_S = 3.0
READ_TIMEOUT_S = 10.0


class ApiError(Exception):
    """Non-2xx answer from the API; `message` is the server's `error` field when present."""

    def __init__(self, status: int, message: str):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message


class ApiClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, token: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.http = session or requests.Session()

    def request(self, method: str, endpoint: str, body: Optional[dict] = None,
                params: Optional[dict] = None) -> Any:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        resp = self.http.request(
            method,
            f"{self.base_url}{endpoint}",
            json=body,
            params=params,
            headers=headers,
            timeout=(CONNECT_TIMEOUT_S, READ_TIMEOUT_S),
        )
        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.ok:
            message = (data or {}).get("error") if isinstance(data, dict) else None
            raise ApiError(resp.status_code, message or f"HTTP error! Status: {resp.status_code}")
        return data

    # ── auth ──────────────────────────────────────────────
    def signup(self, *, name: str, email: str, phone: str, password: str, role: str = "traveller") -> dict:
        return self.request("POST", "/auth/signup",
                            {"name": name, "email": email, "phone": phone, "password": password, "role": role})

    def login(self, email: str, password: str) -> dict:
        return self.request("POST", "/auth/login", {"email": email, "password": password})

    def logout(self) -> dict:
        return self.request("POST", "/auth/logout")

    # ── vehicles ──────────────────────────────────────────
    def vehicles(self) -> list:
        return self.request("GET", "/vehicles")

    def vehicle_location(self, vehicle_id: str) -> dict:
        return self.request("GET", f"/vehicles/{vehicle_id}/location")

    def update_location(self, vehicle_id: str, latitude: float, longitude: float,
                        speed: float = 0, heading: float = 0) -> dict:
        body: Dict[str, Any] = {"latitude": latitude, "longitude": longitude, "speed": speed, "heading": heading}
        return self.request("POST", f"/vehicles/{vehicle_id}/location", body)

    # ── tickets / planning / staff ────────────────────────
    def book_ticket(self, vehicle_id: str, from_location: str, to_location: str, fare: float) -> dict:
        return self.request("POST", "/tickets/book", {
            "vehicleId": vehicle_id, "fromLocation": from_location, "toLocation": to_location, "fare": fare,
        })

    def tickets(self) -> list:
        return self.request("GET", "/tickets")

    def plan_route(self, origin: str, destination: str) -> dict:
        return self.request("GET", "/routes/plan", params={"from": origin, "to": destination})

    def staff_stats(self) -> dict:
        return self.request("GET", "/staff/stats")
