# client/__init__.py
from client.api import ApiClient, ApiError
from client.markers import Marker, MarkerBoard
from client.poller import VehiclePoller
from client.session import SessionStore

__all__ = ["ApiClient", "ApiError", "Marker", "MarkerBoard", "SessionStore", "VehiclePoller"]
