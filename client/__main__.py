# client/__main__.py
"""
Terminal client for the CityConnect API.

  python -m client login --email me@example.com
  python -m client watch               # live vehicles / staff stats, refreshed every 30s
  python -m client locate <vehicle-id> --lat 14.59 --lng 120.98   # staff
  python -m client plan Airport City
  python -m client book <vehicle-id> Airport City 60
  python -m client tickets
  python -m client logout
"""
from __future__ import annotations

import argparse
import getpass
import json
import logging
import os
import sys

from client.api import DEFAULT_BASE_URL, ApiClient, ApiError
from client.dashboard import render_dashboard
from client.markers import MarkerBoard
from client.poller import DEFAULT_INTERVAL_S, VehiclePoller
from client.session import DEFAULT_PATH, SessionStore

_log = logging.getLogger("client")


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


def _require_login(store: SessionStore) -> None:
    if not store.is_authenticated:
        raise SystemExit("Not signed in. Run `python -m client login` first.")


def cmd_signup(api: ApiClient, store: SessionStore, args) -> int:
    password = args.password or getpass.getpass("Password: ")
    confirm = args.password or getpass.getpass("Confirm password: ")
    if password != confirm:
        print("Passwords do not match.", file=sys.stderr)
        return 1
    api.signup(name=args.name, email=args.email, phone=args.phone, password=password, role=args.role)
    print("Account created! Please log in.")
    return 0


def cmd_login(api: ApiClient, store: SessionStore, args) -> int:
    password = args.password or getpass.getpass("Password: ")
    data = api.login(args.email, password)
    store.authenticate(data["user"], data.get("session"))
    print(f"Signed in as {data['user'].get('name')} ({data['user'].get('role')}).")
    return 0


def cmd_logout(api: ApiClient, store: SessionStore, args) -> int:
    if store.is_authenticated:
        try:
            api.logout()
        except ApiError as e:
            _log.warning("server logout failed: %s", e.message)
    store.clear()
    print("Signed out.")
    return 0


def cmd_watch(api: ApiClient, store: SessionStore, args) -> int:
    _require_login(store)
    board = MarkerBoard()
    is_staff = store.role == "staff"

    def on_update(vehicles):
        changes = board.sync(vehicles)
        stats = None
        if is_staff:
            try:
                stats = api.staff_stats()
            except ApiError as e:
                _log.warning("stats unavailable: %s", e.message)
        print(render_dashboard(store.user, vehicles, stats))
        print(f"  markers: {len(board.markers)} "
              f"(+{len(changes['added'])} ~{len(changes['moved'])} -{len(changes['removed'])})\n")

    def on_error(exc):
        if isinstance(exc, ApiError) and exc.status in (401, 403):
            print("Session expired; please log in again.", file=sys.stderr)
            store.clear()
            poller.stop(timeout=None)

    poller = VehiclePoller(api.vehicles, on_update, interval=args.interval, on_error=on_error)
    poller.start()
    try:
        while poller.running:
            poller.join(0.5)
    except KeyboardInterrupt:
        pass
    finally:
        poller.stop()
    return 0


def cmd_locate(api: ApiClient, store: SessionStore, args) -> int:
    """Show a vehicle's last position, or post a new one when --lat/--lng are given (staff)."""
    _require_login(store)
    if args.lat is None and args.lng is None:
        _print_json(api.vehicle_location(args.vehicle_id))
        return 0
    if args.lat is None or args.lng is None:
        print("Both --lat and --lng are needed to post a position.", file=sys.stderr)
        return 1
    _print_json(api.update_location(args.vehicle_id, args.lat, args.lng, speed=args.speed, heading=args.heading))
    return 0


def cmd_plan(api: ApiClient, store: SessionStore, args) -> int:
    _require_login(store)
    _print_json(api.plan_route(args.origin, args.destination))
    return 0


def cmd_book(api: ApiClient, store: SessionStore, args) -> int:
    _require_login(store)
    _print_json(api.book_ticket(args.vehicle_id, args.origin, args.destination, args.fare))
    return 0


def cmd_tickets(api: ApiClient, store: SessionStore, args) -> int:
    _require_login(store)
    _print_json(api.tickets())
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="python -m client", description="CityConnect terminal client")
    p.add_argument("--api", default=os.getenv("CITYCONNECT_API", DEFAULT_BASE_URL), help="API base URL")
    p.add_argument("--session-file", default=str(DEFAULT_PATH))
    p.add_argument("-v", "--verbose", action="store_true")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("signup")
    s.add_argument("--name", required=True)
    s.add_argument("--email", required=True)
    s.add_argument("--phone", required=True)
    s.add_argument("--role", choices=("traveller", "staff"), default="traveller")
    s.add_argument("--password")
    s.set_defaults(func=cmd_signup)

    s = sub.add_parser("login")
    s.add_argument("--email", required=True)
    s.add_argument("--password")
    s.set_defaults(func=cmd_login)

    sub.add_parser("logout").set_defaults(func=cmd_logout)

    s = sub.add_parser("watch")
    s.add_argument("--interval", type=float, default=DEFAULT_INTERVAL_S)
    s.set_defaults(func=cmd_watch)

    s = sub.add_parser("locate")
    s.add_argument("vehicle_id")
    s.add_argument("--lat", type=float)
    s.add_argument("--lng", type=float)
    s.add_argument("--speed", type=float, default=0)
    s.add_argument("--heading", type=float, default=0)
    s.set_defaults(func=cmd_locate)

    s = sub.add_parser("plan")
    s.add_argument("origin")
    s.add_argument("destination")
    s.set_defaults(func=cmd_plan)

    s = sub.add_parser("book")
    s.add_argument("vehicle_id")
    s.add_argument("origin")
    s.add_argument("destination")
    s.add_argument("fare", type=float)
    s.set_defaults(func=cmd_book)

    sub.add_parser("tickets").set_defaults(func=cmd_tickets)
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s: %(message)s")

    store = SessionStore(args.session_file)
    store.init()
    api = ApiClient(args.api, token=store.token)
    try:
        return args.func(api, store, args)
    except ApiError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
