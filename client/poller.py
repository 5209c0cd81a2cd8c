# client/poller.py
from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

_log = logging.getLogger(__name__)

DEFAULT_INTERVAL_S = 30.0


class VehiclePoller:
    """
    Periodic refresh of the vehicle list on a daemon thread.

    The first fetch happens right away; afterwards every `interval` seconds
    until `stop()`. A failed fetch is logged and the loop carries on.
    """

    def __init__(self, fetch: Callable[[], List[dict]], on_update: Callable[[List[dict]], None],
                 interval: float = DEFAULT_INTERVAL_S,
                 on_error: Optional[Callable[[Exception], None]] = None):
        self.fetch = fetch
        self.on_update = on_update
        self.on_error = on_error
        self.interval = float(interval)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def refresh_once(self) -> bool:
        try:
            vehicles = self.fetch()
        except Exception as e:
            _log.warning("[poller] failed to fetch vehicles: %s", e)
            if self.on_error:
                self.on_error(e)
            return False
        self.on_update(vehicles)
        return True

    def _run(self) -> None:
        while not self._stop.is_set():
            self.refresh_once()
            if self._stop.wait(self.interval):
                break

    def start(self) -> "VehiclePoller":
        if self.running:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="vehicle-poller", daemon=True)
        self._thread.start()
        return self

    def join(self, timeout: Optional[float] = None) -> None:
        thread = self._thread
        if thread is not None:
            thread.join(timeout)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self._thread = None
