# client/session.py
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

_log = logging.getLogger(__name__)

DEFAULT_PATH = Path(os.getenv("CITYCONNECT_SESSION", Path.home() / ".cityconnect" / "session.json"))


class SessionStore:
    """
    Holds the signed-in user and access token.

      store = SessionStore(path)
      store.init()                         -> restore a saved session, if any
      store.authenticate(user, session)    -> after login
      store.clear()                        -> logout; forgets everything
    """

    def __init__(self, path: Path | str = DEFAULT_PATH):
        self.path = Path(path)
        self.user: Optional[dict] = None
        self.token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token and self.user)

    @property
    def role(self) -> Optional[str]:
        return (self.user or {}).get("role")

    def init(self) -> bool:
        try:
            saved = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return False
        except (OSError, ValueError):
            _log.warning("[session] unreadable session file %s; ignoring", self.path)
            return False
        token, user = saved.get("token"), saved.get("user")
        if not (token and isinstance(user, dict)):
            return False
        self.token, self.user = token, user
        return True

    def authenticate(self, user: dict, session: dict | None) -> None:
        token = (session or {}).get("access_token")
        if not token:
            raise ValueError("login response carried no access token")
        self.user, self.token = dict(user), token
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"token": token, "user": self.user}), encoding="utf-8")
        try:
            os.chmod(self.path, 0o600)
        except OSError:
            _log.debug("[session] could not restrict permissions on %s", self.path)

    def clear(self) -> None:
        self.user, self.token = None, None
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
