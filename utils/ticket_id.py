# utils/ticket_id.py
from __future__ import annotations

import re
import secrets
import string
import time

PREFIX = "TKT"
SUFFIX_LEN = 6
_ALPHABET = string.digits + string.ascii_uppercase

TICKET_ID_RE = re.compile(r"^TKT-\d+-[0-9A-Z]{6}$")


def generate_ticket_id(now_ms: int | None = None) -> str:
    """
    TKT-<epoch millis>-<6 random [0-9A-Z]>, e.g. TKT-1718000000000-7QK2ZD.
    Unique only with high probability (36**6 suffixes per millisecond);
    collisions are not detected.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SUFFIX_LEN))
    return f"{PREFIX}-{now_ms}-{suffix}"

