# models/user.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

TABLE = "user_profiles"

ROLE_TRAVELLER = "traveller"
ROLE_STAFF = "staff"
ROLES = (ROLE_TRAVELLER, ROLE_STAFF)


@dataclass(frozen=True)
class Identity:
    """
    An authenticated principal: the auth-provider user merged with its
    `user_profiles` row. `role` is None when the profile row is missing.
    """
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_rows(cls, auth_user: Mapping[str, Any], profile: Mapping[str, Any] | None) -> "Identity":
        profile = profile or {}
        return cls(
            id=str(auth_user["id"]),
            email=auth_user.get("email") or profile.get("email"),
            name=profile.get("name"),
            phone=profile.get("phone"),
            role=(profile.get("role") or "").lower() or None,
        )

    @property
    def display_name(self) -> str:
        return (self.name or "").strip() or (self.email or f"User {self.id}")

    def summary(self) -> dict:
        return {"id": self.id, "email": self.email, "name": self.name, "role": self.role}


def profile_row(user_id: str, *, email: str, name: str, phone: str, role: str, now: str) -> dict:
    return {
        "id": user_id,
        "email": email,
        "name": name,
        "phone": phone,
        "role": role,
        "created_at": now,
        "updated_at": now,
    }
