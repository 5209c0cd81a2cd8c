# auth_guard.py
from __future__ import annotations

from functools import wraps

from flask import request, jsonify, g, current_app

from datastore import AuthServiceError, DatastoreError, get_datastore
from models.user import Identity

__all__ = ["require_role", "has_role", "bearer_token"]

# Per-role refusal messages; anything else gets the generic one.
_FORBIDDEN = {
    "staff": "Only staff can perform this action",
    "traveller": "Only travellers can perform this action",
}


def bearer_token() -> str | None:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    token = auth.split(" ", 1)[1].strip()
    return token or None


def has_role(identity: Identity | None, role: str) -> bool:
    if identity is None or not identity.role:
        return False
    return identity.role == str(role).lower()


def require_role(*roles, message: str | None = None):
    """
    Usage:
      @require_role()                         -> any authenticated user
      @require_role("staff")                  -> only staff
      @require_role("staff", message="...")   -> custom 403 text

    The token is verified by the auth provider and the profile row is read
    once; the result is kept on g.identity for the handler.
    """
    if len(roles) == 1 and isinstance(roles[0], (list, tuple, set)):
        roles = tuple(roles[0])
    allowed = {str(r).lower() for r in roles if r}

    def decorator(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            token = bearer_token()
            if not token:
                return jsonify(error="Access token required"), 401

            store = get_datastore()
            try:
                auth_user = store.verify_token(token)
            except AuthServiceError as e:
                current_app.logger.info("[guard] token rejected: %s", e.message)
                return jsonify(error="Invalid or expired token"), 403

            try:
                profile = store.get_profile(auth_user["id"])
            except DatastoreError:
                current_app.logger.exception("[guard] profile lookup failed uid=%s", auth_user.get("id"))
                return jsonify(error="Authentication processing error"), 500

            identity = Identity.from_rows(auth_user, profile)
            g.identity = identity
            g.access_token = token

            current_app.logger.info(
                "[guard] %s %s uid=%s role=%s ip=%s",
                request.method,
                request.path,
                identity.id,
                identity.role or "—",
                request.remote_addr,
            )

            if allowed and not any(has_role(identity, r) for r in allowed):
                if message:
                    text = message
                elif len(allowed) == 1:
                    text = _FORBIDDEN.get(next(iter(allowed)), "Insufficient permissions")
                else:
                    text = "Insufficient permissions"
                return jsonify(error=text), 403

            return f(*args, **kwargs)

        return wrapped

    return decorator
