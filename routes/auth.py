# routes/auth.py
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from auth_guard import require_role
from datastore import AuthServiceError, DatastoreError, get_datastore
from models.user import ROLES, Identity, profile_row
from utils.clock import now_iso

__all__ = ["auth_bp"]
auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ""


# -------------------------------------------------------------------
# Middleware
# -------------------------------------------------------------------
@auth_bp.after_request
def add_auth_headers(resp):
    # responses carry session tokens
    resp.headers["Cache-Control"] = "no-store"
    resp.headers["Pragma"] = "no-cache"
    return resp


# -------------------------------------------------------------------
# Signup
# -------------------------------------------------------------------
@auth_bp.route("/signup", methods=["POST"])
def signup():
    data = request.get_json(silent=True) or {}
    email = _clean(data.get("email"))
    password = data.get("password") if isinstance(data.get("password"), str) else ""
    name = _clean(data.get("name") or data.get("fullName"))
    phone = _clean(data.get("phone"))
    role = _clean(data.get("role")).lower()

    if not (email and password and name and phone and role):
        return jsonify(error="All fields are required"), 400
    if role not in ROLES:
        return jsonify(error="Invalid role"), 400

    store = get_datastore()
    try:
        auth_user, session = store.sign_up(email, password)
    except AuthServiceError as e:
        current_app.logger.info("[auth] signup rejected email=%s: %s", email, e.message)
        return jsonify(error=e.message), 400

    user_id = str(auth_user["id"])
    try:
        store.insert_profile(profile_row(user_id, email=email, name=name, phone=phone, role=role, now=now_iso()))
    except DatastoreError:
        current_app.logger.exception("[auth] profile creation failed uid=%s", user_id)
        _discard_identity(user_id)
        return jsonify(error="Failed to create user profile"), 500

    current_app.logger.info("[auth] signup uid=%s role=%s", user_id, role)
    return jsonify(
        success=True,
        user={"id": user_id, "email": auth_user.get("email") or email, "name": name, "role": role},
        session=session,
    ), 201


def _discard_identity(user_id: str) -> None:
    """Undo step one of signup so no credential is left without a profile."""
    try:
        removed = get_datastore().delete_identity(user_id)
    except AuthServiceError as e:
        current_app.logger.error("[auth] orphaned auth user uid=%s (delete failed: %s)", user_id, e.message)
        return
    if not removed:
        current_app.logger.error("[auth] orphaned auth user uid=%s (no service-role key to delete it)", user_id)


# -------------------------------------------------------------------
# Login / logout
# -------------------------------------------------------------------
@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    email = _clean(data.get("email"))
    password = data.get("password") if isinstance(data.get("password"), str) else ""

    if not email or not password:
        return jsonify(error="Email and password are required"), 400

    store = get_datastore()
    try:
        auth_user, session = store.sign_in(email, password)
    except AuthServiceError as e:
        # one answer for unknown user and wrong password
        current_app.logger.info("[auth] login failed email=%s: %s", email, e.message)
        return jsonify(error="Invalid credentials"), 401

    try:
        profile = store.get_profile(auth_user["id"])
    except DatastoreError:
        current_app.logger.exception("[auth] profile fetch failed uid=%s", auth_user.get("id"))
        profile = None
    if profile is None:
        current_app.logger.error("[auth] no profile for uid=%s", auth_user.get("id"))
        return jsonify(error="Failed to fetch user profile"), 500

    identity = Identity.from_rows(auth_user, profile)
    current_app.logger.info("[auth] login uid=%s role=%s", identity.id, identity.role)
    return jsonify(success=True, user=identity.summary(), session=session), 200


@auth_bp.route("/logout", methods=["POST"])
@require_role()
def logout():
    try:
        get_datastore().sign_out(g.access_token)
    except AuthServiceError as e:
        current_app.logger.error("[auth] logout failed uid=%s: %s", g.identity.id, e.message)
        return jsonify(error="Logout failed"), 500
    return jsonify(success=True, message="Logged out successfully"), 200
