from __future__ import annotations

import re
import uuid
from collections import defaultdict
from datetime import datetime, timedelta

from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from app.rdcpm.audit import record_event
from app.rdcpm.db import db_session
from app.rdcpm.errors import json_error
from app.rdcpm.models import Role, User
from app.rdcpm.rbac import require_auth
from app.rdcpm.security import (
    REFRESH_COOKIE,
    TokenError,
    bearer_or_cookie_token,
    clear_auth_cookies,
    issue_access_token,
    issue_refresh_token,
    set_access_cookie,
    set_refresh_cookie,
    verify_access_token,
    verify_refresh_token,
)
from app.rdcpm.utils import json_body

bp = Blueprint("auth", __name__)
users_bp = Blueprint("users", __name__)

_login_attempts: dict[str, list[datetime]] = defaultdict(list)
_LOGIN_RATE_LIMIT = 5
_LOGIN_RATE_WINDOW = 300  # seconds

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PUBLIC_PREFIXES = ("/static/", "/health", "/healthz")


def _check_rate_limit(ip: str) -> bool:
    cutoff = datetime.utcnow() - timedelta(seconds=_LOGIN_RATE_WINDOW)
    recent = [t for t in _login_attempts.get(ip, ()) if t > cutoff]
    if not recent:
        _login_attempts.pop(ip, None)
        return False
    _login_attempts[ip] = recent
    return len(recent) >= _LOGIN_RATE_LIMIT


def _record_attempt(ip: str) -> None:
    _login_attempts[ip].append(datetime.utcnow())


def reset_rate_limits() -> None:
    _login_attempts.clear()


def load_current_user() -> None:
    """
    Loads g.current_user from the access token (Bearer header or cookie).
    Also assigns a simple per-request request_id (for audit/log correlation).
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    g.current_user = None
    if request.path.startswith(_PUBLIC_PREFIXES):
        return

    token = bearer_or_cookie_token(request)
    if not token:
        return
    try:
        payload = verify_access_token(token)
    except TokenError as e:
        current_app.logger.debug("Access token rejected: %s (request_id=%s)", e, g.request_id)
        return

    try:
        s = db_session()
        user = s.get(User, int(payload["userId"]))
        if not user or not user.is_active:
            return
        g.current_user = user
    except Exception as e:
        current_app.logger.error("load_current_user DB error: %s", e)
        g.current_user = None


def _text(payload: dict, key: str) -> str:
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else ""


def validate_login_payload(payload: dict) -> list[str]:
    errors = []
    username = _text(payload, "username")
    password = payload.get("password")
    password = password if isinstance(password, str) else ""
    if len(username) < 3:
        errors.append("Username must be at least 3 characters.")
    if len(password) < 6:
        errors.append("Password must be at least 6 characters.")
    return errors


def validate_register_payload(payload: dict) -> list[str]:
    errors = validate_login_payload(payload)
    email = _text(payload, "email")
    full_name = _text(payload, "fullName")
    if not _EMAIL_RE.match(email):
        errors.append("A valid email address is required.")
    if len(full_name) < 2:
        errors.append("Full name must be at least 2 characters.")
    return errors


@bp.post("/login")
def login():
    payload = json_body()
    username = _text(payload, "username")
    password = payload.get("password")
    ip = request.remote_addr or "unknown"

    if _check_rate_limit(ip):
        return json_error(429, "Too many login attempts", "Too many login attempts. Please wait 5 minutes.")

    errors = validate_login_payload(payload)
    if errors:
        return json_error(400, "Validation failed", errors[0], errors=errors)

    _record_attempt(ip)

    try:
        s = db_session()
        user = s.query(User).filter(User.username == username).one_or_none()
        if not user or not user.is_active or not check_password_hash(user.password_hash, password):
            record_event(
                s,
                actor=None,
                action="auth.login_failed",
                entity_type="User",
                entity_id=username,
                reason="Invalid credentials",
                metadata={"username": username},
            )
            s.commit()
            return json_error(401, "Invalid credentials", "Invalid username or password.")

        _login_attempts.pop(ip, None)
        user.last_login_at = datetime.utcnow()
        record_event(s, actor=user, action="auth.login", entity_type="User", entity_id=str(user.id))
        s.commit()

        resp = jsonify({"message": "Login successful", "user": user.to_dict()})
        set_access_cookie(resp, issue_access_token(user))
        set_refresh_cookie(resp, issue_refresh_token(user))
        return resp
    except Exception:
        current_app.logger.exception("Login crashed (username=%s request_id=%s)", username, getattr(g, "request_id", None))
        raise


@bp.post("/register")
def register():
    payload = json_body()
    errors = validate_register_payload(payload)
    if errors:
        return json_error(400, "Validation failed", errors[0], errors=errors)

    username = payload["username"].strip()
    email = payload["email"].strip().lower()

    s = db_session()
    existing = s.query(User).filter((User.username == username) | (User.email == email)).first()
    if existing:
        return json_error(409, "User already exists", "Username or email is already registered.")

    user = User(
        username=username,
        email=email,
        full_name=payload["fullName"].strip(),
        password_hash=generate_password_hash(payload["password"]),
        is_active=True,
    )
    role = s.query(Role).filter(Role.key == "user").one_or_none()
    if role:
        user.roles.append(role)
    s.add(user)
    try:
        s.flush()
    except IntegrityError:
        s.rollback()
        current_app.logger.info("Registration raced on username=%s", username)
        return json_error(409, "User already exists", "Username or email is already registered.")
    record_event(s, actor=user, action="auth.register", entity_type="User", entity_id=str(user.id))
    s.commit()

    resp = jsonify({"message": "User registered successfully", "user": user.to_dict()})
    resp.status_code = 201
    set_access_cookie(resp, issue_access_token(user))
    set_refresh_cookie(resp, issue_refresh_token(user))
    return resp


@bp.post("/logout")
def logout():
    user = getattr(g, "current_user", None)
    if user:
        s = db_session()
        record_event(s, actor=user, action="auth.logout", entity_type="User", entity_id=str(user.id))
        s.commit()
    resp = jsonify({"message": "Logout successful"})
    clear_auth_cookies(resp)
    return resp


@bp.post("/refresh")
def refresh():
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        return json_error(401, "Refresh token required")
    try:
        payload = verify_refresh_token(token)
    except TokenError as e:
        return json_error(401, "Invalid refresh token", str(e))

    s = db_session()
    user = s.get(User, int(payload["userId"]))
    if not user or not user.is_active:
        return json_error(401, "Invalid refresh token", "User not found or inactive.")

    resp = jsonify({"message": "Token refreshed successfully"})
    set_access_cookie(resp, issue_access_token(user))
    return resp


@users_bp.get("/me")
@require_auth
def me():
    user: User = g.current_user
    data = user.to_dict()
    data["permissions"] = sorted(user.permission_keys())
    data["lastLoginAt"] = user.last_login_at.isoformat() if user.last_login_at else None
    return jsonify({"user": data})
