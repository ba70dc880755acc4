"""
Signed, timed auth tokens (itsdangerous) plus the cookie and header helpers around them.

Tokens are not JWTs; clients must treat them as opaque strings.
"""
from __future__ import annotations

from typing import Any

from flask import Flask, Request, Response, current_app, g, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"

_ACCESS_SALT = "rdcpm.access"
_REFRESH_SALT = "rdcpm.refresh"

# Auth endpoints that accept an empty body.
_BODYLESS_ENDPOINTS = ("auth.logout", "auth.refresh")
_NO_STORE_PREFIXES = ("/api/v1/auth", "/api/v1/users")


class TokenError(Exception):
    pass


def _serializer(secret: str, salt: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret, salt=salt)


def issue_access_token(user) -> str:
    payload = {"userId": user.id, "username": user.username, "role": user.role_key}
    return _serializer(current_app.config["JWT_SECRET"], _ACCESS_SALT).dumps(payload)


def issue_refresh_token(user) -> str:
    payload = {"userId": user.id, "type": "refresh"}
    return _serializer(current_app.config["JWT_REFRESH_SECRET"], _REFRESH_SALT).dumps(payload)


def verify_access_token(token: str) -> dict[str, Any]:
    max_age = int(current_app.config["ACCESS_TOKEN_MINUTES"]) * 60
    return _loads(_serializer(current_app.config["JWT_SECRET"], _ACCESS_SALT), token, max_age)


def verify_refresh_token(token: str) -> dict[str, Any]:
    max_age = int(current_app.config["REFRESH_TOKEN_DAYS"]) * 24 * 3600
    payload = _loads(_serializer(current_app.config["JWT_REFRESH_SECRET"], _REFRESH_SALT), token, max_age)
    if payload.get("type") != "refresh":
        raise TokenError("Invalid token type")
    return payload


def _loads(ser: URLSafeTimedSerializer, token: str, max_age: int) -> dict[str, Any]:
    try:
        payload = ser.loads(token, max_age=max_age)
    except SignatureExpired as e:
        raise TokenError("Token expired") from e
    except BadSignature as e:
        raise TokenError("Invalid token") from e
    if not isinstance(payload, dict) or "userId" not in payload:
        raise TokenError("Invalid token payload")
    return payload


def set_access_cookie(resp: Response, token: str) -> None:
    resp.set_cookie(
        ACCESS_COOKIE,
        token,
        max_age=int(current_app.config["ACCESS_TOKEN_MINUTES"]) * 60,
        httponly=True,
        secure=bool(current_app.config.get("TOKEN_COOKIE_SECURE")),
        samesite=current_app.config.get("TOKEN_COOKIE_SAMESITE", "Lax"),
    )


def set_refresh_cookie(resp: Response, token: str) -> None:
    resp.set_cookie(
        REFRESH_COOKIE,
        token,
        max_age=int(current_app.config["REFRESH_TOKEN_DAYS"]) * 24 * 3600,
        httponly=True,
        secure=bool(current_app.config.get("TOKEN_COOKIE_SECURE")),
        samesite=current_app.config.get("TOKEN_COOKIE_SAMESITE", "Lax"),
    )


def clear_auth_cookies(resp: Response) -> None:
    resp.delete_cookie(ACCESS_COOKIE)
    resp.delete_cookie(REFRESH_COOKIE)


def bearer_or_cookie_token(req: Request) -> str | None:
    """Access token from the Authorization header, falling back to the cookie."""
    header = req.headers.get("Authorization") or ""
    if header.lower().startswith("bearer "):
        token = header[7:].strip()
        if token:
            return token
    return req.cookies.get(ACCESS_COOKIE) or None


def content_type_guard(req: Request) -> bool:
    """True when a mutating API request carries an acceptable content type."""
    if req.method not in ("POST", "PUT", "PATCH", "DELETE"):
        return True
    if not req.path.startswith("/api/"):
        return True
    if (req.endpoint or "") in _BODYLESS_ENDPOINTS:
        return True
    if req.method == "DELETE" and not req.content_length:
        return True
    return (req.mimetype or "") == "application/json"


def apply_security_headers(resp: Response) -> Response:
    resp.headers["X-Content-Type-Options"] = "nosniff"
    resp.headers["X-Frame-Options"] = "DENY"
    resp.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if request.path.startswith(_NO_STORE_PREFIXES):
        resp.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, private"
        resp.headers["Pragma"] = "no-cache"
    rid = getattr(g, "request_id", None)
    if rid:
        resp.headers["X-Request-ID"] = rid
    return resp


def apply_cors_headers(app: Flask, resp: Response) -> Response:
    origin = request.headers.get("Origin")
    allowed = [o.strip() for o in str(app.config.get("CORS_ORIGIN") or "").split(",") if o.strip()]
    if origin and origin in allowed:
        resp.headers["Access-Control-Allow-Origin"] = origin
        resp.headers["Access-Control-Allow-Credentials"] = "true"
        resp.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
        resp.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization, X-Request-ID"
        resp.headers["Vary"] = "Origin"
    return resp
