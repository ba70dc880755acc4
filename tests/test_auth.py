from conftest import PASSWORD, login

from app.rdcpm.db import session_scope
from app.rdcpm.models import AuditEvent, User


def test_login_sets_cookies_and_returns_user(client):
    r = login(client, "admin")
    assert r.json["message"] == "Login successful"
    assert r.json["user"]["username"] == "admin"
    assert r.json["user"]["role"] == "admin"
    cookies = r.headers.getlist("Set-Cookie")
    assert any(c.startswith("access_token=") and "HttpOnly" in c for c in cookies)
    assert any(c.startswith("refresh_token=") for c in cookies)


def test_login_wrong_password_is_401_and_audited(client, app):
    r = client.post("/api/v1/auth/login", json={"username": "admin", "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json["error"] == "Invalid credentials"
    with session_scope(app) as s:
        assert s.query(AuditEvent).filter(AuditEvent.action == "auth.login_failed").count() == 1


def test_login_validation(client):
    r = client.post("/api/v1/auth/login", json={"username": "ab", "password": "123"})
    assert r.status_code == 400
    assert len(r.json["errors"]) == 2


def test_login_rate_limited_after_five_failures(client):
    for _ in range(5):
        r = client.post("/api/v1/auth/login", json={"username": "admin", "password": "nope-nope"})
        assert r.status_code == 401
    r = client.post("/api/v1/auth/login", json={"username": "admin", "password": PASSWORD})
    assert r.status_code == 429


def test_login_requires_json_content_type(client):
    r = client.post("/api/v1/auth/login", data="username=admin", content_type="application/x-www-form-urlencoded")
    assert r.status_code == 400
    assert r.json["error"] == "Invalid content type"


def test_me_requires_auth(client):
    r = client.get("/api/v1/users/me")
    assert r.status_code == 401


def test_me_returns_permissions(client):
    login(client, "alice")
    r = client.get("/api/v1/users/me")
    assert r.status_code == 200
    user = r.json["user"]
    assert user["role"] == "user"
    assert "projects.view" in user["permissions"]
    assert "audit.view" not in user["permissions"]
    assert user["lastLoginAt"]
    assert r.headers["Cache-Control"].startswith("no-store")


def test_bearer_token_from_cookie_value(client):
    login(client, "bob")
    token = client.get_cookie("access_token").value
    fresh = client.application.test_client()
    r = fresh.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json["user"]["username"] == "bob"


def test_register_assigns_user_role(client, app):
    r = client.post(
        "/api/v1/auth/register",
        json={"username": "carol", "password": "longpass", "email": "carol@example.com", "fullName": "Carol"},
    )
    assert r.status_code == 201
    assert r.json["user"]["role"] == "user"
    with session_scope(app) as s:
        u = s.query(User).filter(User.username == "carol").one()
        assert [role.key for role in u.roles] == ["user"]


def test_register_duplicate_is_409(client):
    r = client.post(
        "/api/v1/auth/register",
        json={"username": "alice", "password": "longpass", "email": "new@example.com", "fullName": "Alice Two"},
    )
    assert r.status_code == 409


def test_register_validation(client):
    r = client.post("/api/v1/auth/register", json={"username": "dave", "password": "longpass", "email": "not-an-email"})
    assert r.status_code == 400
    assert "A valid email address is required." in r.json["errors"]


def test_refresh_issues_new_access_token(client):
    login(client, "alice")
    client.delete_cookie("access_token")
    assert client.get("/api/v1/users/me").status_code == 401
    r = client.post("/api/v1/auth/refresh")
    assert r.status_code == 200
    assert client.get("/api/v1/users/me").status_code == 200


def test_refresh_without_cookie_is_401(client):
    assert client.post("/api/v1/auth/refresh").status_code == 401


def test_logout_clears_cookies(client):
    login(client, "alice")
    r = client.post("/api/v1/auth/logout")
    assert r.status_code == 200
    assert client.get("/api/v1/users/me").status_code == 401


def test_security_headers_and_request_id(client):
    r = client.get("/api/v1/system/health/live", headers={"X-Request-ID": "abc123"})
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["X-Request-ID"] == "abc123"


def test_cors_allows_configured_origin_only(client):
    r = client.get("/api/v1/version", headers={"Origin": "http://localhost:5173"})
    assert r.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
    assert r.headers["Access-Control-Allow-Credentials"] == "true"
    r = client.get("/api/v1/version", headers={"Origin": "http://evil.example"})
    assert "Access-Control-Allow-Origin" not in r.headers


def test_refresh_rejects_expired_token(client, app):
    login(client, "alice")
    app.config["REFRESH_TOKEN_DAYS"] = -1
    r = client.post("/api/v1/auth/refresh")
    assert r.status_code == 401
    assert r.json["message"] == "Token expired"


def test_refresh_rejects_access_token_in_refresh_cookie(client):
    login(client, "alice")
    client.set_cookie("refresh_token", client.get_cookie("access_token").value)
    r = client.post("/api/v1/auth/refresh")
    assert r.status_code == 401
    assert r.json["error"] == "Invalid refresh token"


def test_refresh_rejects_inactive_user(client, app):
    login(client, "alice")
    with session_scope(app) as s:
        s.query(User).filter(User.username == "alice").one().is_active = False
    r = client.post("/api/v1/auth/refresh")
    assert r.status_code == 401
    assert r.json["message"] == "User not found or inactive."


def test_non_object_json_body_is_400(client):
    for body in (["admin", PASSWORD], "admin", 5):
        r = client.post("/api/v1/auth/login", json=body)
        assert r.status_code == 400
        assert r.json["errors"] == ["Request body must be a JSON object."]


def test_login_and_register_reject_non_text_fields(client):
    r = client.post("/api/v1/auth/login", json={"username": 12345, "password": PASSWORD})
    assert r.status_code == 400
    r = client.post(
        "/api/v1/auth/register",
        json={"username": "erin", "password": "longpass", "email": {"at": "x"}, "fullName": 7},
    )
    assert r.status_code == 400
    assert "A valid email address is required." in r.json["errors"]
    assert "Full name must be at least 2 characters." in r.json["errors"]


def test_rate_limit_forgets_idle_addresses(client):
    from datetime import datetime, timedelta

    from app.rdcpm import auth

    auth._login_attempts["10.0.0.9"] = [datetime.utcnow() - timedelta(minutes=10)]
    assert auth._check_rate_limit("10.0.0.9") is False
    assert "10.0.0.9" not in auth._login_attempts

    login(client, "alice")
    assert "127.0.0.1" not in auth._login_attempts


def test_register_race_is_409(client, app, monkeypatch):
    from sqlalchemy.orm import Query

    # Both registrations pass the existence check; the database unique key decides.
    monkeypatch.setattr(Query, "first", lambda self: None)
    r = client.post(
        "/api/v1/auth/register",
        json={"username": "alice", "password": "longpass", "email": "alice2@example.com", "fullName": "Alice Two"},
    )
    assert r.status_code == 409
    assert r.json["error"] == "User already exists"


def test_body_over_10mb_is_413_json(admin_client):
    body = '{"name": "' + "x" * (10 * 1024 * 1024) + '"}'
    r = admin_client.post("/api/v1/projects", data=body, content_type="application/json")
    assert r.status_code == 413
    assert r.json == {"error": "Payload too large", "message": "Request body exceeds the 10MB limit."}


def test_wrong_method_is_405_json(client):
    r = client.get("/api/v1/auth/login")
    assert r.status_code == 405
    assert r.is_json
    assert r.json["error"] == "Method not allowed"
