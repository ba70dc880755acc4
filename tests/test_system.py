import pytest

from app.rdcpm import create_app
from app.rdcpm.config import load_config, validate_production_config


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["ok"] is True


def test_healthz_plain_text(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.get_data(as_text=True) == "ok"


def test_system_health_basic(client):
    r = client.get("/api/v1/system/health/basic")
    assert r.status_code == 200
    assert r.json["status"] == "OK"
    assert r.json["environment"] == "test"
    assert r.json["version"] == "2.0.0"


def test_system_health_ready_pings_database(client):
    r = client.get("/api/v1/system/health/ready")
    assert r.status_code == 200
    [check] = r.json["checks"]
    assert check["name"] == "database_connection"
    assert check["status"] == "pass"


def test_system_health_live(client):
    r = client.get("/api/v1/system/health/live")
    assert r.json["status"] == "alive"
    assert r.json["uptime"] >= 0


def test_version_endpoints(client):
    r = client.get("/api/v1/version")
    assert r.json["version"] == "2.0.0"
    assert r.json["features"]

    r = client.get("/api/v1/version/check?version=1.0.0")
    assert r.json["hasUpdate"] is True
    assert r.json["latestVersion"] == "2.0.0"
    r = client.get("/api/v1/version/check?version=2.0.0")
    assert r.json["hasUpdate"] is False
    assert r.json["changelog"] is None

    manifest = client.get("/api/v1/version/manifest").json
    assert manifest["cacheNames"]["api"] == "rdc-api-v2.0.0"


def test_unknown_api_route_is_json_404(client):
    r = client.get("/api/v1/nope")
    assert r.status_code == 404
    assert r.is_json


def test_load_config_defaults(monkeypatch):
    for k in ("ENV", "JWT_SECRET", "BUDGET_ALERT_THRESHOLD", "AI_ENABLED"):
        monkeypatch.delenv(k, raising=False)
    monkeypatch.setenv("SECRET_KEY", "abc")
    cfg = load_config()
    assert cfg["ENV"] == "development"
    assert cfg["JWT_SECRET"] == "abc-access"
    assert cfg["BUDGET_ALERT_THRESHOLD"] == 0.9
    assert cfg["AI_ENABLED"] is True
    assert cfg["TOKEN_COOKIE_SECURE"] is False


def test_bad_threshold_falls_back(monkeypatch):
    monkeypatch.setenv("BUDGET_ALERT_THRESHOLD", "lots")
    assert load_config()["BUDGET_ALERT_THRESHOLD"] == 0.9


def _prod_config(**kw):
    cfg = {
        "DATABASE_URL": "mysql+pymysql://rdc:pw@db/rdc",
        "SECRET_KEY": "s" * 32,
        "JWT_SECRET": "j" * 32,
        "JWT_REFRESH_SECRET": "r" * 32,
    }
    cfg.update(kw)
    return cfg


def test_production_config_accepts_strong_settings():
    validate_production_config(_prod_config())


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"DATABASE_URL": "sqlite:///x.db"}, "must be MySQL"),
        ({"DATABASE_URL": ""}, "DATABASE_URL is required"),
        ({"SECRET_KEY": "change-me"}, "SECRET_KEY must be set"),
        ({"JWT_SECRET": "short"}, "JWT_SECRET must be at least 32"),
        ({"JWT_REFRESH_SECRET": "j" * 32}, "must all be different"),
    ],
)
def test_production_config_rejects_unsafe_settings(overrides, message):
    with pytest.raises(RuntimeError, match=message):
        validate_production_config(_prod_config(**overrides))


def test_create_app_refuses_sqlite_in_production(monkeypatch, tmp_path):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'prod.db'}")
    monkeypatch.setenv("SECRET_KEY", "x" * 40)
    with pytest.raises(RuntimeError):
        create_app()
