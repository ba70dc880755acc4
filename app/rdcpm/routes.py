import platform
import time
from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import text

bp = Blueprint("routes", __name__)
system_bp = Blueprint("system", __name__)

_STARTED_AT = time.monotonic()

CHANGELOG = [
    "Offline data synchronization",
    "Background sync",
    "Update notifications",
    "App shell architecture",
    "Improved cache management",
]


def _uptime_seconds() -> float:
    return round(time.monotonic() - _STARTED_AT, 3)


def _db_ping() -> tuple[bool, float, str | None]:
    started = time.perf_counter()
    try:
        engine = current_app.extensions["sqlalchemy_engine"]
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, round((time.perf_counter() - started) * 1000, 2), None
    except Exception as e:
        current_app.logger.error("Database health check failed: %s", e)
        return False, round((time.perf_counter() - started) * 1000, 2), str(e)


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """
    Fast health check for load balancer probes. No DB access, minimal overhead.
    """
    return "ok", 200


@system_bp.get("/system/health/basic")
def health_basic():
    return jsonify(
        {
            "status": "OK",
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "uptime": _uptime_seconds(),
            "environment": current_app.config.get("ENV"),
            "version": current_app.config.get("APP_VERSION"),
            "python": platform.python_version(),
        }
    )


@system_bp.get("/system/health/ready")
def health_ready():
    ok, latency_ms, err = _db_ping()
    body = {
        "status": "ready" if ok else "not_ready",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "checks": [
            {
                "name": "database_connection",
                "status": "pass" if ok else "fail",
                "responseTime": latency_ms,
                "details": "Database connection successful" if ok else err,
            }
        ],
    }
    return jsonify(body), (200 if ok else 503)


@system_bp.get("/system/health/live")
def health_live():
    return jsonify({"status": "alive", "timestamp": datetime.utcnow().isoformat() + "Z", "uptime": _uptime_seconds()})


@system_bp.get("/version")
def version():
    return jsonify(
        {
            "version": current_app.config.get("APP_VERSION"),
            "env": current_app.config.get("ENV"),
            "features": CHANGELOG,
            "timestamp": int(time.time() * 1000),
        }
    )


@system_bp.get("/version/check")
def version_check():
    server_version = str(current_app.config.get("APP_VERSION"))
    client_version = (request.args.get("version") or "").strip() or "1.0.0"
    has_update = client_version != server_version
    return jsonify(
        {
            "hasUpdate": has_update,
            "currentVersion": client_version,
            "latestVersion": server_version,
            "changelog": "Bug fixes and performance improvements" if has_update else None,
        }
    )


@system_bp.get("/version/manifest")
def version_manifest():
    v = str(current_app.config.get("APP_VERSION"))
    return jsonify(
        {
            "version": v,
            "changelog": CHANGELOG,
            "cacheNames": {
                "static": f"rdc-static-v{v}",
                "dynamic": f"rdc-dynamic-v{v}",
                "api": f"rdc-api-v{v}",
            },
            "timestamp": int(time.time() * 1000),
        }
    )
