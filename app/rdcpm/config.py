import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str

    jwt_secret: str
    jwt_refresh_secret: str
    access_token_minutes: int
    refresh_token_days: int

    cors_origin: str
    log_level: str

    ai_enabled: bool
    notify_webhook_url: str
    budget_alert_threshold: float
    app_version: str


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getint(name: str, default: int) -> int:
    raw = _getenv(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _getfloat(name: str, default: float) -> float:
    raw = _getenv(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def load_settings() -> Settings:
    secret_key = _getenv("SECRET_KEY", "change-me")
    return Settings(
        secret_key=secret_key,
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///rdcpm.db"),
        # Dev fallbacks derive from SECRET_KEY; production guardrails reject them.
        jwt_secret=_getenv("JWT_SECRET", f"{secret_key}-access"),
        jwt_refresh_secret=_getenv("JWT_REFRESH_SECRET", f"{secret_key}-refresh"),
        access_token_minutes=_getint("ACCESS_TOKEN_MINUTES", 15),
        refresh_token_days=_getint("REFRESH_TOKEN_DAYS", 7),
        cors_origin=_getenv("CORS_ORIGIN", "http://localhost:5173"),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
        ai_enabled=_getenv("AI_ENABLED", "true").lower() in ("1", "true", "yes"),
        notify_webhook_url=_getenv("NOTIFY_WEBHOOK_URL", ""),
        budget_alert_threshold=_getfloat("BUDGET_ALERT_THRESHOLD", 0.9),
        app_version=_getenv("APP_VERSION", "2.0.0"),
    )


def load_config() -> dict:
    s = load_settings()
    is_production = s.env in ("prod", "production")
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "JWT_SECRET": s.jwt_secret,
        "JWT_REFRESH_SECRET": s.jwt_refresh_secret,
        "ACCESS_TOKEN_MINUTES": s.access_token_minutes,
        "REFRESH_TOKEN_DAYS": s.refresh_token_days,
        "CORS_ORIGIN": s.cors_origin,
        "LOG_LEVEL": s.log_level,
        "AI_ENABLED": s.ai_enabled,
        "NOTIFY_WEBHOOK_URL": s.notify_webhook_url,
        "BUDGET_ALERT_THRESHOLD": s.budget_alert_threshold,
        "APP_VERSION": s.app_version,
        # cookie defaults
        "TOKEN_COOKIE_SECURE": is_production,  # Require HTTPS in production
        "TOKEN_COOKIE_SAMESITE": "Lax",
        # request body limit (10MB)
        "MAX_CONTENT_LENGTH": 10 * 1024 * 1024,
    }


def validate_production_config(config: dict) -> None:
    """
    Fail fast on unsafe production settings.
    """
    db_url = str(config.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise RuntimeError("DATABASE_URL is required in production.")
    if db_url.startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must be MySQL in production (not sqlite).")
    if not config.get("SECRET_KEY") or str(config["SECRET_KEY"]) in ("", "change-me"):
        raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    secrets = {
        "SECRET_KEY": str(config.get("SECRET_KEY") or ""),
        "JWT_SECRET": str(config.get("JWT_SECRET") or ""),
        "JWT_REFRESH_SECRET": str(config.get("JWT_REFRESH_SECRET") or ""),
    }
    for name, value in secrets.items():
        if len(value) < 32:
            raise RuntimeError(f"{name} must be at least 32 characters in production.")
    if len(set(secrets.values())) != len(secrets):
        raise RuntimeError("SECRET_KEY, JWT_SECRET and JWT_REFRESH_SECRET must all be different.")
