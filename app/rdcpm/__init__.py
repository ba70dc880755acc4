import logging
import uuid

from flask import Flask, g, request
from dotenv import load_dotenv

from app.rdcpm.config import load_config, validate_production_config
from app.rdcpm.db import init_db, teardown_db_session
from app.rdcpm.errors import json_error, register_error_handlers
from app.rdcpm.security import apply_cors_headers, apply_security_headers, content_type_guard
from app.rdcpm.routes import bp as routes_bp, system_bp
from app.rdcpm.auth import bp as auth_bp, users_bp, load_current_user
from app.rdcpm.modules.projects.api import bp as projects_bp
from app.rdcpm.modules.schedules.api import bp as schedules_bp
from app.rdcpm.modules.dashboard.api import bp as dashboard_bp
from app.rdcpm.modules.assistant.api import bp as assistant_bp
from app.rdcpm.modules.audit_log.api import bp as audit_bp
from app.rdcpm.modules.task_breakdown.api import bp as ai_scheduling_bp
from app.rdcpm.modules.notices.api import bp as notices_bp
from app.rdcpm.modules.region_content.api import bp as region_content_bp


def create_app(config_overrides: dict | None = None) -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    if config_overrides:
        app.config.update(config_overrides)

    logging.basicConfig(
        level=getattr(logging, str(app.config.get("LOG_LEVEL") or "INFO"), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(str(app.config.get("LOG_LEVEL") or "INFO"))

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        validate_production_config(app.config)

    init_db(app)

    def _dispose_engine_on_fork() -> None:
        import os
        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()

    register_error_handlers(app)

    @app.before_request
    def _request_id():
        g.request_id = (request.headers.get("X-Request-ID") or "").strip()[:64] or uuid.uuid4().hex

    @app.before_request
    def _preflight():
        if request.method == "OPTIONS":
            return app.make_default_options_response()
        return None

    @app.before_request
    def _content_type_guard():
        if not content_type_guard(request):
            return json_error(400, "Invalid content type", "Content-Type must be application/json.")
        return None

    app.register_blueprint(routes_bp)
    app.register_blueprint(system_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(users_bp, url_prefix="/api/v1/users")
    app.register_blueprint(projects_bp, url_prefix="/api/v1/projects")
    app.register_blueprint(schedules_bp, url_prefix="/api/v1/schedules")
    app.register_blueprint(dashboard_bp, url_prefix="/api/v1")
    app.register_blueprint(assistant_bp, url_prefix="/api/v1/assistant")
    app.register_blueprint(audit_bp, url_prefix="/api/v1/audit")
    app.register_blueprint(ai_scheduling_bp, url_prefix="/api/v1/ai-scheduling")
    app.register_blueprint(notices_bp, url_prefix="/api/v1/notices")
    app.register_blueprint(region_content_bp, url_prefix="/api/v1/region-content")

    app.before_request(load_current_user)
    app.teardown_appcontext(teardown_db_session)

    @app.after_request
    def _response_headers(resp):  # type: ignore[no-redef]
        apply_security_headers(resp)
        return apply_cors_headers(app, resp)

    # Startup logging
    logging.getLogger(__name__).info("create_app() complete; app ready to serve (env=%s)", env or "development")

    return app
