import logging
import os
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from app.campusflow.config import load_config
from app.campusflow.db import init_db, teardown_db_session
from app.campusflow.auth import bp as auth_bp, load_current_user
from app.campusflow.errors import ServiceError
from app.campusflow.extensions import init_registries
from app.campusflow.routes import bp as routes_bp
from app.campusflow.users import bp as users_bp
from app.campusflow.events.routes import bp as events_bp
from app.campusflow.platform.routes import bp as platform_bp
from app.campusflow.modules.registration.routes import bp as registration_bp
from app.campusflow.modules.schedule.routes import bp as schedule_bp
from app.campusflow.modules.announcements.routes import bp as announcements_bp
from app.campusflow.modules.teams.routes import bp as teams_bp
from app.campusflow.modules.voting.routes import bp as voting_bp
from app.campusflow.modules.leaderboard.routes import bp as leaderboard_bp
from app.campusflow.modules.checkin.routes import bp as checkin_bp

_MODULE_BLUEPRINTS = (
    registration_bp,
    schedule_bp,
    announcements_bp,
    teams_bp,
    voting_bp,
    leaderboard_bp,
    checkin_bp,
)


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=7)
    app.config["SESSION_REFRESH_EACH_REQUEST"] = True

    logging.basicConfig(level=app.config["LOG_LEVEL"], format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    init_db(app)
    init_registries(app)

    def _dispose_engine_on_fork() -> None:
        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(users_bp, url_prefix="/api/users")
    app.register_blueprint(platform_bp, url_prefix="/api/platform")
    app.register_blueprint(events_bp, url_prefix="/api/events")
    for module_bp in _MODULE_BLUEPRINTS:
        app.register_blueprint(module_bp, url_prefix="/api/events")

    @app.before_request
    def _load_user():
        session.permanent = True
        return load_current_user()

    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(ServiceError)
    def _err_service(e: ServiceError):  # type: ignore[no-redef]
        if e.status_code >= 500:
            app.logger.error("%s (request_id=%s)", e.message, getattr(g, "request_id", None))
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def _err_http(e: HTTPException):  # type: ignore[no-redef]
        return jsonify({"error": e.description or e.name}), e.code or 500

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        # Ensure stack trace shows in logs.
        rid = getattr(g, "request_id", None)
        app.logger.exception("Unhandled 500 (request_id=%s) %s %s", rid, request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
