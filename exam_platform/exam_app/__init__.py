"""exam_app: the Leaving Cert practice API.

``create_app`` wires config, JSON logging, extensions, blueprints, CLI
commands and per-request hooks. The database schema and the optional root
admin are bootstrapped lazily on the first request.
"""

from __future__ import annotations

import os
from time import perf_counter

from flask import Flask, g, jsonify, request
from flask_jwt_extended import JWTManager
from sqlalchemy import event, inspect
from sqlalchemy.exc import SQLAlchemyError

from config import resolve_config
from .blueprints import BLUEPRINTS
from .cli import register_cli
from .extensions import cors, db, jwt, limiter, migrate
from .logging_config import assign_request_id, bind_user, configure_logging
from .metrics import record_request
from .utils import hash_password


def create_app(config_name: str | None = None) -> Flask:
    """Build an app for the named config (``FLASK_CONFIG`` when omitted)."""

    app = Flask(__name__)
    app.config.from_object(resolve_config(config_name or os.getenv("FLASK_CONFIG")))
    configure_logging(app)
    _register_extensions(app)
    for blueprint, prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=prefix)
    _register_error_handlers(app)
    _register_shellcontext(app)
    register_cli(app)
    _register_bootstrap(app)
    _register_request_hooks(app)
    return app


def _register_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    _configure_jwt(jwt)
    _configure_sqlite_engine(app)
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )
    defaults = app.config.get("RATE_LIMIT_DEFAULTS") or []
    if defaults:
        app.config.setdefault("RATELIMIT_DEFAULT", ";".join(defaults))
    limiter.init_app(app)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(429)
    def rate_limited(exc):
        # Contact and feedback forms get a friendlier message than API throttling.
        if request.blueprint == "support_bp":
            message = "Too many submissions. Please try again later."
        else:
            message = "Too many requests. Please slow down."
        app.logger.warning("Rate limit hit on %s: %s", request.path, exc.description)
        return jsonify({"error": "rate_limited", "message": message}), 429


def _register_shellcontext(app: Flask) -> None:
    from . import models

    @app.shell_context_processor
    def shell_context():
        return {"db": db, "models": models}


def _configure_jwt(jwt_manager: JWTManager) -> None:
    from .models import User

    @jwt_manager.user_lookup_loader
    def load_user(_jwt_header, jwt_data):
        try:
            user = db.session.get(User, int(jwt_data.get("sub")))
        except (TypeError, ValueError):
            return None
        if user is not None:
            bind_user(user.id)
        return user

    def _unauthorized(message: str, **extra):
        return jsonify({"message": message, **extra}), 401

    jwt_manager.user_lookup_error_loader(lambda _header, _data: _unauthorized("User not found"))
    jwt_manager.expired_token_loader(lambda _header, _data: _unauthorized("Token has expired"))
    jwt_manager.invalid_token_loader(lambda reason: _unauthorized("Invalid token", error=reason))
    jwt_manager.unauthorized_loader(lambda _reason: _unauthorized("Missing authorization token"))


def _register_bootstrap(app: Flask) -> None:
    steps = (("_SCHEMA_READY", _ensure_schema), ("_ROOT_ADMIN_READY", _ensure_root_admin))

    @app.before_request
    def bootstrap_once():
        for flag, step in steps:
            if app.config.get(flag):
                continue
            try:
                step(app)
            except SQLAlchemyError as exc:  # pragma: no cover - retried next request
                db.session.rollback()
                app.logger.warning("Bootstrap step %s skipped: %s", step.__name__, exc)
                return
            app.config[flag] = True


def _register_request_hooks(app: Flask) -> None:
    @app.before_request
    def start_request():
        assign_request_id()
        g.request_started_at = perf_counter()

    @app.after_request
    def finalize(response):
        if getattr(g, "request_id", None):
            response.headers["X-Request-ID"] = g.request_id
        started = getattr(g, "request_started_at", None)
        record_request(
            request.method,
            request.endpoint or request.path,
            response.status_code,
            perf_counter() - started if started else 0.0,
        )
        return response


def _configure_sqlite_engine(app: Flask) -> None:
    uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if not uri.startswith("sqlite"):
        return
    pragmas = [f"PRAGMA busy_timeout={int(app.config.get('SQLITE_BUSY_TIMEOUT_MS', 15000))}"]
    if ":memory:" not in uri:
        pragmas.append("PRAGMA journal_mode=WAL")

    with app.app_context():
        @event.listens_for(db.engine, "connect")
        def _apply_pragmas(dbapi_connection, _record):  # pragma: no cover
            cursor = dbapi_connection.cursor()
            try:
                for pragma in pragmas:
                    cursor.execute(pragma)
            finally:
                cursor.close()


def _ensure_schema(app: Flask) -> None:
    from . import models  # noqa: F401

    db.create_all()


def _ensure_root_admin(app: Flask) -> None:
    """Create or promote the account named by ROOT_ADMIN_EMAIL / ROOT_ADMIN_PASSWORD."""

    from .models import User, UserProfile

    email = (app.config.get("ROOT_ADMIN_EMAIL") or "").strip().lower()
    password = app.config.get("ROOT_ADMIN_PASSWORD") or ""
    if not email or not password or not inspect(db.engine).has_table("users"):
        return
    if User.query.filter_by(is_root=True).first():
        return

    user = User.query.filter_by(email=email).first()
    if user is None:
        user = User(email=email, password_hash=hash_password(password), is_email_verified=True)
        user.profile = UserProfile(name="Admin", onboarding_completed=True)
        db.session.add(user)
    user.role = "admin"
    user.is_root = True
    db.session.commit()
    app.logger.info("Root admin ready: %s", email)
