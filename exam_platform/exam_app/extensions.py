"""Extension singletons, bound to the app in ``create_app``."""

from __future__ import annotations

from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from .utils.client_ip import get_client_ip

db: SQLAlchemy = SQLAlchemy()
migrate: Migrate = Migrate()
jwt: JWTManager = JWTManager()
cors: CORS = CORS()
# Keyed by the proxy-aware client address; storage comes from RATELIMIT_STORAGE_URI.
limiter: Limiter = Limiter(key_func=get_client_ip, headers_enabled=True)
