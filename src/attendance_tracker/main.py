from __future__ import annotations

import importlib
import logging
import os
from typing import Callable, Optional

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from .attendance.controller import register as register_attendance
from .common.errors import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .core.enums import MissingDayPolicy
from .core.logging_setup import configure_logging
from .courses.controller import register as register_courses
from .database.bootstrap import apply_schema, ensure_demo_data, list_tables
from .health.controller import register as register_health
from .identity.factory import IdentityStrategyFactory
from .identity.tokens import TokenIssuer
from .realtime.handlers import register as register_realtime
from .realtime.publisher import SocketIOPublisher
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

ContainerFactory = Callable[..., Container]


def create_app(
    *,
    settings_module: Optional[str] = None,
    container_factory: Optional[ContainerFactory] = None,
) -> Flask:
    """Application factory.

    ``container_factory`` replaces the MySQL-backed container (tests pass one built
    on in-memory repositories). It receives ``publisher``, ``identity_factory``,
    ``tokens`` and ``missing_day_policy`` as keyword arguments.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", None))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["API_PREFIX"] = getattr(settings, "API_PREFIX", "/api").rstrip("/")
    app.config["JWT_EXPIRE_DAYS"] = int(getattr(settings, "JWT_EXPIRE_DAYS", 30))

    origins = list(getattr(settings, "CORS_ORIGINS", []))
    CORS(app, resources={rf"{app.config['API_PREFIX']}/*": {"origins": origins}}, supports_credentials=True)
    socketio = SocketIO(app, cors_allowed_origins=origins)

    publisher = SocketIOPublisher(socketio)
    tokens = TokenIssuer(getattr(settings, "JWT_SECRET"), expire_days=app.config["JWT_EXPIRE_DAYS"])
    identity_factory = IdentityStrategyFactory(
        jwt_secret=getattr(settings, "JWT_SECRET"),
        idp_jwks_url=getattr(settings, "IDP_JWKS_URL", None),
        idp_issuer=getattr(settings, "IDP_ISSUER", None),
        idp_audience=getattr(settings, "IDP_AUDIENCE", None),
        idp_timeout_seconds=int(getattr(settings, "IDP_TIMEOUT_SECONDS", 5)),
    )
    missing_day_policy = MissingDayPolicy(str(getattr(settings, "STATS_MISSING_DAY_POLICY", "exclude")).lower())

    logger.info(
        "Starting with settings=%s db=%s@%s:%s/%s identity=%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        "external" if identity_factory.idp_jwks_url else "local",
    )

    if container_factory is not None:
        container = container_factory(
            publisher=publisher,
            identity_factory=identity_factory,
            tokens=tokens,
            missing_day_policy=missing_day_policy,
        )
    else:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_data(db_config)

        container = build_container(
            db_config=db_config,
            publisher=publisher,
            identity_factory=identity_factory,
            tokens=tokens,
            missing_day_policy=missing_day_policy,
            readiness_cache_seconds=float(getattr(settings, "READINESS_CACHE_SECONDS", 5)),
        )

    app.extensions["container"] = container

    register_error_handlers(app)
    register_health(app, container)
    register_users(app, container)
    register_courses(app, container)
    register_attendance(app, container)
    register_realtime(socketio, container)

    return app


def run() -> None:
    app = create_app()
    socketio: SocketIO = app.extensions["socketio"]
    socketio.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        debug=app.config["DEBUG"],
        allow_unsafe_werkzeug=True,
    )
