import logging
import os
import uuid
import weakref

from flask import Flask, g
from dotenv import load_dotenv

from app.crm.config import is_production, load_config
from app.crm.db import init_db, missing_tables, teardown_db_session
from app.crm.errors import register_error_handlers
from app.crm.models import Base
from app.crm.routes import bp as routes_bp
from app.crm.modules.customers.api import bp as customers_bp

API_PREFIX = "/api/v1"

# Apps whose engines must not be shared with a forked child (gunicorn --preload).
_live_apps: "weakref.WeakSet[Flask]" = weakref.WeakSet()


def _dispose_engines_after_fork() -> None:
    for app in list(_live_apps):
        engine = app.extensions.get("sqlalchemy_engine")
        if engine:
            # close=False: the parent still owns those connections.
            engine.dispose(close=False)
            app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())


if hasattr(os, "register_at_fork"):
    os.register_at_fork(after_in_child=_dispose_engines_after_fork)


def _configure_logging(app: Flask) -> None:
    level = logging.getLevelName(app.config.get("LOG_LEVEL") or "INFO")
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("app").setLevel(level)
    app.logger.setLevel(level)


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    app.json.sort_keys = False  # keep id, name, email, address order
    _configure_logging(app)

    # Production guardrails (fail fast with clear logs)
    if is_production(app.config.get("ENV")):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    init_db(app)

    _live_apps.add(app)

    app.register_blueprint(routes_bp)
    app.register_blueprint(customers_bp, url_prefix=API_PREFIX)

    @app.before_request
    def _assign_request_id():
        # Per-request id for log correlation.
        g.request_id = uuid.uuid4().hex

    app.teardown_appcontext(teardown_db_session)
    register_error_handlers(app)

    # Schema drift is logged, not fatal: tests and init_db.py create tables after the app exists.
    try:
        missing = missing_tables(app.extensions["sqlalchemy_engine"], tuple(Base.metadata.tables))
        if missing:
            app.logger.error("DB schema out of date; run `alembic upgrade head`. Missing: %s", ", ".join(missing))
    except Exception as e:
        app.logger.exception("Schema health check failed: %s", e)

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
