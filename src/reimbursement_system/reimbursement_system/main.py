from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, g, jsonify, session

from config import get_settings_module

from .bills.controller import register as register_bills
from .common.http import register_error_handlers
from .common.validators import normalize_email
from .container import Container, build_container
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_admin_user, list_tables
from .departments.controller import register as register_departments
from .employees.controller import register as register_employees
from .users.controller import register as register_users

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def _prepare_database(app: Flask, settings) -> None:
    db_config = getattr(settings, "DB_CONFIG")

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        app.logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        ensure_admin_user(
            db_config,
            name=getattr(settings, "ADMIN_NAME"),
            email=normalize_email(getattr(settings, "ADMIN_EMAIL")),
            password=getattr(settings, "ADMIN_PASSWORD"),
        )
        app.logger.info("demo seed ready")


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        app.logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        _prepare_database(app, settings)
        container = build_container(db_config=db_config)

    app.extensions["container"] = container

    @app.before_request
    def load_principal():
        principal = container.auth_service.load_principal(session.get("user_id"))
        if principal is None and "user_id" in session:
            # Account vanished since login.
            session.clear()
        g.principal = principal

    @app.get("/health")
    def health():
        return jsonify({"health": "true"})

    register_error_handlers(app)
    register_users(app, container)
    register_departments(app, container)
    register_employees(app, container)
    register_bills(app, container)
    register_dashboard(app, container)

    return app
