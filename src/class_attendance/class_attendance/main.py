from __future__ import annotations

import importlib
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .app_logger import setup_logging
from .database.bootstrap import apply_schema, list_tables

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .overrides.controller import register as register_overrides
from .schedules.controller import register as register_schedules
from .tokens.controller import register as register_tokens


def register_routes(app: Flask, container: Container) -> None:
    register_tokens(app, container)
    register_schedules(app, container)
    register_overrides(app, container)
    register_attendance(app, container)

    @app.route("/health", endpoint="health")
    def health():
        return jsonify({"ok": True}), 200


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logger = setup_logging(getattr(settings, "LOG_LEVEL", None))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["TIMEZONE_NAME"] = getattr(settings, "TIMEZONE_NAME", "local")

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        qr_secret = getattr(settings, "QR_SECRET", "")
        if not qr_secret:
            raise RuntimeError(f"QR_SECRET is not set ({settings_module})")

        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module, db_config.get("user"), db_config.get("host"),
            db_config.get("port", 3306), db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            qr_secret=qr_secret,
            allow_scan_time_overrides=bool(getattr(settings, "ALLOW_SCAN_TIME_OVERRIDES", False)),
        )

    register_routes(app, container)
    return app
