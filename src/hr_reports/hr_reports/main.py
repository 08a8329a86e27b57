from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.logging_config import setup_logging
from .container import build_container
from .core.constants import DEFAULT_READ_WORKERS, STANDARD_WORK_HOURS
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig
from .reports.controller import register as register_reports

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        json_output=bool(getattr(settings, "LOG_JSON", True)),
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        config = DBConfig.from_mapping(db_config)
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(config, schema_path=schema_path)
        logger.info("Schema ready (tables=%d)", len(list_tables(config)))

    container = build_container(
        db_config=db_config,
        read_workers=int(getattr(settings, "REPORT_READ_WORKERS", DEFAULT_READ_WORKERS)),
        standard_work_hours=float(getattr(settings, "STANDARD_WORK_HOURS", STANDARD_WORK_HOURS)),
    )

    register_reports(app, container)

    return app
