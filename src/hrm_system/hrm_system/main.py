from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .attendance.jobs import start_scheduler
from .audit.controller import register as register_audit
from .auth.controller import register as register_auth
from .company_calendar.controller import register as register_calendar
from .container import Container, build_container
from .corrections.controller import register as register_corrections
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables, run_migrations
from .employees.controller import register as register_employees
from .leads.controller import register as register_leads
from .leave.controller import register as register_leave
from .notifications.controller import register as register_notifications
from .payroll.controller import register as register_payroll
from .schedules.controller import register as register_schedules
from .settings import Settings
from .shifts.controller import register as register_shifts
from .web.responses import register_error_handlers

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"

_CONTROLLERS = (
    register_auth,
    register_employees,
    register_shifts,
    register_schedules,
    register_attendance,
    register_corrections,
    register_leave,
    register_calendar,
    register_payroll,
    register_notifications,
    register_dashboard,
    register_leads,
    register_audit,
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None, *, settings: Optional[Settings] = None) -> Flask:
    """Application factory.

    Tests pass a ready container (in-memory repositories); otherwise one is
    built against MySQL from the ``config.*`` module selected by ``APP_ENV``.
    """

    load_dotenv(override=False)
    if settings is None:
        settings = container.settings if container else None
    if settings is None:
        settings_module = get_settings_module()
        settings = Settings.from_module(importlib.import_module(settings_module))

    _configure_logging(settings.LOG_LEVEL)

    app = Flask(__name__)
    app.secret_key = settings.SECRET_KEY
    app.config["DEBUG"] = bool(settings.DEBUG)
    app.config["TESTING"] = bool(settings.TESTING)

    CORS(app, resources={r"/api/*": {"origins": list(settings.CORS_ORIGINS) or "*"}}, supports_credentials=True)
    register_error_handlers(app)

    if container is None:
        db_config = settings.DB_CONFIG
        logger.info(
            "Starting HRM backend (db=%s@%s:%s/%s, timezone=%s)",
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
            settings.COMPANY_TIMEZONE,
        )
        if settings.AUTO_INIT_DB:
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            run_migrations(db_config)
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if settings.AUTO_SEED_DB:
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            ensure_demo_users(db_config)
            logger.info("Demo seed ready")
        container = build_container(db_config=db_config, settings=settings)

    app.extensions["hrm"] = container
    for register in _CONTROLLERS:
        register(app, container)

    if settings.ENABLE_SCHEDULER and not settings.TESTING:
        app.extensions["hrm_scheduler"] = start_scheduler(
            container.attendance_finalizer,
            container.leave_service,
            container.clock,
            interval_minutes=settings.FINALIZATION_INTERVAL_MINUTES,
        )

    return app
