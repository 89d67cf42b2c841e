"""
Process start-up from ``HRSettings``.

Configures JSON logging at the configured level, then opens the database
and creates any missing tables.  Logging goes first because engine
initialization configures logging with defaults when nothing has yet.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from hr_config.loader import load_hr_settings
from hr_config.schema import HRSettings
from hr_kernel.db.engine import create_tables, init_engine_from_url
from hr_kernel.logging_config import configure_logging, get_logger

logger = get_logger("config.runtime")


def initialize(settings: HRSettings | None = None) -> Engine:
    """Bring up logging and the database for ``settings``.

    When ``settings`` is None they are loaded with ``load_hr_settings()``
    (defaults file plus environment overrides).
    """
    if settings is None:
        settings = load_hr_settings()
    configure_logging(level=settings.log_level.upper())
    engine = init_engine_from_url(settings.database_url)
    create_tables()
    logger.info(
        "hr_runtime_initialized",
        extra={
            "database_url": engine.url.render_as_string(hide_password=True),
            "log_level": settings.log_level.upper(),
            "payroll_max_workers": settings.payroll_max_workers,
        },
    )
    return engine
