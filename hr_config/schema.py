"""
Runtime settings schema.

Parsed by ``hr_config.loader`` from YAML and environment overrides.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_DATABASE_URL = "sqlite:///hr.db"
DEFAULT_LOG_LEVEL = "INFO"

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class HRSettings:
    """Process-level settings: where the data lives and how loud to log."""

    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = DEFAULT_LOG_LEVEL
    payroll_max_workers: int | None = None

    def __post_init__(self):
        if not self.database_url:
            raise ValueError("database_url is required")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"unknown log level: {self.log_level}")
        if self.payroll_max_workers is not None and self.payroll_max_workers < 1:
            raise ValueError("payroll_max_workers must be at least 1")
