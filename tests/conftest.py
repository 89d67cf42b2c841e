"""
Pytest fixtures for the HR kernel test suite.

Provides:
- Structured logging configuration and log capture
- A SQLite database (in-memory by default) shared by the whole session,
  with every table emptied after each test
- Service fixtures wired to a deterministic clock
- An employee factory and the shared test actor id

Environment Variables:
- DATABASE_URL: SQLAlchemy URL to test against instead of in-memory SQLite.
"""

import json
import logging
import os
from datetime import UTC, datetime
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from hr_kernel.db.base import Base
from hr_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from hr_kernel.domain.clock import DeterministicClock
from hr_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from hr_modules.attendance.service import AttendanceService
from hr_modules.payroll.models import Employee
from hr_modules.payroll.service import AdjustmentLedgerService, PayrollService
from hr_modules.payroll.stores import SqlAlchemyEmployeeDirectory

# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()

DEFAULT_TEST_DATABASE_URL = "sqlite://"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture hr_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, payroll_service):
            payroll_service.calculate_and_save(...)
            logs = captured_logs()
            assert any(r["message"] == "payroll_calculated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("hr_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


def get_database_url() -> str:
    """Get database URL from environment, or use in-memory SQLite."""
    return os.environ.get("DATABASE_URL", DEFAULT_TEST_DATABASE_URL)


@pytest.fixture(scope="session")
def db_engine():
    """Single engine and schema for the entire test session."""
    eng = init_engine_from_url(get_database_url(), echo=False)
    create_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """A session per test; every table is emptied afterwards."""
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()
    with get_engine().begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 3, 25, 10, 0, 0, tzinfo=UTC))


@pytest.fixture
def attendance_service(session) -> AttendanceService:
    return AttendanceService(session)


@pytest.fixture
def ledger_service(session) -> AdjustmentLedgerService:
    return AdjustmentLedgerService(session)


@pytest.fixture
def payroll_service(session, deterministic_clock) -> PayrollService:
    return PayrollService(session, clock=deterministic_clock)


@pytest.fixture
def employee_directory(session) -> SqlAlchemyEmployeeDirectory:
    return SqlAlchemyEmployeeDirectory(session)


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def create_employee(session, employee_directory):
    """Store an employee and commit.  Returns the DTO."""

    def _create(
        employee_id: str = "EMP-001",
        base_salary: Decimal = Decimal("30000"),
        name: str = "Somchai Dee",
        is_active: bool = True,
        **kwargs,
    ) -> Employee:
        employee = Employee(
            id=employee_id,
            name=name,
            base_salary=base_salary,
            is_active=is_active,
            **kwargs,
        )
        employee_directory.save_employee(employee, TEST_ACTOR_ID)
        session.commit()
        return employee

    return _create


@pytest.fixture
def test_actor_id():
    return TEST_ACTOR_ID
