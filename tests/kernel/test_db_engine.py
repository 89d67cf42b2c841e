"""
Tests for hr_kernel.db.engine transactional helpers and column types.
"""

from decimal import Decimal

import pytest

from hr_kernel.db.base import DecimalString
from hr_kernel.db.engine import get_engine, session_scope
from hr_modules.payroll.models import Employee
from hr_modules.payroll.stores import SqlAlchemyEmployeeDirectory


def _employee(employee_id: str = "EMP-001") -> Employee:
    return Employee(id=employee_id, name="Somchai Dee", base_salary=Decimal("30000"))


class TestSessionScope:

    def test_commits_on_success(self, session, test_actor_id):
        with session_scope() as scoped:
            SqlAlchemyEmployeeDirectory(scoped).save_employee(_employee(), test_actor_id)

        assert SqlAlchemyEmployeeDirectory(session).get_employee("EMP-001") is not None

    def test_rolls_back_on_error(self, session, test_actor_id):
        with pytest.raises(RuntimeError):
            with session_scope() as scoped:
                SqlAlchemyEmployeeDirectory(scoped).save_employee(_employee(), test_actor_id)
                raise RuntimeError("abort")

        assert SqlAlchemyEmployeeDirectory(session).get_employee("EMP-001") is None

    def test_engine_is_initialized(self, db_engine):
        assert get_engine() is db_engine


class TestDecimalString:

    def test_rejects_float(self):
        with pytest.raises(TypeError):
            DecimalString().process_bind_param(0.1, None)

    def test_exact_round_trip(self):
        column = DecimalString()
        stored = column.process_bind_param(Decimal("111.1111"), None)
        assert stored == "111.1111"
        assert column.process_result_value(stored, None) == Decimal("111.1111")

    def test_none_passes_through(self):
        column = DecimalString()
        assert column.process_bind_param(None, None) is None
        assert column.process_result_value(None, None) is None
