"""
Payroll stores (``hr_modules.payroll.stores``).

Protocols describing what the payroll services need from persistence --
the employee directory, the adjustment ledger and payroll records -- plus
SQLAlchemy implementations.  Stores flush but never commit; the calling
service owns the transaction boundary.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from hr_kernel.logging_config import get_logger
from hr_modules.payroll.models import Employee, FinancialAdjustment, PayrollRecord
from hr_modules.payroll.orm import (
    EmployeeModel,
    FinancialAdjustmentModel,
    PayrollRecordModel,
)

logger = get_logger("modules.payroll.stores")


class EmployeeDirectory(Protocol):
    def get_employees(self) -> list[Employee]: ...

    def get_employee(self, employee_id: str) -> Employee | None: ...

    def save_employee(self, employee: Employee, actor_id: UUID) -> None: ...


class AdjustmentStore(Protocol):
    def get_adjustments_for_period(
        self, year: int, month: int, employee_id: str | None = None,
    ) -> list[FinancialAdjustment]: ...

    def list_adjustments(self, employee_id: str | None = None) -> list[FinancialAdjustment]: ...

    def get_adjustment(self, adjustment_id: str) -> FinancialAdjustment | None: ...

    def save_adjustment(self, adjustment: FinancialAdjustment, actor_id: UUID) -> None: ...

    def delete_adjustment(self, adjustment_id: str) -> bool: ...


class PayrollStore(Protocol):
    def get_payroll_data_for_month(
        self, year: int, month: int, employee_id: str,
    ) -> PayrollRecord | None: ...

    def save_payroll_data(
        self, year: int, month: int, record: PayrollRecord, actor_id: UUID,
    ) -> None: ...


class SqlAlchemyEmployeeDirectory:
    def __init__(self, session: Session):
        self._session = session

    def _row(self, employee_id: str) -> EmployeeModel | None:
        return self._session.scalars(
            select(EmployeeModel).where(EmployeeModel.employee_code == employee_id)
        ).one_or_none()

    def get_employees(self) -> list[Employee]:
        rows = self._session.scalars(select(EmployeeModel).order_by(EmployeeModel.employee_code))
        return [row.to_dto() for row in rows]

    def get_employee(self, employee_id: str) -> Employee | None:
        row = self._row(employee_id)
        return row.to_dto() if row is not None else None

    def save_employee(self, employee: Employee, actor_id: UUID) -> None:
        row = self._row(employee.id)
        if row is None:
            self._session.add(EmployeeModel.from_dto(employee, created_by_id=actor_id))
        else:
            row.apply_dto(employee, updated_by_id=actor_id)
        self._session.flush()


class SqlAlchemyAdjustmentStore:
    """Adjustment ledger backed by ``payroll_adjustments``."""

    def __init__(self, session: Session):
        self._session = session

    def _row(self, adjustment_id: str) -> FinancialAdjustmentModel | None:
        return self._session.scalars(
            select(FinancialAdjustmentModel)
            .where(FinancialAdjustmentModel.adjustment_id == adjustment_id)
        ).one_or_none()

    def get_adjustments_for_period(
        self, year: int, month: int, employee_id: str | None = None,
    ) -> list[FinancialAdjustment]:
        stmt = select(FinancialAdjustmentModel).where(
            FinancialAdjustmentModel.period_year == year,
            FinancialAdjustmentModel.period_month == month,
        )
        if employee_id is not None:
            stmt = stmt.where(FinancialAdjustmentModel.employee_id == employee_id)
        stmt = stmt.order_by(FinancialAdjustmentModel.adjustment_date.desc())
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def list_adjustments(self, employee_id: str | None = None) -> list[FinancialAdjustment]:
        stmt = select(FinancialAdjustmentModel)
        if employee_id is not None:
            stmt = stmt.where(FinancialAdjustmentModel.employee_id == employee_id)
        stmt = stmt.order_by(FinancialAdjustmentModel.adjustment_date.desc())
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def get_adjustment(self, adjustment_id: str) -> FinancialAdjustment | None:
        row = self._row(adjustment_id)
        return row.to_dto() if row is not None else None

    def save_adjustment(self, adjustment: FinancialAdjustment, actor_id: UUID) -> None:
        """Insert, or overwrite the adjustment with the same id."""
        row = self._row(adjustment.id)
        if row is None:
            self._session.add(FinancialAdjustmentModel.from_dto(adjustment, created_by_id=actor_id))
        else:
            row.apply_dto(adjustment, updated_by_id=actor_id)
        self._session.flush()

    def delete_adjustment(self, adjustment_id: str) -> bool:
        row = self._row(adjustment_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True


class SqlAlchemyPayrollStore:
    """Payroll records backed by ``payroll_records`` (one row per employee and period)."""

    def __init__(self, session: Session):
        self._session = session

    def _row(self, year: int, month: int, employee_id: str) -> PayrollRecordModel | None:
        return self._session.scalars(
            select(PayrollRecordModel).where(
                PayrollRecordModel.employee_id == employee_id,
                PayrollRecordModel.period_year == year,
                PayrollRecordModel.period_month == month,
            )
        ).one_or_none()

    def get_payroll_data_for_month(
        self, year: int, month: int, employee_id: str,
    ) -> PayrollRecord | None:
        row = self._row(year, month, employee_id)
        return row.to_dto() if row is not None else None

    def get_payroll_for_period(self, year: int, month: int) -> list[PayrollRecord]:
        rows = self._session.scalars(
            select(PayrollRecordModel)
            .where(
                PayrollRecordModel.period_year == year,
                PayrollRecordModel.period_month == month,
            )
            .order_by(PayrollRecordModel.employee_id)
        )
        return [row.to_dto() for row in rows]

    def save_payroll_data(
        self, year: int, month: int, record: PayrollRecord, actor_id: UUID,
    ) -> None:
        """Last write wins: an existing record for the period is overwritten."""
        if (record.year, record.month) != (year, month):
            raise ValueError(
                f"record for {record.month:02d}/{record.year} cannot be filed "
                f"under {month:02d}/{year}"
            )
        row = self._row(year, month, record.employee_id)
        if row is None:
            self._session.add(PayrollRecordModel.from_dto(record, created_by_id=actor_id))
        else:
            row.apply_dto(record, updated_by_id=actor_id)
        self._session.flush()
