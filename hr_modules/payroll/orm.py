"""
Payroll ORM Persistence Models (``hr_modules.payroll.orm``).

Responsibility:
    SQLAlchemy ORM models that persist the frozen dataclass DTOs defined in
    ``hr_modules.payroll.models``: the employee directory, the financial
    adjustment ledger and calculated payroll records.  Each ORM class
    mirrors a DTO and provides ``to_dto()`` / ``from_dto()`` conversion.

Architecture position:
    **Modules layer** -- persistence companions to the pure DTO models.
    Inherits from ``TrackedBase`` which provides id (UUID PK), created_at,
    updated_at, created_by_id (NOT NULL UUID), updated_by_id.

Invariants enforced:
    - All monetary fields use Decimal (DecimalString) -- NEVER float.
    - Enum fields stored as String(50) containing the enum .value string.
    - Adjustments carry their payroll period (``period_year``,
      ``period_month``), derived from the adjustment date on every write.
    - One payroll record per employee and period
      (uq_payroll_record_employee_period).
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Boolean, Date, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hr_kernel.db.base import TrackedBase

# ---------------------------------------------------------------------------
# EmployeeModel
# ---------------------------------------------------------------------------

class EmployeeModel(TrackedBase):
    """
    ORM model for ``Employee``.

    Guarantees:
        - ``employee_code`` is unique (uq_payroll_employee_code).
        - ``base_salary`` is always Decimal.
    """

    __tablename__ = "payroll_employees"

    employee_code: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(nullable=False)
    grade: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    department: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    position: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("employee_code", name="uq_payroll_employee_code"),
        Index("idx_payroll_employee_active", "is_active"),
    )

    def to_dto(self):
        from hr_modules.payroll.models import Employee
        return Employee(
            id=self.employee_code,
            name=self.name,
            base_salary=self.base_salary,
            grade=self.grade,
            department=self.department,
            position=self.position,
            is_active=self.is_active,
        )

    def apply_dto(self, dto, updated_by_id: UUID) -> None:
        self.name = dto.name
        self.base_salary = dto.base_salary
        self.grade = dto.grade
        self.department = dto.department
        self.position = dto.position
        self.is_active = dto.is_active
        self.updated_by_id = updated_by_id

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "EmployeeModel":
        return cls(
            employee_code=dto.id,
            name=dto.name,
            base_salary=dto.base_salary,
            grade=dto.grade,
            department=dto.department,
            position=dto.position,
            is_active=dto.is_active,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<EmployeeModel {self.employee_code}: {self.name}>"


# ---------------------------------------------------------------------------
# FinancialAdjustmentModel
# ---------------------------------------------------------------------------

class FinancialAdjustmentModel(TrackedBase):
    """
    ORM model for ``FinancialAdjustment``.

    Guarantees:
        - ``adjustment_id`` is unique (uq_payroll_adjustment_id).
        - ``adjustment_type`` stores the AdjustmentType .value string.
        - ``period_year`` / ``period_month`` always match the payroll
          period of ``adjustment_date``.
    """

    __tablename__ = "payroll_adjustments"

    adjustment_id: Mapped[str] = mapped_column(String(128), nullable=False)
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False)
    adjustment_type: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    adjustment_date: Mapped[date] = mapped_column(Date, nullable=False)
    remarks: Mapped[str] = mapped_column(String(4000), nullable=False, default="")
    installments: Mapped[int | None] = mapped_column(nullable=True)
    period_year: Mapped[int] = mapped_column(nullable=False)
    period_month: Mapped[int] = mapped_column(nullable=False)

    __table_args__ = (
        UniqueConstraint("adjustment_id", name="uq_payroll_adjustment_id"),
        Index("idx_payroll_adjustment_period", "period_year", "period_month"),
        Index("idx_payroll_adjustment_employee", "employee_id"),
    )

    def to_dto(self):
        from hr_modules.payroll.models import AdjustmentType, FinancialAdjustment
        return FinancialAdjustment(
            id=self.adjustment_id,
            employee_id=self.employee_id,
            type=AdjustmentType(self.adjustment_type),
            amount=self.amount,
            date=self.adjustment_date,
            remarks=self.remarks,
            installments=self.installments,
        )

    def apply_dto(self, dto, updated_by_id: UUID) -> None:
        period = dto.payroll_period
        self.employee_id = dto.employee_id
        self.adjustment_type = dto.type.value
        self.amount = dto.amount
        self.adjustment_date = dto.date
        self.remarks = dto.remarks
        self.installments = dto.installments
        self.period_year = period.year
        self.period_month = period.month
        self.updated_by_id = updated_by_id

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "FinancialAdjustmentModel":
        period = dto.payroll_period
        return cls(
            adjustment_id=dto.id,
            employee_id=dto.employee_id,
            adjustment_type=dto.type.value,
            amount=dto.amount,
            adjustment_date=dto.date,
            remarks=dto.remarks,
            installments=dto.installments,
            period_year=period.year,
            period_month=period.month,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return (
            f"<FinancialAdjustmentModel {self.adjustment_id}: "
            f"{self.adjustment_type} {self.amount}>"
        )


# ---------------------------------------------------------------------------
# PayrollRecordModel
# ---------------------------------------------------------------------------

class PayrollRecordModel(TrackedBase):
    """
    ORM model for ``PayrollRecord`` -- one employee's payroll for one period.

    Contract:
        Recalculating a period overwrites the row in place (last write wins).
        Deduction items, the attendance snapshot and the adjustment history
        are stored as JSON documents with amounts as strings.
    """

    __tablename__ = "payroll_records"

    employee_id: Mapped[str] = mapped_column(String(64), nullable=False)
    period_year: Mapped[int] = mapped_column(nullable=False)
    period_month: Mapped[int] = mapped_column(nullable=False)
    employee_name: Mapped[str] = mapped_column(String(200), nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(nullable=False)
    present_days: Mapped[int] = mapped_column(nullable=False)
    working_days: Mapped[int] = mapped_column(nullable=False)
    prorated_salary: Mapped[Decimal] = mapped_column(nullable=False)
    raw_ot_hours: Mapped[Decimal] = mapped_column(nullable=False)
    payable_ot_hours: Mapped[Decimal] = mapped_column(nullable=False)
    ot_pay: Mapped[Decimal] = mapped_column(nullable=False)
    bonus: Mapped[Decimal] = mapped_column(nullable=False)
    advance_credit: Mapped[Decimal] = mapped_column(nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(nullable=False)
    base_hourly_rate: Mapped[Decimal] = mapped_column(nullable=False)
    grade: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    department: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    position: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    deductions: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    attendance: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    financial_history: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    all_time_financial_history: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    calculated_at: Mapped[datetime | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "employee_id", "period_year", "period_month",
            name="uq_payroll_record_employee_period",
        ),
        Index("idx_payroll_record_period", "period_year", "period_month"),
    )

    def to_dto(self):
        from hr_modules.attendance.models import AttendanceTotals
        from hr_modules.payroll.models import (
            CalculationDetails,
            DeductionItem,
            FinancialAdjustment,
            PayrollRecord,
        )
        return PayrollRecord(
            employee_id=self.employee_id,
            employee_name=self.employee_name,
            year=self.period_year,
            month=self.period_month,
            base_salary=self.base_salary,
            present_days=self.present_days,
            working_days=self.working_days,
            prorated_salary=self.prorated_salary,
            raw_ot_hours=self.raw_ot_hours,
            payable_ot_hours=self.payable_ot_hours,
            ot_pay=self.ot_pay,
            bonus=self.bonus,
            advance_credit=self.advance_credit,
            deductions=tuple(DeductionItem.from_dict(d) for d in self.deductions),
            net_salary=self.net_salary,
            calculation_details=CalculationDetails(
                base_hourly_rate=self.base_hourly_rate,
                grade=self.grade,
                department=self.department,
                position=self.position,
            ),
            attendance=AttendanceTotals.from_dict(self.attendance),
            financial_history=tuple(
                FinancialAdjustment.from_dict(a) for a in self.financial_history
            ),
            all_time_financial_history=tuple(
                FinancialAdjustment.from_dict(a) for a in self.all_time_financial_history
            ),
            calculated_at=self.calculated_at,
        )

    def apply_dto(self, dto, updated_by_id: UUID | None) -> None:
        """Overwrite every calculated column from ``dto``."""
        details = dto.calculation_details
        self.employee_name = dto.employee_name
        self.base_salary = dto.base_salary
        self.present_days = dto.present_days
        self.working_days = dto.working_days
        self.prorated_salary = dto.prorated_salary
        self.raw_ot_hours = dto.raw_ot_hours
        self.payable_ot_hours = dto.payable_ot_hours
        self.ot_pay = dto.ot_pay
        self.bonus = dto.bonus
        self.advance_credit = dto.advance_credit
        self.net_salary = dto.net_salary
        self.base_hourly_rate = details.base_hourly_rate
        self.grade = details.grade
        self.department = details.department
        self.position = details.position
        self.deductions = [d.to_dict() for d in dto.deductions]
        self.attendance = dto.attendance.to_dict()
        self.financial_history = [a.to_dict() for a in dto.financial_history]
        self.all_time_financial_history = [
            a.to_dict() for a in dto.all_time_financial_history
        ]
        self.calculated_at = dto.calculated_at
        self.updated_by_id = updated_by_id

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "PayrollRecordModel":
        model = cls(
            employee_id=dto.employee_id,
            period_year=dto.year,
            period_month=dto.month,
            created_by_id=created_by_id,
        )
        model.apply_dto(dto, updated_by_id=None)
        return model

    def __repr__(self) -> str:
        return (
            f"<PayrollRecordModel {self.employee_id} "
            f"{self.period_month:02d}/{self.period_year}: {self.net_salary}>"
        )
