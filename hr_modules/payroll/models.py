"""
Payroll Domain Models (``hr_modules.payroll.models``).

Responsibility
--------------
Frozen dataclass value objects representing the nouns of payroll:
employees, financial adjustments (bonuses, deductions, advances and
their installments), monthly payroll records and advance repayment
summaries.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
the payroll and ledger engines and by the payroll services.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* Adjustment amounts are strictly positive; the type carries the sign.
* Only advances carry an installment count.

Failure modes
-------------
* Construction with impossible values raises ``ValueError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from hr_kernel.db.types import ZERO, to_decimal
from hr_kernel.domain.periods import PayrollPeriod, payroll_period_for_date
from hr_kernel.logging_config import get_logger
from hr_modules.attendance.models import AttendanceTotals, parse_date

logger = get_logger("modules.payroll.models")


class AdjustmentType(str, Enum):
    """Kinds of financial adjustment."""
    BONUS = "Bonus"
    ADDITION = "Addition"
    DEDUCTION = "Deduction"
    EMPLOYEE_EXPENSE = "Employee Expense"
    ADVANCE = "Advance"


EARNING_TYPES = frozenset({AdjustmentType.BONUS, AdjustmentType.ADDITION})
DEDUCTION_TYPES = frozenset({AdjustmentType.DEDUCTION, AdjustmentType.EMPLOYEE_EXPENSE})

ADVANCE_REPAYMENT_PREFIX = "repay-"


@dataclass(frozen=True)
class Employee:
    """An employee as seen by payroll."""
    id: str
    name: str
    base_salary: Decimal
    grade: str = ""
    department: str = ""
    position: str = ""
    is_active: bool = True

    def __post_init__(self):
        if self.base_salary < 0:
            raise ValueError("base salary cannot be negative")


@dataclass(frozen=True)
class FinancialAdjustment:
    """
    A single financial transaction against an employee.

    Filed under the payroll period its ``date`` falls in (21st-to-20th).
    Advance repayments are plain ``Deduction`` adjustments whose id is
    ``repay-<advance id>-<n>``.
    """
    id: str
    employee_id: str
    type: AdjustmentType
    amount: Decimal
    date: date
    remarks: str = ""
    installments: int | None = None

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError(f"adjustment amount must be positive, got {self.amount}")
        if self.installments is not None:
            if self.type is not AdjustmentType.ADVANCE:
                raise ValueError("installments are only allowed on advances")
            if self.installments < 1:
                raise ValueError("installments must be at least 1")

    @property
    def payroll_period(self) -> PayrollPeriod:
        return payroll_period_for_date(self.date)

    @property
    def is_advance_repayment(self) -> bool:
        return self.id.startswith(ADVANCE_REPAYMENT_PREFIX)

    def repays(self, advance_id: str) -> bool:
        """True when this is an installment of the given advance."""
        return self.id.startswith(f"{ADVANCE_REPAYMENT_PREFIX}{advance_id}-")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "type": self.type.value,
            "amount": str(self.amount),
            "date": self.date.isoformat(),
            "remarks": self.remarks,
            "installments": self.installments,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FinancialAdjustment:
        installments = data.get("installments")
        return cls(
            id=str(data["id"]),
            employee_id=str(data["employee_id"]),
            type=AdjustmentType(data["type"]),
            amount=to_decimal(data["amount"]),
            date=parse_date(data["date"]),
            remarks=str(data.get("remarks") or ""),
            installments=int(installments) if installments else None,
        )


@dataclass(frozen=True)
class DeductionItem:
    """One deduction line on a payslip."""
    id: str
    amount: Decimal
    remarks: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "amount": str(self.amount), "remarks": self.remarks}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeductionItem:
        return cls(
            id=str(data["id"]),
            amount=to_decimal(data["amount"]),
            remarks=str(data.get("remarks") or ""),
        )


@dataclass(frozen=True)
class AdjustmentTotals:
    """Adjustments of one period split into the payroll buckets."""
    bonus: Decimal = ZERO
    advance_credit: Decimal = ZERO
    deductions: tuple[DeductionItem, ...] = ()

    @property
    def total_deductions(self) -> Decimal:
        return sum((d.amount for d in self.deductions), ZERO)


@dataclass(frozen=True)
class CalculationDetails:
    """Audit detail stored alongside a payroll record."""
    base_hourly_rate: Decimal
    grade: str = ""
    department: str = ""
    position: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "base_hourly_rate": str(self.base_hourly_rate),
            "grade": self.grade,
            "department": self.department,
            "position": self.position,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CalculationDetails:
        return cls(
            base_hourly_rate=to_decimal(data.get("base_hourly_rate", "0")),
            grade=str(data.get("grade") or ""),
            department=str(data.get("department") or ""),
            position=str(data.get("position") or ""),
        )


@dataclass(frozen=True)
class PayrollRecord:
    """
    One employee's calculated payroll for one period.

    ``net_salary == prorated_salary + ot_pay + bonus + advance_credit
    - total_deductions`` holds exactly on every record built by the
    payroll engine.
    """
    employee_id: str
    employee_name: str
    year: int
    month: int
    base_salary: Decimal
    present_days: int
    working_days: int
    prorated_salary: Decimal
    raw_ot_hours: Decimal
    payable_ot_hours: Decimal
    ot_pay: Decimal
    bonus: Decimal
    advance_credit: Decimal
    deductions: tuple[DeductionItem, ...]
    net_salary: Decimal
    calculation_details: CalculationDetails
    attendance: AttendanceTotals = field(default_factory=AttendanceTotals)
    financial_history: tuple[FinancialAdjustment, ...] = ()
    all_time_financial_history: tuple[FinancialAdjustment, ...] = ()
    calculated_at: datetime | None = None

    @property
    def period(self) -> PayrollPeriod:
        return PayrollPeriod(self.year, self.month)

    @property
    def total_deductions(self) -> Decimal:
        return sum((d.amount for d in self.deductions), ZERO)

    @property
    def total_earnings(self) -> Decimal:
        return self.prorated_salary + self.ot_pay + self.bonus + self.advance_credit


@dataclass(frozen=True)
class AdvanceRepaymentSummary:
    """Repayment progress of an employee's most recent advance."""
    advance_id: str
    total_advance: Decimal
    installments: int
    paid_installments: int
    total_repaid: Decimal

    @property
    def remaining_amount(self) -> Decimal:
        return self.total_advance - self.total_repaid

    @property
    def is_settled(self) -> bool:
        return self.remaining_amount <= 0
