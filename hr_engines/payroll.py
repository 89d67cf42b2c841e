"""
Payroll Calculator Engine (``hr_engines.payroll``).

Responsibility
--------------
Pure calculation of one employee's monthly payroll record from the base
salary, the month's attendance totals and the period's financial
adjustments.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO database,
ZERO clock reads.  The caller stamps ``calculated_at``.

Invariants enforced
-------------------
* Working days = calendar days of the month minus attendance holidays.
* No division by zero: with no working days every rate-based figure is 0.
* Monetary components are rounded half-up to cents BEFORE the net is
  formed, so ``net = prorated + ot_pay + bonus + advance_credit -
  total_deductions`` holds exactly on the stored record.

Failure modes
-------------
* None for well-typed input.  Missing attendance counts as all zeros.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from decimal import Decimal

from hr_engines.ledger import partition_adjustments, sort_history
from hr_engines.tracer import traced_engine
from hr_kernel.db.types import ZERO, round_money, round_rate
from hr_kernel.logging_config import get_logger
from hr_modules.attendance.models import AttendanceTotals
from hr_modules.payroll.models import (
    CalculationDetails,
    Employee,
    FinancialAdjustment,
    PayrollRecord,
)

logger = get_logger("engines.payroll")

STANDARD_WORK_HOURS_PER_DAY = Decimal("9")


def working_days_in_month(year: int, month: int, holidays: int) -> int:
    """Calendar days of the month less holiday days (may be zero or negative)."""
    return calendar.monthrange(year, month)[1] - holidays


@traced_engine(
    "payroll_calculator",
    "1.0",
    fingerprint_fields=("employee", "year", "month", "attendance", "adjustments"),
)
def calculate_payroll(
    employee: Employee,
    year: int,
    month: int,
    attendance: AttendanceTotals | None,
    adjustments: Iterable[FinancialAdjustment],
    all_time_history: Iterable[FinancialAdjustment] = (),
) -> PayrollRecord:
    """Calculate one employee's payroll for one period.

    Args:
        employee: The employee, carrying the monthly base salary.
        year: Payroll period year.
        month: Payroll period month.
        attendance: The month's attendance totals, or None when the
            employee has no attendance data.
        adjustments: Adjustments filed in this payroll period.
        all_time_history: Optional full adjustment history, snapshotted
            on the record for payslip rendering.

    Returns:
        PayrollRecord with ``calculated_at`` unset.
    """
    totals = attendance or AttendanceTotals()
    period_adjustments = sort_history(adjustments)
    base = employee.base_salary

    working_days = working_days_in_month(year, month, totals.holiday)
    present_days = totals.total_present_days

    if working_days > 0:
        daily_hours = Decimal(working_days) * STANDARD_WORK_HOURS_PER_DAY
        prorated = round_money(base * present_days / working_days)
        hourly_rate = round_rate(base / daily_hours)
        ot_pay = round_money(totals.total_payable_overtime * base / daily_hours)
    else:
        logger.warning(
            "payroll_no_working_days",
            extra={
                "employee_id": employee.id,
                "year": year,
                "month": month,
                "holidays": totals.holiday,
            },
        )
        prorated = ZERO
        hourly_rate = ZERO
        ot_pay = ZERO

    buckets = partition_adjustments(period_adjustments)
    bonus = round_money(buckets.bonus)
    advance_credit = round_money(buckets.advance_credit)
    total_deductions = round_money(buckets.total_deductions)

    net_salary = prorated + ot_pay + bonus + advance_credit - total_deductions

    record = PayrollRecord(
        employee_id=employee.id,
        employee_name=employee.name,
        year=year,
        month=month,
        base_salary=base,
        present_days=present_days,
        working_days=working_days,
        prorated_salary=prorated,
        raw_ot_hours=totals.total_raw_overtime,
        payable_ot_hours=totals.total_payable_overtime,
        ot_pay=ot_pay,
        bonus=bonus,
        advance_credit=advance_credit,
        deductions=buckets.deductions,
        net_salary=net_salary,
        calculation_details=CalculationDetails(
            base_hourly_rate=hourly_rate,
            grade=employee.grade,
            department=employee.department,
            position=employee.position,
        ),
        attendance=totals,
        financial_history=tuple(period_adjustments),
        all_time_financial_history=tuple(sort_history(all_time_history)),
    )

    logger.info(
        "payroll_calculated",
        extra={
            "employee_id": employee.id,
            "period": f"{year}-{month:02d}",
            "working_days": working_days,
            "present_days": present_days,
            "net_salary": net_salary,
        },
    )
    return record
