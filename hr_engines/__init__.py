"""
Pure calculation engines for attendance and payroll.

Engines never perform I/O and never read the clock.  Every public entry
point is a plain function over frozen DTOs.
"""

from hr_engines.attendance import (
    HOLIDAY_AFTER_HOURS_RATE,
    HOLIDAY_RATE,
    STANDARD_HOLIDAY_HOURS,
    WEEKDAY_OVERTIME_RATE,
    calculate_attendance_logic,
    enrich_attendance_record,
    recompute_attendance,
    summarize_month,
)
from hr_engines.ledger import (
    employee_cost_for_period,
    filter_for_period,
    partition_adjustments,
    plan_advance_installments,
    sort_history,
    summarize_advance_repayment,
)
from hr_engines.payroll import (
    STANDARD_WORK_HOURS_PER_DAY,
    calculate_payroll,
    working_days_in_month,
)
from hr_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "HOLIDAY_AFTER_HOURS_RATE",
    "HOLIDAY_RATE",
    "STANDARD_HOLIDAY_HOURS",
    "STANDARD_WORK_HOURS_PER_DAY",
    "WEEKDAY_OVERTIME_RATE",
    "calculate_attendance_logic",
    "calculate_payroll",
    "compute_input_fingerprint",
    "employee_cost_for_period",
    "enrich_attendance_record",
    "filter_for_period",
    "partition_adjustments",
    "plan_advance_installments",
    "recompute_attendance",
    "sort_history",
    "summarize_advance_repayment",
    "summarize_month",
    "traced_engine",
    "working_days_in_month",
]
