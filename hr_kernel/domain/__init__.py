"""
Pure domain support.

NO dependencies on ORM, database or I/O.  The clock is the one sanctioned
time boundary and is always injected.
"""

from hr_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from hr_kernel.domain.periods import PayrollPeriod, payroll_period_for_date

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "PayrollPeriod",
    "payroll_period_for_date",
]
