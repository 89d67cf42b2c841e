"""
Payroll periods -- the 21st-to-20th fiscal window.

Responsibility:
    Value object and date arithmetic for payroll periods.  A payroll period
    ``(year, month)`` covers the 21st of the previous calendar month through
    the 20th of ``month``.  All financial bookkeeping (adjustments, payroll
    records) is filed by payroll period, never by calendar month.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O, no clock.

Invariants enforced:
    - A date on day 1-20 belongs to its own month's period.
    - A date on day 21-31 belongs to the next month's period, rolling
      December into January of the following year.
    - ``PayrollPeriod(y, m).contains(d)`` iff ``payroll_period_for_date(d) == (y, m)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

PERIOD_CUTOFF_DAY = 20
PERIOD_START_DAY = PERIOD_CUTOFF_DAY + 1


@dataclass(frozen=True, order=True)
class PayrollPeriod:
    """A payroll period identified by the calendar month it closes in."""

    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {self.month}")

    @property
    def key(self) -> str:
        """Storage key in ``MMYYYY`` form."""
        return f"{self.month:02d}{self.year}"

    @property
    def label(self) -> str:
        return f"{self.year}-{self.month:02d}"

    def shift(self, periods: int) -> PayrollPeriod:
        """Return the period ``periods`` steps later (negative steps go back)."""
        index = self.year * 12 + (self.month - 1) + periods
        return PayrollPeriod(index // 12, index % 12 + 1)

    @property
    def start_date(self) -> date:
        """The 21st of the month before this period's month."""
        previous = self.shift(-1)
        return date(previous.year, previous.month, PERIOD_START_DAY)

    @property
    def end_date(self) -> date:
        """The 20th of this period's month."""
        return date(self.year, self.month, PERIOD_CUTOFF_DAY)

    @property
    def window(self) -> tuple[date, date]:
        """Inclusive ``(start, end)`` date range of the period."""
        return self.start_date, self.end_date

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


def payroll_period_for_date(day: date) -> PayrollPeriod:
    """
    Assign a date to its payroll period.

    Examples:
        2024-03-20 -> PayrollPeriod(2024, 3)
        2024-03-21 -> PayrollPeriod(2024, 4)
        2024-12-25 -> PayrollPeriod(2025, 1)
    """
    period = PayrollPeriod(day.year, day.month)
    if day.day > PERIOD_CUTOFF_DAY:
        return period.shift(1)
    return period
