"""
Attendance Module (``hr_modules.attendance``).

Responsibility
--------------
Attendance rules, public holiday calendars and raw daily punches, plus
the service that turns a month of punches into per-employee summaries
(final status, raw and payable overtime) for payroll.

Architecture position
---------------------
**Modules layer** -- DTOs, rule set, ORM, stores and a service facade
that delegates enrichment and aggregation to ``hr_engines.attendance``.

Failure modes
-------------
* ``InvalidAttendanceRulesError`` when saving incomplete rules.
* Incomplete rules at read time degrade enrichment instead of raising.
"""

from hr_modules.attendance.config import AttendanceRuleSet
from hr_modules.attendance.models import (
    AttendanceStatus,
    AttendanceTotals,
    EnrichedAttendanceRecord,
    Holiday,
    MonthlyAttendanceSummary,
    RawAttendancePunch,
)

__all__ = [
    "AttendanceRuleSet",
    "AttendanceStatus",
    "AttendanceTotals",
    "EnrichedAttendanceRecord",
    "Holiday",
    "MonthlyAttendanceSummary",
    "RawAttendancePunch",
]
