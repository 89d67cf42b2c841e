"""
Attendance Engine (``hr_engines.attendance``).

Responsibility
--------------
Pure functions that turn raw attendance punches into enriched records
(final status, raw overtime hours, payable overtime hours) and aggregate
enriched records into monthly totals.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO database,
ZERO clock reads.  Imports only kernel helpers and the attendance DTOs.

Invariants enforced
-------------------
* Overtime hours are ``Decimal``, rounded half-up to 2 places, never negative.
* Weekday overtime below the configured threshold earns nothing (no
  partial credit).
* Aggregated status counts sum to the number of records.

Failure modes
-------------
* Missing or inconsistent rules, missing punches and out-before-in
  punches never raise.  They degrade to a status with zero overtime and
  log a warning.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import date, datetime, time
from decimal import Decimal

from hr_engines.tracer import traced_engine
from hr_kernel.db.types import ZERO, round_hours
from hr_kernel.logging_config import get_logger
from hr_modules.attendance.config import AttendanceRuleSet
from hr_modules.attendance.models import (
    NON_WORKING_STATUSES,
    AttendanceStatus,
    AttendanceTotals,
    EnrichedAttendanceRecord,
    MonthlyAttendanceSummary,
    RawAttendancePunch,
)

logger = get_logger("engines.attendance")

STANDARD_HOLIDAY_HOURS = Decimal("9")
HOLIDAY_RATE = Decimal("2")
HOLIDAY_AFTER_HOURS_RATE = Decimal("3")
WEEKDAY_OVERTIME_RATE = Decimal("1.5")

_SECONDS_PER_HOUR = Decimal("3600")


def stored_weekday(day: date) -> int:
    """Weekday number in the stored convention (0 = Sunday ... 6 = Saturday)."""
    return (day.weekday() + 1) % 7


def is_holiday(day: date, rules: AttendanceRuleSet) -> bool:
    """True on a configured weekly holiday or a named public holiday."""
    if stored_weekday(day) in rules.weekly_holidays:
        return True
    return any(h.date == day for h in rules.holidays)


def _seconds_between(day: date, start: time, end: time) -> int:
    return int((datetime.combine(day, end) - datetime.combine(day, start)).total_seconds())


def _hours(seconds: int) -> Decimal:
    return round_hours(Decimal(seconds) / _SECONDS_PER_HOUR)


def holiday_payable_hours(worked_hours: Decimal) -> Decimal:
    """First nine hours at double rate, the rest at triple rate."""
    regular = min(worked_hours, STANDARD_HOLIDAY_HOURS)
    extra = max(worked_hours - STANDARD_HOLIDAY_HOURS, ZERO)
    return regular * HOLIDAY_RATE + extra * HOLIDAY_AFTER_HOURS_RATE


def enrich_attendance_record(
    record: RawAttendancePunch,
    rules: AttendanceRuleSet | None,
) -> EnrichedAttendanceRecord:
    """Derive the final status and overtime of one attendance day.

    Args:
        record: The raw punch as imported.
        rules: The attendance rules in force.  ``None`` or an incomplete
            rule set leaves the record unenriched.

    Returns:
        EnrichedAttendanceRecord.  Never raises for malformed data.
    """
    hint = record.status_hint

    if rules is None or not rules.is_complete:
        logger.warning(
            "attendance_rules_incomplete",
            extra={"employee_id": record.employee_id, "date": record.date},
        )
        return EnrichedAttendanceRecord(punch=record, status=hint or AttendanceStatus.ABSENT)

    holiday = is_holiday(record.date, rules)
    has_worked = (
        hint not in NON_WORKING_STATUSES
        and record.in_time is not None
        and record.out_time is not None
    )

    if not has_worked:
        if holiday and hint not in NON_WORKING_STATUSES:
            status = AttendanceStatus.HOLIDAY
        else:
            status = hint or AttendanceStatus.ABSENT
        return EnrichedAttendanceRecord(punch=record, status=status)

    worked_seconds = _seconds_between(record.date, record.in_time, record.out_time)
    if worked_seconds <= 0:
        logger.warning(
            "attendance_punch_out_before_in",
            extra={
                "employee_id": record.employee_id,
                "date": record.date,
                "in_time": record.in_time,
                "out_time": record.out_time,
            },
        )
        return EnrichedAttendanceRecord(punch=record, status=hint or AttendanceStatus.PRESENT)

    if holiday:
        worked = _hours(worked_seconds)
        return EnrichedAttendanceRecord(
            punch=record,
            status=AttendanceStatus.PRESENT,
            raw_overtime_hours=worked,
            payable_overtime_hours=holiday_payable_hours(worked),
        )

    status = (
        AttendanceStatus.LATE
        if record.in_time > rules.standard_in_time
        else AttendanceStatus.PRESENT
    )

    overtime_seconds = _seconds_between(record.date, rules.standard_out_time, record.out_time)
    if overtime_seconds <= 0 or overtime_seconds < rules.minimum_overtime_minutes * 60:
        return EnrichedAttendanceRecord(punch=record, status=status)

    raw = _hours(overtime_seconds)
    return EnrichedAttendanceRecord(
        punch=record,
        status=status,
        raw_overtime_hours=raw,
        payable_overtime_hours=raw * WEEKDAY_OVERTIME_RATE,
    )


@traced_engine("attendance_enricher", "1.0", fingerprint_fields=("records", "rules"))
def recompute_attendance(
    records: Iterable[RawAttendancePunch],
    rules: AttendanceRuleSet | None,
) -> list[EnrichedAttendanceRecord]:
    """Enrich every raw record again under ``rules``, preserving order.

    This is the entry point callers use after a rule change; previously
    enriched output is never patched in place.
    """
    return [enrich_attendance_record(record, rules) for record in records]


@traced_engine("attendance_aggregator", "1.0")
def calculate_attendance_logic(
    records: Iterable[EnrichedAttendanceRecord],
) -> AttendanceTotals:
    """Count statuses and total the overtime of enriched records."""
    counts: Counter[AttendanceStatus] = Counter()
    raw_total = ZERO
    payable_total = ZERO
    for record in records:
        counts[record.status] += 1
        raw_total += record.raw_overtime_hours
        payable_total += record.payable_overtime_hours

    return AttendanceTotals(
        present=counts[AttendanceStatus.PRESENT],
        late=counts[AttendanceStatus.LATE],
        absent=counts[AttendanceStatus.ABSENT],
        leave=counts[AttendanceStatus.LEAVE],
        holiday=counts[AttendanceStatus.HOLIDAY],
        total_raw_overtime=raw_total,
        total_payable_overtime=payable_total,
    )


def summarize_month(
    employee_id: str,
    year: int,
    month: int,
    records: Iterable[EnrichedAttendanceRecord],
) -> MonthlyAttendanceSummary:
    """Build one employee's monthly summary with records in date order."""
    ordered = tuple(sorted(records, key=lambda r: r.date))
    return MonthlyAttendanceSummary(
        employee_id=employee_id,
        year=year,
        month=month,
        totals=calculate_attendance_logic(ordered),
        records=ordered,
    )
