"""
Tests for the attendance enricher.

Covers:
- Weekday status (Present / Late) and overtime with threshold
- Weekly and public holiday handling with holiday overtime rates
- Non-working days and pre-classified statuses
- Degraded behaviour on missing or inconsistent rules and bad punches
"""

from datetime import date, time
from decimal import Decimal

import pytest

from hr_engines.attendance import (
    enrich_attendance_record,
    holiday_payable_hours,
    is_holiday,
    recompute_attendance,
    stored_weekday,
)
from hr_modules.attendance.config import AttendanceRuleSet
from hr_modules.attendance.models import AttendanceStatus, Holiday, RawAttendancePunch

MONDAY = date(2024, 3, 4)
SUNDAY = date(2024, 3, 3)
SONGKRAN = date(2024, 4, 15)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _rules(**overrides) -> AttendanceRuleSet:
    values = {
        "standard_in_time": time(9, 0),
        "standard_out_time": time(18, 0),
        "weekly_holidays": frozenset({0}),
        "holidays": (Holiday(SONGKRAN, "Songkran"),),
        "minimum_overtime_minutes": 30,
    }
    values.update(overrides)
    return AttendanceRuleSet(**values)


def _punch(
    day: date = MONDAY,
    in_time: time | None = time(9, 0),
    out_time: time | None = time(18, 0),
    status: AttendanceStatus | None = None,
) -> RawAttendancePunch:
    return RawAttendancePunch(
        employee_id="EMP-001",
        date=day,
        status_hint=status,
        in_time=in_time,
        out_time=out_time,
    )


# ===========================================================================
# Weekdays
# ===========================================================================


class TestWeekdayStatus:

    def test_on_time_is_present(self):
        result = enrich_attendance_record(_punch(), _rules())
        assert result.status == AttendanceStatus.PRESENT
        assert result.raw_overtime_hours == Decimal("0")
        assert result.payable_overtime_hours == Decimal("0")

    def test_after_standard_in_is_late(self):
        result = enrich_attendance_record(_punch(in_time=time(9, 15)), _rules())
        assert result.status == AttendanceStatus.LATE

    def test_one_second_late_is_late(self):
        result = enrich_attendance_record(_punch(in_time=time(9, 0, 1)), _rules())
        assert result.status == AttendanceStatus.LATE

    def test_early_arrival_is_present(self):
        result = enrich_attendance_record(_punch(in_time=time(8, 30)), _rules())
        assert result.status == AttendanceStatus.PRESENT


class TestWeekdayOvertime:

    def test_two_hours_after_out_time(self):
        result = enrich_attendance_record(_punch(out_time=time(20, 0)), _rules())
        assert result.raw_overtime_hours == Decimal("2.00")
        assert result.payable_overtime_hours == Decimal("3.00")

    def test_below_threshold_earns_nothing(self):
        result = enrich_attendance_record(_punch(out_time=time(18, 20)), _rules())
        assert result.raw_overtime_hours == Decimal("0")
        assert result.payable_overtime_hours == Decimal("0")

    def test_exactly_at_threshold_counts(self):
        result = enrich_attendance_record(_punch(out_time=time(18, 30)), _rules())
        assert result.raw_overtime_hours == Decimal("0.50")
        assert result.payable_overtime_hours == Decimal("0.75")

    def test_raw_hours_rounded_to_two_places(self):
        rules = _rules(minimum_overtime_minutes=0)
        result = enrich_attendance_record(_punch(out_time=time(18, 20)), rules)
        assert result.raw_overtime_hours == Decimal("0.33")
        assert result.payable_overtime_hours == Decimal("0.495")

    def test_leaving_early_earns_nothing(self):
        result = enrich_attendance_record(_punch(out_time=time(17, 0)), _rules())
        assert result.raw_overtime_hours == Decimal("0")

    def test_late_and_overtime_together(self):
        result = enrich_attendance_record(
            _punch(in_time=time(10, 0), out_time=time(19, 0)), _rules(),
        )
        assert result.status == AttendanceStatus.LATE
        assert result.raw_overtime_hours == Decimal("1.00")
        assert result.payable_overtime_hours == Decimal("1.50")


# ===========================================================================
# Holidays
# ===========================================================================


class TestHolidays:

    def test_weekday_numbering_starts_on_sunday(self):
        assert stored_weekday(SUNDAY) == 0
        assert stored_weekday(MONDAY) == 1
        assert stored_weekday(date(2024, 3, 9)) == 6

    def test_weekly_and_public_holidays_detected(self):
        rules = _rules()
        assert is_holiday(SUNDAY, rules)
        assert is_holiday(SONGKRAN, rules)
        assert not is_holiday(MONDAY, rules)

    def test_no_punch_on_holiday_is_holiday(self):
        result = enrich_attendance_record(
            _punch(day=SUNDAY, in_time=None, out_time=None), _rules(),
        )
        assert result.status == AttendanceStatus.HOLIDAY
        assert result.payable_overtime_hours == Decimal("0")

    def test_public_holiday_without_punch(self):
        result = enrich_attendance_record(
            _punch(day=SONGKRAN, in_time=None, out_time=None), _rules(),
        )
        assert result.status == AttendanceStatus.HOLIDAY

    def test_leave_on_holiday_stays_leave(self):
        result = enrich_attendance_record(
            _punch(day=SUNDAY, in_time=None, out_time=None, status=AttendanceStatus.LEAVE),
            _rules(),
        )
        assert result.status == AttendanceStatus.LEAVE

    def test_short_holiday_shift_at_double_rate(self):
        result = enrich_attendance_record(
            _punch(day=SUNDAY, in_time=time(10, 0), out_time=time(15, 0)), _rules(),
        )
        assert result.status == AttendanceStatus.PRESENT
        assert result.raw_overtime_hours == Decimal("5.00")
        assert result.payable_overtime_hours == Decimal("10.00")

    def test_long_holiday_shift_uses_triple_rate_after_nine_hours(self):
        result = enrich_attendance_record(
            _punch(day=SUNDAY, in_time=time(9, 0), out_time=time(21, 0)), _rules(),
        )
        assert result.raw_overtime_hours == Decimal("12.00")
        assert result.payable_overtime_hours == Decimal("27.00")

    def test_holiday_work_ignores_threshold_and_lateness(self):
        result = enrich_attendance_record(
            _punch(day=SONGKRAN, in_time=time(13, 0), out_time=time(13, 20)), _rules(),
        )
        assert result.status == AttendanceStatus.PRESENT
        assert result.raw_overtime_hours == Decimal("0.33")

    @pytest.mark.parametrize(
        "worked, payable",
        [
            (Decimal("0"), Decimal("0")),
            (Decimal("9"), Decimal("18")),
            (Decimal("10"), Decimal("21")),
        ],
    )
    def test_holiday_payable_hours(self, worked, payable):
        assert holiday_payable_hours(worked) == payable


# ===========================================================================
# Non-working days
# ===========================================================================


class TestNonWorkingDays:

    def test_weekday_without_punch_is_absent(self):
        result = enrich_attendance_record(_punch(in_time=None, out_time=None), _rules())
        assert result.status == AttendanceStatus.ABSENT

    def test_missing_out_punch_is_not_worked(self):
        result = enrich_attendance_record(_punch(out_time=None), _rules())
        assert result.status == AttendanceStatus.ABSENT
        assert result.raw_overtime_hours == Decimal("0")

    def test_leave_hint_preserved(self):
        result = enrich_attendance_record(
            _punch(in_time=None, out_time=None, status=AttendanceStatus.LEAVE), _rules(),
        )
        assert result.status == AttendanceStatus.LEAVE

    def test_absent_hint_wins_over_punches(self):
        result = enrich_attendance_record(
            _punch(out_time=time(22, 0), status=AttendanceStatus.ABSENT), _rules(),
        )
        assert result.status == AttendanceStatus.ABSENT
        assert result.raw_overtime_hours == Decimal("0")


# ===========================================================================
# Degraded input
# ===========================================================================


class TestDegradedInput:

    def test_no_rules_keeps_hint(self):
        result = enrich_attendance_record(_punch(status=AttendanceStatus.LEAVE), None)
        assert result.status == AttendanceStatus.LEAVE

    def test_no_rules_defaults_to_absent(self):
        result = enrich_attendance_record(_punch(out_time=time(23, 0)), None)
        assert result.status == AttendanceStatus.ABSENT
        assert result.payable_overtime_hours == Decimal("0")

    def test_rules_missing_out_time(self):
        result = enrich_attendance_record(_punch(), _rules(standard_out_time=None))
        assert result.status == AttendanceStatus.ABSENT

    def test_out_time_before_in_time_in_rules(self):
        rules = _rules(standard_in_time=time(18, 0), standard_out_time=time(9, 0))
        result = enrich_attendance_record(_punch(), rules)
        assert result.status == AttendanceStatus.ABSENT

    def test_incomplete_rules_logged(self, captured_logs):
        enrich_attendance_record(_punch(), None)
        assert any(r["message"] == "attendance_rules_incomplete" for r in captured_logs())

    def test_out_punch_before_in_punch(self, captured_logs):
        result = enrich_attendance_record(
            _punch(in_time=time(18, 0), out_time=time(9, 0)), _rules(),
        )
        assert result.status == AttendanceStatus.PRESENT
        assert result.raw_overtime_hours == Decimal("0")
        assert result.payable_overtime_hours == Decimal("0")
        assert any(r["message"] == "attendance_punch_out_before_in" for r in captured_logs())

    def test_out_punch_before_in_punch_keeps_late_hint(self):
        result = enrich_attendance_record(
            _punch(in_time=time(18, 0), out_time=time(9, 0), status=AttendanceStatus.LATE),
            _rules(),
        )
        assert result.status == AttendanceStatus.LATE


# ===========================================================================
# Recompute
# ===========================================================================


class TestRecompute:

    def test_preserves_order(self):
        punches = [_punch(day=date(2024, 3, d)) for d in (6, 4, 5)]
        results = recompute_attendance(punches, _rules())
        assert [r.date for r in results] == [date(2024, 3, 6), MONDAY, date(2024, 3, 5)]

    def test_rule_change_changes_result(self):
        punches = [_punch(out_time=time(20, 0))]
        before = recompute_attendance(punches, _rules())
        after = recompute_attendance(punches, _rules(standard_out_time=time(19, 0)))
        assert before[0].raw_overtime_hours == Decimal("2.00")
        assert after[0].raw_overtime_hours == Decimal("1.00")

    def test_idempotent(self):
        punches = [_punch(), _punch(day=SUNDAY, in_time=None, out_time=None)]
        assert recompute_attendance(punches, _rules()) == recompute_attendance(punches, _rules())
