"""
Tests for the attendance rule set and attendance DTO parsing.

Covers:
- Defaults and the stored dict shape
- Strict validation on the save path
- Permissive parsing of partial rules
- Raw punch parsing from imported dicts
"""

from datetime import date, time
from decimal import Decimal

import pytest

from hr_kernel.exceptions import InvalidAttendanceRulesError
from hr_modules.attendance.config import AttendanceRuleSet
from hr_modules.attendance.models import (
    AttendanceStatus,
    EnrichedAttendanceRecord,
    Holiday,
    RawAttendancePunch,
)

STORED_RULES = {
    "standard_work_hours": {"in_time": "08:30", "out_time": "17:30"},
    "overtime_rules": {"minimum_minutes_after_out_time": 30},
    "weekly_holidays": [0, 6],
    "holidays": [{"date": "2024-01-01", "name": "New Year"}],
}


class TestAttendanceRuleSet:

    def test_defaults(self):
        rules = AttendanceRuleSet.with_defaults()
        assert rules.standard_in_time == time(9, 0)
        assert rules.standard_out_time == time(18, 0)
        assert rules.weekly_holidays == frozenset()
        assert rules.holidays == ()
        assert rules.minimum_overtime_minutes == 0
        assert rules.is_complete

    def test_from_stored_dict(self):
        rules = AttendanceRuleSet.from_dict(STORED_RULES)
        assert rules.standard_in_time == time(8, 30)
        assert rules.standard_out_time == time(17, 30)
        assert rules.weekly_holidays == frozenset({0, 6})
        assert rules.minimum_overtime_minutes == 30
        assert rules.holidays == (Holiday(date(2024, 1, 1), "New Year"),)

    def test_dict_round_trip(self):
        rules = AttendanceRuleSet.from_dict(STORED_RULES)
        assert AttendanceRuleSet.from_dict(rules.to_dict()) == rules

    def test_partial_dict_is_accepted_but_incomplete(self):
        rules = AttendanceRuleSet.from_dict({"weekly_holidays": [0]})
        assert rules.standard_in_time is None
        assert rules.standard_out_time is None
        assert not rules.is_complete

    def test_with_holidays_replaces_list(self):
        rules = AttendanceRuleSet.from_dict(STORED_RULES)
        replaced = rules.with_holidays([Holiday(date(2024, 4, 13), "Songkran")])
        assert [h.name for h in replaced.holidays] == ["Songkran"]
        assert replaced.standard_in_time == rules.standard_in_time


class TestAttendanceRuleValidation:

    def test_valid_rules_pass(self):
        rules = AttendanceRuleSet.from_dict(STORED_RULES)
        assert rules.validate() is rules

    def test_missing_times_rejected(self):
        with pytest.raises(InvalidAttendanceRulesError):
            AttendanceRuleSet(standard_in_time=None).validate()

    def test_out_before_in_rejected(self):
        with pytest.raises(InvalidAttendanceRulesError) as exc_info:
            AttendanceRuleSet(standard_in_time=time(18, 0), standard_out_time=time(9, 0)).validate()
        assert exc_info.value.code == "INVALID_ATTENDANCE_RULES"

    def test_equal_times_rejected(self):
        with pytest.raises(InvalidAttendanceRulesError):
            AttendanceRuleSet(standard_in_time=time(9, 0), standard_out_time=time(9, 0)).validate()

    def test_negative_threshold_rejected(self):
        with pytest.raises(InvalidAttendanceRulesError):
            AttendanceRuleSet(minimum_overtime_minutes=-5).validate()

    def test_weekday_out_of_range_rejected(self):
        with pytest.raises(InvalidAttendanceRulesError):
            AttendanceRuleSet(weekly_holidays=frozenset({7})).validate()


class TestRawAttendancePunch:

    def test_from_imported_dict(self):
        punch = RawAttendancePunch.from_dict({
            "employee_id": "EMP-001",
            "name": "Somchai Dee",
            "date": "2024-03-04",
            "in_time": "09:05",
            "out_time": "18:45:30",
            "status": "",
            "remarks": "gate B",
        })
        assert punch.date == date(2024, 3, 4)
        assert punch.in_time == time(9, 5)
        assert punch.out_time == time(18, 45, 30)
        assert punch.status_hint is None
        assert punch.employee_name == "Somchai Dee"

    def test_blank_times_are_none(self):
        punch = RawAttendancePunch.from_dict({
            "employee_id": 1024,
            "date": "2024/03/04",
            "in_time": "",
            "out_time": None,
            "status": "Leave",
        })
        assert punch.employee_id == "1024"
        assert punch.in_time is None
        assert punch.out_time is None
        assert punch.status_hint == AttendanceStatus.LEAVE

    def test_dict_round_trip(self):
        punch = RawAttendancePunch(
            employee_id="EMP-001", date=date(2024, 3, 4),
            in_time=time(9, 0), out_time=time(18, 0),
        )
        assert RawAttendancePunch.from_dict(punch.to_dict()) == punch

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            RawAttendancePunch.from_dict({"employee_id": "E", "date": "2024-03-04", "status": "Sick"})

    def test_enriched_record_rejects_negative_hours(self):
        punch = RawAttendancePunch(employee_id="EMP-001", date=date(2024, 3, 4))
        with pytest.raises(ValueError):
            EnrichedAttendanceRecord(
                punch=punch, status=AttendanceStatus.PRESENT, raw_overtime_hours=Decimal("-1"),
            )
