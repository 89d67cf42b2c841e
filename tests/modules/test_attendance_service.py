"""
Tests for AttendanceService.

Covers:
- Rules: defaults, validation before save, save-then-read
- Holiday calendar replacement per year
- Raw punch replacement per calendar month, with out-of-month and
  duplicate punches reported as ignored
- Processed attendance recomputed under the rules in force
- STORE_FAILED results when the store raises
"""

from datetime import date, time
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from hr_kernel.exceptions import InvalidAttendanceRulesError
from hr_modules.attendance.config import AttendanceRuleSet
from hr_modules.attendance.models import AttendanceStatus, Holiday, RawAttendancePunch
from hr_modules.attendance.service import AttendanceSaveStatus, AttendanceService
from hr_modules.attendance.stores import SqlAlchemyRawAttendanceStore


def _punch(employee_id: str, day: date, in_time: str | None = "09:00",
           out_time: str | None = "18:00", status: AttendanceStatus | None = None):
    return RawAttendancePunch(
        employee_id=employee_id,
        date=day,
        status_hint=status,
        in_time=time.fromisoformat(in_time) if in_time else None,
        out_time=time.fromisoformat(out_time) if out_time else None,
    )


class _FailingPunchStore:
    def get_raw_attendance_data(self, year, month):
        return []

    def save_attendance_data(self, year, month, punches, actor_id):
        raise SQLAlchemyError("boom")


class TestAttendanceRules:

    def test_defaults_when_nothing_saved(self, attendance_service):
        rules = attendance_service.get_rules_for_year(2024)
        assert rules.standard_in_time == time(9, 0)
        assert rules.standard_out_time == time(18, 0)
        assert rules.weekly_holidays == frozenset()
        assert rules.holidays == ()

    def test_invalid_rules_raise_and_store_nothing(self, attendance_service, test_actor_id):
        rules = AttendanceRuleSet(standard_in_time=time(18, 0), standard_out_time=time(9, 0))
        with pytest.raises(InvalidAttendanceRulesError):
            attendance_service.save_attendance_rules(rules, test_actor_id)
        assert attendance_service.get_rules_for_year(2024).standard_in_time == time(9, 0)

    def test_save_then_read(self, attendance_service, test_actor_id):
        rules = AttendanceRuleSet(
            standard_in_time=time(8, 0),
            standard_out_time=time(17, 0),
            weekly_holidays=frozenset({0}),
            minimum_overtime_minutes=30,
        )
        result = attendance_service.save_attendance_rules(rules, test_actor_id)
        assert result.is_success

        loaded = attendance_service.get_rules_for_year(2024)
        assert loaded == rules

    def test_second_save_overwrites(self, attendance_service, test_actor_id):
        attendance_service.save_attendance_rules(
            AttendanceRuleSet(weekly_holidays=frozenset({0})), test_actor_id,
        )
        attendance_service.save_attendance_rules(
            AttendanceRuleSet(weekly_holidays=frozenset({6})), test_actor_id,
        )
        assert attendance_service.get_rules_for_year(2024).weekly_holidays == frozenset({6})


class TestHolidays:

    def test_holidays_are_scoped_to_year(self, attendance_service, test_actor_id):
        result = attendance_service.save_holidays(
            2024,
            [
                Holiday(date(2024, 4, 13), "Songkran"),
                Holiday(date(2025, 1, 1), "New Year"),
            ],
            test_actor_id,
        )
        assert result.is_success
        assert result.count == 1
        assert [h.name for h in attendance_service.get_rules_for_year(2024).holidays] == ["Songkran"]
        assert attendance_service.get_rules_for_year(2025).holidays == ()

    def test_save_replaces_year(self, attendance_service, test_actor_id):
        attendance_service.save_holidays(2024, [Holiday(date(2024, 4, 13), "Songkran")], test_actor_id)
        attendance_service.save_holidays(2024, [Holiday(date(2024, 5, 1), "Labour Day")], test_actor_id)
        holidays = attendance_service.get_rules_for_year(2024).holidays
        assert [h.date for h in holidays] == [date(2024, 5, 1)]


class TestAttendanceData:

    def test_month_is_replaced(self, attendance_service, test_actor_id):
        attendance_service.save_attendance_data(
            2024, 3, [_punch("EMP-001", date(2024, 3, 4)), _punch("EMP-001", date(2024, 3, 5))],
            test_actor_id,
        )
        attendance_service.save_attendance_data(
            2024, 3, [_punch("EMP-002", date(2024, 3, 6))], test_actor_id,
        )
        summaries = attendance_service.get_processed_attendance(2024, 3)
        assert list(summaries) == ["EMP-002"]
        assert summaries["EMP-002"].totals.present == 1

    def test_out_of_month_punches_ignored(self, attendance_service, test_actor_id):
        result = attendance_service.save_attendance_data(
            2024, 3, [_punch("EMP-001", date(2024, 3, 4)), _punch("EMP-001", date(2024, 4, 1))],
            test_actor_id,
        )
        assert result.count == 1
        assert result.ignored == 1
        assert attendance_service.get_processed_attendance(2024, 4) == {}

    def test_cutoff_spanning_upload_saved_per_month(self, attendance_service, test_actor_id):
        upload = [_punch("EMP-001", date(2024, 2, 26)), _punch("EMP-001", date(2024, 3, 4))]
        february = attendance_service.save_attendance_data(2024, 2, upload, test_actor_id)
        march = attendance_service.save_attendance_data(2024, 3, upload, test_actor_id)
        assert (february.count, february.ignored) == (1, 1)
        assert (march.count, march.ignored) == (1, 1)
        assert attendance_service.get_processed_attendance(2024, 2)["EMP-001"].totals.present == 1
        assert attendance_service.get_processed_attendance(2024, 3)["EMP-001"].totals.present == 1

    def test_duplicate_punches_keep_the_last(
        self, session, attendance_service, test_actor_id, captured_logs,
    ):
        result = attendance_service.save_attendance_data(
            2024, 3,
            [
                _punch("EMP-001", date(2024, 3, 4), out_time="18:00"),
                _punch("EMP-002", date(2024, 3, 4)),
                _punch("EMP-001", date(2024, 3, 4), out_time="20:00"),
            ],
            test_actor_id,
        )
        assert result.is_success
        assert (result.count, result.ignored) == (2, 1)
        stored = SqlAlchemyRawAttendanceStore(session).get_raw_attendance_data(2024, 3)
        assert sorted((p.employee_id, p.out_time) for p in stored) == [
            ("EMP-001", time(20, 0)),
            ("EMP-002", time(18, 0)),
        ]
        assert any(r["message"] == "attendance_duplicate_punches_merged" for r in captured_logs())

    def test_directory_employee_without_punches_gets_empty_summary(
        self, attendance_service, create_employee, test_actor_id,
    ):
        create_employee("EMP-001")
        create_employee("EMP-002", name="Malee Suk")
        attendance_service.save_attendance_data(
            2024, 3, [_punch("EMP-001", date(2024, 3, 4))], test_actor_id,
        )
        summaries = attendance_service.get_processed_attendance(2024, 3)
        assert sorted(summaries) == ["EMP-001", "EMP-002"]
        assert summaries["EMP-002"].totals.day_count == 0
        assert summaries["EMP-002"].records == ()

    def test_weekly_holiday_and_statuses(self, attendance_service, test_actor_id):
        attendance_service.save_attendance_rules(
            AttendanceRuleSet(weekly_holidays=frozenset({0})), test_actor_id,
        )
        attendance_service.save_attendance_data(
            2024, 3,
            [
                _punch("EMP-001", date(2024, 3, 3), None, None),
                _punch("EMP-001", date(2024, 3, 4), "09:20", "18:00"),
                _punch("EMP-001", date(2024, 3, 5), None, None, AttendanceStatus.LEAVE),
                _punch("EMP-001", date(2024, 3, 6), None, None),
            ],
            test_actor_id,
        )
        summary = attendance_service.get_employee_attendance("EMP-001", 2024, 3)
        assert [r.status for r in summary.records] == [
            AttendanceStatus.HOLIDAY,
            AttendanceStatus.LATE,
            AttendanceStatus.LEAVE,
            AttendanceStatus.ABSENT,
        ]
        assert summary.totals.total_present_days == 1

    def test_rule_change_recomputes_overtime(self, attendance_service, test_actor_id):
        attendance_service.save_attendance_data(
            2024, 3, [_punch("EMP-001", date(2024, 3, 4), "09:00", "20:00")], test_actor_id,
        )
        before = attendance_service.get_employee_attendance("EMP-001", 2024, 3)
        assert before.totals.total_raw_overtime == Decimal("2.00")
        assert before.totals.total_payable_overtime == Decimal("3.00")

        attendance_service.save_attendance_rules(
            AttendanceRuleSet(standard_out_time=time(19, 0)), test_actor_id,
        )
        after = attendance_service.get_employee_attendance("EMP-001", 2024, 3)
        assert after.totals.total_raw_overtime == Decimal("1.00")

    def test_unknown_employee_gets_empty_summary(self, attendance_service):
        summary = attendance_service.get_employee_attendance("EMP-404", 2024, 3)
        assert summary.employee_id == "EMP-404"
        assert summary.totals.day_count == 0

    def test_store_failure_is_reported(self, session, test_actor_id):
        service = AttendanceService(session, attendance_store=_FailingPunchStore())
        result = service.save_attendance_data(
            2024, 3, [_punch("EMP-001", date(2024, 3, 4))], test_actor_id,
        )
        assert result.status is AttendanceSaveStatus.STORE_FAILED
        assert not result.is_success
        assert "boom" in result.message

    def test_processed_attendance_is_logged(self, attendance_service, captured_logs):
        attendance_service.get_processed_attendance(2024, 3)
        assert any(r["message"] == "attendance_processed" for r in captured_logs())
