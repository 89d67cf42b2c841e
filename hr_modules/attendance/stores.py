"""
Attendance stores (``hr_modules.attendance.stores``).

Protocols describing what the attendance service needs from persistence,
plus SQLAlchemy implementations.  Stores never commit; the calling
service owns the transaction boundary.
"""

from __future__ import annotations

import calendar
from collections.abc import Sequence
from datetime import date
from typing import Protocol
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from hr_kernel.logging_config import get_logger
from hr_modules.attendance.config import AttendanceRuleSet
from hr_modules.attendance.models import Holiday, RawAttendancePunch
from hr_modules.attendance.orm import (
    DEFAULT_RULE_KEY,
    AttendancePunchModel,
    AttendanceRulesModel,
    HolidayModel,
)

logger = get_logger("modules.attendance.stores")


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


class RuleSetStore(Protocol):
    def get_attendance_rules(self) -> AttendanceRuleSet: ...

    def save_attendance_rules(self, rules: AttendanceRuleSet, actor_id: UUID) -> None: ...

    def get_holidays(self, year: int) -> list[Holiday]: ...

    def save_holidays(self, year: int, holidays: Sequence[Holiday], actor_id: UUID) -> int: ...


class RawAttendanceStore(Protocol):
    def get_raw_attendance_data(self, year: int, month: int) -> list[RawAttendancePunch]: ...

    def save_attendance_data(
        self,
        year: int,
        month: int,
        punches: Sequence[RawAttendancePunch],
        actor_id: UUID,
    ) -> int: ...


class SqlAlchemyRuleSetStore:
    """Rule set and holiday calendar backed by the attendance tables."""

    def __init__(self, session: Session):
        self._session = session

    def _rules_row(self) -> AttendanceRulesModel | None:
        return self._session.scalars(
            select(AttendanceRulesModel).where(AttendanceRulesModel.rule_key == DEFAULT_RULE_KEY)
        ).one_or_none()

    def get_attendance_rules(self) -> AttendanceRuleSet:
        """Saved rules, or the defaults when nothing has been saved yet."""
        row = self._rules_row()
        if row is None:
            return AttendanceRuleSet.with_defaults()
        return row.to_dto()

    def save_attendance_rules(self, rules: AttendanceRuleSet, actor_id: UUID) -> None:
        row = self._rules_row()
        if row is None:
            self._session.add(AttendanceRulesModel.from_dto(rules, created_by_id=actor_id))
        else:
            row.apply_dto(rules, updated_by_id=actor_id)
        self._session.flush()

    def get_holidays(self, year: int) -> list[Holiday]:
        start, end = date(year, 1, 1), date(year, 12, 31)
        rows = self._session.scalars(
            select(HolidayModel)
            .where(HolidayModel.holiday_date.between(start, end))
            .order_by(HolidayModel.holiday_date)
        )
        return [row.to_dto() for row in rows]

    def save_holidays(self, year: int, holidays: Sequence[Holiday], actor_id: UUID) -> int:
        """Replace the holiday calendar of ``year``; dates outside the year are ignored.

        Returns the number of holidays stored.
        """
        start, end = date(year, 1, 1), date(year, 12, 31)
        self._session.execute(
            delete(HolidayModel).where(HolidayModel.holiday_date.between(start, end))
        )
        by_date: dict[date, Holiday] = {}
        for holiday in holidays:
            if start <= holiday.date <= end:
                by_date[holiday.date] = holiday
            else:
                logger.warning(
                    "holiday_outside_year_ignored",
                    extra={"year": year, "date": holiday.date, "holiday_name": holiday.name},
                )
        self._session.add_all(
            HolidayModel.from_dto(h, created_by_id=actor_id) for h in by_date.values()
        )
        self._session.flush()
        return len(by_date)


class SqlAlchemyRawAttendanceStore:
    """Raw punches backed by ``attendance_punches``."""

    def __init__(self, session: Session):
        self._session = session

    def get_raw_attendance_data(self, year: int, month: int) -> list[RawAttendancePunch]:
        start, end = month_bounds(year, month)
        rows = self._session.scalars(
            select(AttendancePunchModel)
            .where(AttendancePunchModel.work_date.between(start, end))
            .order_by(AttendancePunchModel.employee_id, AttendancePunchModel.work_date)
        )
        return [row.to_dto() for row in rows]

    def save_attendance_data(
        self,
        year: int,
        month: int,
        punches: Sequence[RawAttendancePunch],
        actor_id: UUID,
    ) -> int:
        """Replace the punches of a calendar month; returns the number stored.

        Punches dated outside the month are ignored.  When an employee has
        more than one punch for a date the later one in ``punches`` wins.
        """
        start, end = month_bounds(year, month)
        self._session.execute(
            delete(AttendancePunchModel).where(AttendancePunchModel.work_date.between(start, end))
        )
        in_month = [p for p in punches if start <= p.date <= end]
        if len(in_month) != len(punches):
            logger.warning(
                "attendance_punches_outside_month_ignored",
                extra={"year": year, "month": month, "ignored": len(punches) - len(in_month)},
            )
        by_key: dict[tuple[str, date], RawAttendancePunch] = {}
        for punch in in_month:
            by_key[(punch.employee_id, punch.date)] = punch
        if len(by_key) != len(in_month):
            logger.warning(
                "attendance_duplicate_punches_merged",
                extra={"year": year, "month": month, "merged": len(in_month) - len(by_key)},
            )
        self._session.add_all(
            AttendancePunchModel.from_dto(p, created_by_id=actor_id) for p in by_key.values()
        )
        self._session.flush()
        return len(by_key)
