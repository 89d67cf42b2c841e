"""
Attendance Module Service (``hr_modules.attendance.service``).

Responsibility
--------------
Orchestrates attendance operations -- saving rules, holiday calendars and
raw punches, and producing processed (enriched and aggregated) monthly
attendance -- by delegating pure computation to ``hr_engines.attendance``
and persistence to the attendance stores.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``AttendanceService`` is the sole public
entry point for attendance operations.

Invariants enforced
-------------------
* Each write method owns the transaction boundary (``commit`` on
  success, ``rollback`` on failure).
* Rules are validated before they are stored; processed attendance is
  always recomputed from raw punches under the rules in force.

Failure modes
-------------
* Invalid rules -> ``InvalidAttendanceRulesError`` before any write.
* ``SQLAlchemyError`` during a write -> ``AttendanceSaveResult`` with
  status ``STORE_FAILED``; session rolled back.

Usage::

    service = AttendanceService(session)
    service.save_attendance_rules(rules, actor_id=actor_id)
    summaries = service.get_processed_attendance(2024, 3)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import Enum
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hr_engines.attendance import recompute_attendance, summarize_month
from hr_kernel.logging_config import LogContext, get_logger
from hr_modules.attendance.config import AttendanceRuleSet
from hr_modules.attendance.models import (
    EnrichedAttendanceRecord,
    Holiday,
    MonthlyAttendanceSummary,
    RawAttendancePunch,
)
from hr_modules.attendance.stores import (
    RawAttendanceStore,
    RuleSetStore,
    SqlAlchemyRawAttendanceStore,
    SqlAlchemyRuleSetStore,
)
from hr_modules.payroll.stores import EmployeeDirectory, SqlAlchemyEmployeeDirectory

logger = get_logger("modules.attendance.service")


class AttendanceSaveStatus(str, Enum):
    SAVED = "saved"
    STORE_FAILED = "store_failed"


@dataclass(frozen=True)
class AttendanceSaveResult:
    """Outcome of an attendance write."""

    status: AttendanceSaveStatus
    count: int = 0
    message: str | None = None
    # Submitted rows not stored (out of month or superseded duplicates)
    ignored: int = 0

    @property
    def is_success(self) -> bool:
        return self.status is AttendanceSaveStatus.SAVED


class AttendanceService:
    """
    Attendance operations over the rule, holiday and punch stores.

    Contract
    --------
    * Write methods return ``AttendanceSaveResult``; callers inspect
      ``result.is_success``.
    * Read methods never write and never commit.
    """

    def __init__(
        self,
        session: Session,
        rule_store: RuleSetStore | None = None,
        attendance_store: RawAttendanceStore | None = None,
        employee_directory: EmployeeDirectory | None = None,
    ):
        self._session = session
        self._rules = rule_store or SqlAlchemyRuleSetStore(session)
        self._punches = attendance_store or SqlAlchemyRawAttendanceStore(session)
        self._employees = employee_directory or SqlAlchemyEmployeeDirectory(session)

    def _commit(self, operation: str, count: int = 0) -> AttendanceSaveResult:
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error(f"{operation}_failed", exc_info=True)
            return AttendanceSaveResult(
                status=AttendanceSaveStatus.STORE_FAILED, message=str(exc),
            )
        return AttendanceSaveResult(status=AttendanceSaveStatus.SAVED, count=count)

    # =========================================================================
    # Rules and holidays
    # =========================================================================

    def get_rules_for_year(self, year: int) -> AttendanceRuleSet:
        """Saved rules joined with the public holidays of ``year``."""
        return self._rules.get_attendance_rules().with_holidays(self._rules.get_holidays(year))

    def save_attendance_rules(
        self,
        rules: AttendanceRuleSet,
        actor_id: UUID,
    ) -> AttendanceSaveResult:
        """
        Validate and store the attendance rules.

        Processed attendance picks up the new rules on the next read;
        stored payroll records are not recalculated.

        Raises:
            InvalidAttendanceRulesError: If the rules are incomplete.
        """
        rules.validate()
        with LogContext.bind(actor_id=str(actor_id)):
            try:
                self._rules.save_attendance_rules(rules, actor_id)
            except SQLAlchemyError as exc:
                self._session.rollback()
                logger.error("attendance_rules_save_failed", exc_info=True)
                return AttendanceSaveResult(
                    status=AttendanceSaveStatus.STORE_FAILED, message=str(exc),
                )
            result = self._commit("attendance_rules_save", count=1)
            if result.is_success:
                logger.info(
                    "attendance_rules_saved",
                    extra={
                        "standard_in_time": rules.standard_in_time,
                        "standard_out_time": rules.standard_out_time,
                        "weekly_holidays": sorted(rules.weekly_holidays),
                        "minimum_overtime_minutes": rules.minimum_overtime_minutes,
                    },
                )
            return result

    def save_holidays(
        self,
        year: int,
        holidays: Sequence[Holiday],
        actor_id: UUID,
    ) -> AttendanceSaveResult:
        """Replace the public holiday calendar of ``year``."""
        with LogContext.bind(actor_id=str(actor_id)):
            try:
                stored = self._rules.save_holidays(year, holidays, actor_id)
            except SQLAlchemyError as exc:
                self._session.rollback()
                logger.error("holidays_save_failed", exc_info=True)
                return AttendanceSaveResult(
                    status=AttendanceSaveStatus.STORE_FAILED, message=str(exc),
                )
            result = self._commit("holidays_save", count=stored)
            if result.is_success:
                logger.info("holidays_saved", extra={"year": year, "count": stored})
            return result

    # =========================================================================
    # Punches and processed attendance
    # =========================================================================

    def save_attendance_data(
        self,
        year: int,
        month: int,
        punches: Sequence[RawAttendancePunch],
        actor_id: UUID,
    ) -> AttendanceSaveResult:
        """Replace the raw punches of a calendar month.

        Punches are keyed by calendar month, not payroll period: an upload
        covering the 21st to the 20th must be saved once for each of the
        two months it touches.  Punches dated outside ``year``/``month`` and
        all but the last punch per employee and date are not stored; the
        result reports them in ``ignored``.
        """
        with LogContext.bind(actor_id=str(actor_id), period=f"{year}-{month:02d}"):
            try:
                stored = self._punches.save_attendance_data(year, month, punches, actor_id)
            except SQLAlchemyError as exc:
                self._session.rollback()
                logger.error("attendance_data_save_failed", exc_info=True)
                return AttendanceSaveResult(
                    status=AttendanceSaveStatus.STORE_FAILED, message=str(exc),
                )
            result = self._commit("attendance_data_save", count=stored)
            if result.is_success:
                result = replace(result, ignored=len(punches) - stored)
                logger.info(
                    "attendance_data_saved",
                    extra={"punch_count": stored, "ignored_count": result.ignored},
                )
            return result

    def get_processed_attendance(
        self,
        year: int,
        month: int,
    ) -> dict[str, MonthlyAttendanceSummary]:
        """
        Enrich and aggregate a month's punches under the rules in force.

        Every directory employee gets a summary (empty when there are no
        punches), as does any employee id that only appears in the punches.
        """
        rules = self.get_rules_for_year(year)
        punches = self._punches.get_raw_attendance_data(year, month)
        enriched = recompute_attendance(punches, rules)

        by_employee: dict[str, list[EnrichedAttendanceRecord]] = {}
        for employee in self._employees.get_employees():
            by_employee.setdefault(employee.id, [])
        for record in enriched:
            by_employee.setdefault(record.employee_id, []).append(record)

        summaries = {
            employee_id: summarize_month(employee_id, year, month, records)
            for employee_id, records in sorted(by_employee.items())
        }
        logger.info(
            "attendance_processed",
            extra={
                "period": f"{year}-{month:02d}",
                "employee_count": len(summaries),
                "punch_count": len(punches),
            },
        )
        return summaries

    def get_employee_attendance(
        self,
        employee_id: str,
        year: int,
        month: int,
    ) -> MonthlyAttendanceSummary:
        """Processed attendance of a single employee."""
        summary = self.get_processed_attendance(year, month).get(employee_id)
        if summary is None:
            return summarize_month(employee_id, year, month, ())
        return summary
