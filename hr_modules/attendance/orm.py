"""
Attendance ORM Persistence Models (``hr_modules.attendance.orm``).

Responsibility:
    SQLAlchemy ORM models that persist raw attendance punches, the public
    holiday calendar and the saved attendance rules.  Each ORM class mirrors
    a DTO from ``hr_modules.attendance`` and provides ``to_dto()`` /
    ``from_dto()`` conversion.

Architecture position:
    **Modules layer** -- persistence companions to the pure DTO models.
    Inherits from ``TrackedBase`` which provides id (UUID PK), created_at,
    updated_at, created_by_id (NOT NULL UUID), updated_by_id.

Invariants enforced:
    - Only raw punches are stored.  Enriched status and overtime are derived
      on read so that a rule change never leaves stale figures behind.
    - Holiday dates are unique.
    - The rule set is a single row keyed by ``rule_key``.
"""

from datetime import date, time
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Date, Index, String, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hr_kernel.db.base import TrackedBase

DEFAULT_RULE_KEY = "default"


# ---------------------------------------------------------------------------
# AttendancePunchModel
# ---------------------------------------------------------------------------

class AttendancePunchModel(TrackedBase):
    """
    ORM model for ``RawAttendancePunch`` -- one imported attendance day.

    Guarantees:
        - ``status_hint`` stores the AttendanceStatus .value or NULL.
        - In/out times are NULL when there was no punch.
        - At most one row per employee and date.
    """

    __tablename__ = "attendance_punches"

    employee_id: Mapped[str] = mapped_column(String(64), nullable=False)
    employee_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    status_hint: Mapped[str | None] = mapped_column(String(20), nullable=True)
    in_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    out_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    remarks: Mapped[str] = mapped_column(String(4000), nullable=False, default="")

    __table_args__ = (
        Index("idx_attendance_punch_date", "work_date"),
        UniqueConstraint("employee_id", "work_date", name="uq_attendance_punch_employee_date"),
    )

    def to_dto(self):
        from hr_modules.attendance.models import AttendanceStatus, RawAttendancePunch
        return RawAttendancePunch(
            employee_id=self.employee_id,
            date=self.work_date,
            status_hint=AttendanceStatus(self.status_hint) if self.status_hint else None,
            in_time=self.in_time,
            out_time=self.out_time,
            remarks=self.remarks,
            employee_name=self.employee_name,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "AttendancePunchModel":
        return cls(
            employee_id=dto.employee_id,
            employee_name=dto.employee_name,
            work_date=dto.date,
            status_hint=dto.status_hint.value if dto.status_hint else None,
            in_time=dto.in_time,
            out_time=dto.out_time,
            remarks=dto.remarks,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<AttendancePunchModel {self.employee_id} {self.work_date}>"


# ---------------------------------------------------------------------------
# HolidayModel
# ---------------------------------------------------------------------------

class HolidayModel(TrackedBase):
    """ORM model for ``Holiday`` -- a named public holiday."""

    __tablename__ = "attendance_holidays"

    holiday_date: Mapped[date] = mapped_column(Date, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    holiday_type: Mapped[str] = mapped_column(String(50), nullable=False, default="Public")

    __table_args__ = (
        UniqueConstraint("holiday_date", name="uq_attendance_holiday_date"),
    )

    def to_dto(self):
        from hr_modules.attendance.models import Holiday
        return Holiday(date=self.holiday_date, name=self.name, type=self.holiday_type)

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "HolidayModel":
        return cls(
            holiday_date=dto.date,
            name=dto.name,
            holiday_type=dto.type,
            created_by_id=created_by_id,
        )


# ---------------------------------------------------------------------------
# AttendanceRulesModel
# ---------------------------------------------------------------------------

class AttendanceRulesModel(TrackedBase):
    """
    ORM model for ``AttendanceRuleSet`` (without the holiday calendar,
    which lives in ``attendance_holidays``).

    Guarantees:
        - Times are stored as ``HH:MM`` strings, NULL when unset.
        - ``weekly_holidays`` is a JSON list of weekday numbers (0 = Sunday).
    """

    __tablename__ = "attendance_rules"

    rule_key: Mapped[str] = mapped_column(String(50), nullable=False, default=DEFAULT_RULE_KEY)
    standard_in_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    standard_out_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    weekly_holidays: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    minimum_overtime_minutes: Mapped[int] = mapped_column(nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("rule_key", name="uq_attendance_rules_key"),
    )

    def to_dto(self):
        from hr_modules.attendance.config import AttendanceRuleSet
        return AttendanceRuleSet.from_dict(
            {
                "standard_work_hours": {
                    "in_time": self.standard_in_time,
                    "out_time": self.standard_out_time,
                },
                "overtime_rules": {
                    "minimum_minutes_after_out_time": self.minimum_overtime_minutes,
                },
                "weekly_holidays": list(self.weekly_holidays or ()),
            }
        )

    def apply_dto(self, dto, updated_by_id: UUID) -> None:
        """Overwrite the stored rules in place."""
        data = dto.to_dict()
        self.standard_in_time = data["standard_work_hours"]["in_time"]
        self.standard_out_time = data["standard_work_hours"]["out_time"]
        self.weekly_holidays = data["weekly_holidays"]
        self.minimum_overtime_minutes = dto.minimum_overtime_minutes
        self.updated_by_id = updated_by_id

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "AttendanceRulesModel":
        model = cls(rule_key=DEFAULT_RULE_KEY, created_by_id=created_by_id)
        model.apply_dto(dto, updated_by_id=None)
        return model
