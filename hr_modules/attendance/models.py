"""
Attendance Domain Models (``hr_modules.attendance.models``).

Responsibility
--------------
Frozen dataclass value objects for daily attendance: raw punches as
imported, enriched records with a final status and overtime, public
holidays, and the per-employee monthly summary.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by the
attendance engines and by ``AttendanceService``.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* Overtime hours are ``Decimal`` and never negative.
* ``AttendanceTotals``: the five status counts sum to the record count.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Any

from hr_kernel.db.types import ZERO, to_decimal
from hr_kernel.logging_config import get_logger

logger = get_logger("modules.attendance.models")


class AttendanceStatus(str, Enum):
    """Final (or pre-classified) status of one attendance day."""

    PRESENT = "Present"
    LATE = "Late"
    ABSENT = "Absent"
    LEAVE = "Leave"
    HOLIDAY = "Holiday"


NON_WORKING_STATUSES = frozenset({AttendanceStatus.ABSENT, AttendanceStatus.LEAVE})


def parse_time(value: Any) -> time | None:
    """Parse ``HH:MM`` / ``HH:MM:SS`` strings; blank or missing values are ``None``."""
    if value is None or isinstance(value, time):
        return value
    text = str(value).strip()
    if not text:
        return None
    return time.fromisoformat(text)


def parse_date(value: Any) -> date:
    """Parse an ISO date (``2024-03-05`` or ``2024/03/05``)."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip().replace("/", "-"))


def parse_status(value: Any) -> AttendanceStatus | None:
    if value is None or isinstance(value, AttendanceStatus):
        return value
    text = str(value).strip()
    if not text:
        return None
    return AttendanceStatus(text)


@dataclass(frozen=True)
class Holiday:
    """A named public holiday."""

    date: date
    name: str
    type: str = "Public"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Holiday:
        return cls(
            date=parse_date(data["date"]),
            name=str(data.get("name", "")),
            type=str(data.get("type") or "Public"),
        )

    def to_dict(self) -> dict[str, str]:
        return {"date": self.date.isoformat(), "name": self.name, "type": self.type}


@dataclass(frozen=True)
class RawAttendancePunch:
    """
    One imported attendance day for one employee.

    ``status_hint`` is set when the import already classified the day
    (typically Absent or Leave).  Times are ``None`` when nobody punched.
    """

    employee_id: str
    date: date
    status_hint: AttendanceStatus | None = None
    in_time: time | None = None
    out_time: time | None = None
    remarks: str = ""
    employee_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawAttendancePunch:
        """Build a punch from the stored/imported dict shape."""
        return cls(
            employee_id=str(data["employee_id"]),
            date=parse_date(data["date"]),
            status_hint=parse_status(data.get("status")),
            in_time=parse_time(data.get("in_time")),
            out_time=parse_time(data.get("out_time")),
            remarks=str(data.get("remarks") or ""),
            employee_name=str(data.get("name") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "name": self.employee_name,
            "date": self.date.isoformat(),
            "status": self.status_hint.value if self.status_hint else None,
            "in_time": self.in_time.strftime("%H:%M:%S") if self.in_time else None,
            "out_time": self.out_time.strftime("%H:%M:%S") if self.out_time else None,
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class EnrichedAttendanceRecord:
    """
    A raw punch plus its derived status and overtime.

    Derived data only: recomputed whenever the rule set changes, never
    treated as the authoritative copy.
    """

    punch: RawAttendancePunch
    status: AttendanceStatus
    raw_overtime_hours: Decimal = ZERO
    payable_overtime_hours: Decimal = ZERO

    def __post_init__(self):
        if self.raw_overtime_hours < 0 or self.payable_overtime_hours < 0:
            raise ValueError("overtime hours cannot be negative")

    @property
    def employee_id(self) -> str:
        return self.punch.employee_id

    @property
    def date(self) -> date:
        return self.punch.date

    def to_dict(self) -> dict[str, Any]:
        data = self.punch.to_dict()
        data.update(
            status=self.status.value,
            raw_overtime_hours=str(self.raw_overtime_hours),
            payable_overtime_hours=str(self.payable_overtime_hours),
        )
        return data


@dataclass(frozen=True)
class AttendanceTotals:
    """Status counts and overtime totals for a set of enriched records."""

    present: int = 0
    late: int = 0
    absent: int = 0
    leave: int = 0
    holiday: int = 0
    total_raw_overtime: Decimal = ZERO
    total_payable_overtime: Decimal = ZERO

    @property
    def total_present_days(self) -> int:
        """Days worked for proration: late days count as present."""
        return self.present + self.late

    @property
    def day_count(self) -> int:
        return self.present + self.late + self.absent + self.leave + self.holiday

    def to_dict(self) -> dict[str, Any]:
        return {
            "present": self.present,
            "late": self.late,
            "absent": self.absent,
            "leave": self.leave,
            "holiday": self.holiday,
            "total_raw_overtime": str(self.total_raw_overtime),
            "total_payable_overtime": str(self.total_payable_overtime),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AttendanceTotals:
        return cls(
            present=int(data.get("present", 0)),
            late=int(data.get("late", 0)),
            absent=int(data.get("absent", 0)),
            leave=int(data.get("leave", 0)),
            holiday=int(data.get("holiday", 0)),
            total_raw_overtime=to_decimal(data.get("total_raw_overtime", "0")),
            total_payable_overtime=to_decimal(data.get("total_payable_overtime", "0")),
        )


@dataclass(frozen=True)
class MonthlyAttendanceSummary:
    """One employee's attendance for one calendar month."""

    employee_id: str
    year: int
    month: int
    totals: AttendanceTotals = field(default_factory=AttendanceTotals)
    records: tuple[EnrichedAttendanceRecord, ...] = ()

    @property
    def month_key(self) -> str:
        return f"{self.month:02d}{self.year}"
