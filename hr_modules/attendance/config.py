"""
Attendance Rule Set.

Static configuration consumed by the attendance enricher: standard
in/out times, weekly holiday weekdays, public holidays for the year and
the minimum number of minutes past the standard out-time before any
overtime is credited.

The rule set is deliberately permissive at construction time: a
partially-filled rule set is a legal value and the enricher degrades on
it.  ``validate()`` is the strict check used when an administrator saves
new rules.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import time
from typing import Any, Self

from hr_kernel.exceptions import InvalidAttendanceRulesError
from hr_kernel.logging_config import get_logger
from hr_modules.attendance.models import Holiday, parse_time

logger = get_logger("modules.attendance.config")

# Weekday numbering used by stored rules: 0 = Sunday ... 6 = Saturday.
SUNDAY = 0
SATURDAY = 6
VALID_WEEKDAYS = frozenset(range(SUNDAY, SATURDAY + 1))

DEFAULT_IN_TIME = time(9, 0)
DEFAULT_OUT_TIME = time(18, 0)


@dataclass(frozen=True)
class AttendanceRuleSet:
    """
    Attendance rules.

        rules = AttendanceRuleSet.from_dict(
            {
                "standard_work_hours": {"in_time": "09:00", "out_time": "18:00"},
                "overtime_rules": {"minimum_minutes_after_out_time": 30},
                "weekly_holidays": [0],
            }
        )
    """

    standard_in_time: time | None = DEFAULT_IN_TIME
    standard_out_time: time | None = DEFAULT_OUT_TIME
    weekly_holidays: frozenset[int] = field(default_factory=frozenset)
    holidays: tuple[Holiday, ...] = ()
    minimum_overtime_minutes: int = 0

    @property
    def is_complete(self) -> bool:
        """Both standard times are set and out-time is after in-time."""
        return (
            self.standard_in_time is not None
            and self.standard_out_time is not None
            and self.standard_out_time > self.standard_in_time
        )

    def validate(self) -> Self:
        """
        Strict validation for the save path.

        Raises:
            InvalidAttendanceRulesError: on missing times, out <= in,
                negative threshold or weekday numbers outside 0-6.
        """
        if self.standard_in_time is None or self.standard_out_time is None:
            raise InvalidAttendanceRulesError("standard in-time and out-time are required")
        if self.standard_out_time <= self.standard_in_time:
            raise InvalidAttendanceRulesError(
                f"standard out-time {self.standard_out_time} must be after "
                f"in-time {self.standard_in_time}"
            )
        if self.minimum_overtime_minutes < 0:
            raise InvalidAttendanceRulesError("minimum overtime minutes cannot be negative")
        invalid_days = set(self.weekly_holidays) - VALID_WEEKDAYS
        if invalid_days:
            raise InvalidAttendanceRulesError(
                f"weekly holidays must be weekday numbers 0-6, got {sorted(invalid_days)}"
            )
        return self

    def with_holidays(self, holidays: Iterable[Holiday]) -> Self:
        """Copy with the public holiday list replaced."""
        return replace(self, holidays=tuple(holidays))

    @classmethod
    def with_defaults(cls) -> Self:
        """09:00-18:00, no weekly or public holidays, no overtime threshold."""
        logger.info("attendance_rules_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """
        Create rules from the stored dict shape.

        Missing keys are left unset (``None`` times, empty holiday sets)
        rather than raising.
        """
        logger.debug(
            "attendance_rules_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        hours = data.get("standard_work_hours") or {}
        overtime = data.get("overtime_rules") or {}
        return cls(
            standard_in_time=parse_time(hours.get("in_time")),
            standard_out_time=parse_time(hours.get("out_time")),
            weekly_holidays=frozenset(int(d) for d in data.get("weekly_holidays") or ()),
            holidays=tuple(
                h if isinstance(h, Holiday) else Holiday.from_dict(h)
                for h in data.get("holidays") or ()
            ),
            minimum_overtime_minutes=int(overtime.get("minimum_minutes_after_out_time") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "standard_work_hours": {
                "in_time": self.standard_in_time.strftime("%H:%M") if self.standard_in_time else None,
                "out_time": self.standard_out_time.strftime("%H:%M") if self.standard_out_time else None,
            },
            "overtime_rules": {
                "minimum_minutes_after_out_time": self.minimum_overtime_minutes,
            },
            "weekly_holidays": sorted(self.weekly_holidays),
            "holidays": [h.to_dict() for h in self.holidays],
        }
