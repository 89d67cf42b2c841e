"""
HR configuration: YAML loading of attendance rules, holiday calendars
and runtime settings.
"""

from hr_config.loader import (
    compute_checksum,
    load_attendance_rules,
    load_holidays,
    load_hr_settings,
    load_yaml_file,
)
from hr_config.runtime import initialize
from hr_config.schema import HRSettings

__all__ = [
    "HRSettings",
    "compute_checksum",
    "initialize",
    "load_attendance_rules",
    "load_holidays",
    "load_hr_settings",
    "load_yaml_file",
]
