"""
Configuration Loader (``hr_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into typed objects: attendance rule
sets, holiday calendars and runtime ``HRSettings``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on the kernel
exceptions and the attendance DTOs; nothing in the kernel or engines
depends on it.

Invariants enforced
-------------------
* ``compute_checksum`` produces a deterministic SHA-256 hash for change
  detection (a changed rule checksum means processed attendance must be
  recomputed).
* Environment variables override file settings, never the reverse.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Well-formed YAML of the wrong shape  -> ``ConfigFileError``.
"""

from __future__ import annotations

import hashlib
import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from hr_config.schema import DEFAULT_DATABASE_URL, DEFAULT_LOG_LEVEL, HRSettings
from hr_kernel.exceptions import ConfigFileError
from hr_kernel.logging_config import get_logger
from hr_modules.attendance.config import AttendanceRuleSet
from hr_modules.attendance.models import Holiday

logger = get_logger("config.loader")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

ENV_DATABASE_URL = "HR_DATABASE_URL"
ENV_LOG_LEVEL = "HR_LOG_LEVEL"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigFileError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigFileError(str(path), f"expected a mapping, got {type(data).__name__}")
    return data


def parse_holidays(entries: Any, source: str = "<data>") -> list[Holiday]:
    """Parse a list of ``{date, name, type}`` mappings."""
    if not isinstance(entries, list):
        raise ConfigFileError(source, "holidays must be a list")
    try:
        return [Holiday.from_dict(entry) for entry in entries]
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigFileError(source, f"bad holiday entry: {exc}") from exc


def load_attendance_rules(path: Path | None = None) -> AttendanceRuleSet:
    """
    Load an attendance rule set.

    Accepts either a bare rule document or one nested under an
    ``attendance_rules`` key.  Defaults to the packaged ``defaults.yaml``.
    """
    source = path or DEFAULTS_PATH
    data = load_yaml_file(source)
    rules_data = data.get("attendance_rules", data)
    try:
        rules = AttendanceRuleSet.from_dict(rules_data)
    except (TypeError, ValueError) as exc:
        raise ConfigFileError(str(source), str(exc)) from exc
    logger.info(
        "attendance_rules_loaded",
        extra={"path": str(source), "checksum": compute_checksum(rules.to_dict())},
    )
    return rules


def load_holidays(path: Path, year: int | None = None) -> list[Holiday]:
    """
    Load a holiday calendar.

    The file holds either ``holidays: [...]`` or a mapping of year to
    list (``holidays: {2024: [...], 2025: [...]}``).  With ``year`` set,
    only that year's holidays are returned.
    """
    data = load_yaml_file(path)
    entries = data.get("holidays", [])
    if isinstance(entries, dict):
        if year is not None:
            entries = entries.get(year, entries.get(str(year), []))
        else:
            entries = [h for year_entries in entries.values() for h in year_entries]
    holidays = parse_holidays(entries, str(path))
    if year is not None:
        holidays = [h for h in holidays if h.date.year == year]
    return holidays


def load_hr_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> HRSettings:
    """
    Load runtime settings from YAML, then apply environment overrides
    (``HR_DATABASE_URL``, ``HR_LOG_LEVEL``).
    """
    source = path or DEFAULTS_PATH
    env = os.environ if environ is None else environ
    data = dict(load_yaml_file(source).get("settings") or {})

    if env.get(ENV_DATABASE_URL):
        data["database_url"] = env[ENV_DATABASE_URL]
    if env.get(ENV_LOG_LEVEL):
        data["log_level"] = env[ENV_LOG_LEVEL]

    workers = data.get("payroll_max_workers")
    try:
        return HRSettings(
            database_url=str(data.get("database_url") or DEFAULT_DATABASE_URL),
            log_level=str(data.get("log_level") or DEFAULT_LOG_LEVEL).upper(),
            payroll_max_workers=int(workers) if workers is not None else None,
        )
    except (TypeError, ValueError) as exc:
        raise ConfigFileError(str(source), str(exc)) from exc


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
