"""Database layer - engine, base classes and column types."""

from hr_kernel.db.base import UUID, Base, DecimalString, TrackedBase, UUIDString
from hr_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)
from hr_kernel.db.types import ZERO, round_hours, round_money, round_rate, to_decimal

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "DecimalString",
    "UUID",
    "ZERO",
    "round_hours",
    "round_money",
    "round_rate",
    "to_decimal",
]
