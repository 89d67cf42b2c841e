"""
Module: hr_kernel.db.types
Responsibility: Rounding helpers for money, hour and rate quantities.
    Centralizes precision so that every engine, model and
    service rounds identically.
Architecture position: Kernel > DB.  May be imported by engines, modules and
    services.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats anywhere.  All amounts and hours are Decimal.
    - round_money() / round_hours() / round_rate() are the only sanctioned
      rounding functions for payroll values.
"""

from decimal import ROUND_HALF_UP, Decimal

MONEY_DECIMAL_PLACES = 2
HOURS_DECIMAL_PLACES = 2
RATE_DECIMAL_PLACES = 4
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


def _quantum(decimal_places: int) -> Decimal:
    return Decimal(1).scaleb(-decimal_places)


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    Preconditions: value is a Decimal.
    Postconditions: value quantized with ROUND_HALF_UP by default.
    """
    return value.quantize(_quantum(decimal_places), rounding=rounding)


def round_hours(value: Decimal) -> Decimal:
    """Round an hour quantity to two decimal places (half up)."""
    return value.quantize(_quantum(HOURS_DECIMAL_PLACES), rounding=DEFAULT_ROUNDING)


def round_rate(value: Decimal) -> Decimal:
    """Round a per-hour rate to four decimal places (half up)."""
    return value.quantize(_quantum(RATE_DECIMAL_PLACES), rounding=DEFAULT_ROUNDING)


def to_decimal(value: object) -> Decimal:
    """
    Convert a stored or user-supplied number to Decimal without going
    through binary floating point.

    Raises:
        ValueError: If the value cannot be interpreted as a number.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Cannot interpret {value!r} as a decimal amount")
    if isinstance(value, (int, str)):
        try:
            return Decimal(value)
        except ArithmeticError as exc:
            raise ValueError(f"Cannot interpret {value!r} as a decimal amount") from exc
    if isinstance(value, float):
        return Decimal(repr(value))
    raise ValueError(f"Cannot interpret {value!r} as a decimal amount")
