"""
Financial Adjustment Ledger Engine (``hr_engines.ledger``).

Responsibility
--------------
Pure functions over financial adjustments: planning advance repayment
installments, filtering and ordering adjustment history, splitting a
period's adjustments into payroll buckets, and summarizing advance
repayment progress.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO database,
ZERO clock reads.  Persistence of the planned installments is the job of
``AdjustmentLedgerService``.

Invariants enforced
-------------------
* Planned installments of an advance sum exactly to the advance amount.
* Installment ``i`` of an advance filed in period ``P`` is filed in
  period ``P + i``.
* Installment ids are ``repay-<advance id>-<i>`` and therefore stable.

Failure modes
-------------
* ``ValueError`` when asked to plan installments for a non-advance.
* An advance too small to give every installment one cent is planned
  over fewer installments (logged as ``advance_installments_capped``).
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_DOWN, Decimal

from hr_engines.tracer import traced_engine
from hr_kernel.db.types import ZERO, round_money
from hr_kernel.domain.periods import PayrollPeriod
from hr_kernel.logging_config import get_logger
from hr_modules.payroll.models import (
    ADVANCE_REPAYMENT_PREFIX,
    DEDUCTION_TYPES,
    EARNING_TYPES,
    AdjustmentTotals,
    AdjustmentType,
    AdvanceRepaymentSummary,
    DeductionItem,
    FinancialAdjustment,
)

logger = get_logger("engines.ledger")

CENT = Decimal("0.01")

EMPLOYEE_COST_TYPES = frozenset(
    {AdjustmentType.BONUS, AdjustmentType.ADDITION, AdjustmentType.EMPLOYEE_EXPENSE}
)


def installment_id(advance_id: str, number: int) -> str:
    return f"{ADVANCE_REPAYMENT_PREFIX}{advance_id}-{number}"


@traced_engine("advance_installment_planner", "1.0", fingerprint_fields=("advance",))
def plan_advance_installments(
    advance: FinancialAdjustment,
) -> tuple[FinancialAdjustment, ...]:
    """Plan the repayment deductions of a newly recorded advance.

    The advance amount is split into ``installments`` equal parts rounded
    to cents; the rounding remainder goes on the last installment.  Each
    installment is dated the 21st of the month before its target period,
    i.e. the first day of that period.

    The count is capped at one installment per cent of the amount.  When
    half-up rounding would leave nothing for the last installment the
    shares are rounded down instead.

    Args:
        advance: An ``Advance`` adjustment (``installments`` defaults to 1).

    Returns:
        Tuple of ``Deduction`` adjustments in installment order.

    Raises:
        ValueError: If ``advance`` is not an Advance.
    """
    if advance.type is not AdjustmentType.ADVANCE:
        raise ValueError(f"cannot plan installments for a {advance.type.value} adjustment")

    requested = advance.installments or 1
    count = min(requested, max(int(advance.amount / CENT), 1))
    if count < requested:
        logger.warning(
            "advance_installments_capped",
            extra={
                "advance_id": advance.id,
                "amount": advance.amount,
                "requested_installments": requested,
                "installments": count,
            },
        )

    share = round_money(advance.amount / count)
    last = advance.amount - share * (count - 1)
    if last <= 0:
        share = round_money(advance.amount / count, rounding=ROUND_DOWN)
        last = advance.amount - share * (count - 1)

    origin = advance.payroll_period
    planned = []
    for number in range(1, count + 1):
        target = origin.shift(number)
        planned.append(
            FinancialAdjustment(
                id=installment_id(advance.id, number),
                employee_id=advance.employee_id,
                type=AdjustmentType.DEDUCTION,
                amount=last if number == count else share,
                date=target.start_date,
                remarks=f"Advance Installment {number}/{count}",
            )
        )

    logger.debug(
        "advance_installments_planned",
        extra={
            "advance_id": advance.id,
            "installments": count,
            "first_period": origin.shift(1).label,
            "last_period": origin.shift(count).label,
        },
    )
    return tuple(planned)


def filter_for_period(
    adjustments: Iterable[FinancialAdjustment],
    period: PayrollPeriod,
) -> list[FinancialAdjustment]:
    """Adjustments filed in ``period``."""
    return [adj for adj in adjustments if adj.payroll_period == period]


def sort_history(
    adjustments: Iterable[FinancialAdjustment],
) -> list[FinancialAdjustment]:
    """Deduplicate by id (later occurrence wins) and order newest first."""
    by_id: dict[str, FinancialAdjustment] = {}
    for adj in adjustments:
        by_id[adj.id] = adj
    return sorted(by_id.values(), key=lambda a: (a.date, a.id), reverse=True)


def partition_adjustments(
    adjustments: Iterable[FinancialAdjustment],
) -> AdjustmentTotals:
    """Split adjustments into bonus, advance credit and deduction items.

    Bonus and Addition count as bonus; Deduction and Employee Expense
    become deduction line items rounded to cents (remarks default to the
    type name);
    Advance is credited to the employee in the period it is given.
    """
    bonus = ZERO
    advance_credit = ZERO
    deductions: list[DeductionItem] = []
    for adj in adjustments:
        if adj.type in EARNING_TYPES:
            bonus += adj.amount
        elif adj.type in DEDUCTION_TYPES:
            deductions.append(
                DeductionItem(
                    id=adj.id,
                    amount=round_money(adj.amount),
                    remarks=adj.remarks or adj.type.value,
                )
            )
        elif adj.type is AdjustmentType.ADVANCE:
            advance_credit += adj.amount
    return AdjustmentTotals(
        bonus=bonus,
        advance_credit=advance_credit,
        deductions=tuple(deductions),
    )


def summarize_advance_repayment(
    history: Iterable[FinancialAdjustment],
    as_of: PayrollPeriod,
) -> AdvanceRepaymentSummary | None:
    """Repayment progress of the most recent advance in ``history``.

    An installment counts as paid once it is filed in a period at or
    before ``as_of``.  Installments are matched by id, not by remarks.

    Returns:
        None when the history holds no advance.
    """
    entries = sort_history(history)
    advances = [a for a in entries if a.type is AdjustmentType.ADVANCE]
    if not advances:
        return None
    latest = advances[0]

    paid = [
        a for a in entries
        if a.repays(latest.id) and a.payroll_period <= as_of
    ]
    return AdvanceRepaymentSummary(
        advance_id=latest.id,
        total_advance=latest.amount,
        installments=latest.installments or 1,
        paid_installments=len(paid),
        total_repaid=sum((a.amount for a in paid), ZERO),
    )


def employee_cost_for_period(
    adjustments: Iterable[FinancialAdjustment],
    period: PayrollPeriod,
) -> Decimal:
    """Bonus, Addition and Employee Expense total dated inside the period window."""
    return sum(
        (
            adj.amount
            for adj in adjustments
            if adj.type in EMPLOYEE_COST_TYPES and period.contains(adj.date)
        ),
        ZERO,
    )
