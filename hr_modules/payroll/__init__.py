"""
Payroll Module (``hr_modules.payroll``).

Responsibility
--------------
Employee directory, the financial adjustment ledger (bonuses, additions,
deductions, employee expenses, advances and their repayment
installments) and monthly payroll records.

Architecture position
---------------------
**Modules layer** -- DTOs, ORM, stores and service facades
(``AdjustmentLedgerService``, ``PayrollService``) that delegate all
arithmetic to ``hr_engines.ledger`` and ``hr_engines.payroll``.

Failure modes
-------------
* Result objects with ``STORE_FAILED`` status on persistence errors.
* ``EmployeeNotFoundError`` / ``PayrollRecordNotFoundError`` on lookups.
"""

from hr_modules.payroll.models import (
    AdjustmentTotals,
    AdjustmentType,
    AdvanceRepaymentSummary,
    CalculationDetails,
    DeductionItem,
    Employee,
    FinancialAdjustment,
    PayrollRecord,
)

__all__ = [
    "AdjustmentTotals",
    "AdjustmentType",
    "AdvanceRepaymentSummary",
    "CalculationDetails",
    "DeductionItem",
    "Employee",
    "FinancialAdjustment",
    "PayrollRecord",
]
