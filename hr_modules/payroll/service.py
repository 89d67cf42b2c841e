"""
Payroll Module Services (``hr_modules.payroll.service``).

Responsibility
--------------
Orchestrates the financial adjustment ledger (recording bonuses,
deductions and advances with their repayment installments) and payroll
runs (single-employee "calculate and save" and concurrent batch runs) by
delegating pure computation to ``hr_engines.ledger`` /
``hr_engines.payroll`` and persistence to the payroll stores.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``AdjustmentLedgerService`` and
``PayrollService`` are the public entry points for payroll operations.

Invariants enforced
-------------------
* Each write method owns the transaction boundary (``commit`` on
  success, ``rollback`` on failure).
* A new advance and its planned installments are stored in one
  transaction.  Editing an adjustment never regenerates installments.
* A payroll record is stamped with the injected clock; recalculating a
  period overwrites the stored record.
* Batch runs read all inputs on the caller's session, calculate in a
  thread pool without sharing mutable state, then persist sequentially.

Failure modes
-------------
* ``SQLAlchemyError`` during a write -> result with status
  ``STORE_FAILED``; session rolled back.
* Unknown employee on a single run -> ``EmployeeNotFoundError``.
* Missing record on read -> ``PayrollRecordNotFoundError``.

Usage::

    ledger = AdjustmentLedgerService(session)
    ledger.record_adjustment(advance, actor_id=actor_id)

    payroll = PayrollService(session, clock=clock)
    result = payroll.calculate_and_save("EMP-001", 2024, 3, actor_id=actor_id)
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hr_engines.ledger import (
    employee_cost_for_period,
    plan_advance_installments,
    sort_history,
    summarize_advance_repayment,
)
from hr_engines.payroll import calculate_payroll
from hr_kernel.domain.clock import Clock, SystemClock
from hr_kernel.domain.periods import PayrollPeriod
from hr_kernel.exceptions import (
    AdjustmentNotFoundError,
    EmployeeNotFoundError,
    PayrollRecordNotFoundError,
)
from hr_kernel.logging_config import LogContext, get_logger
from hr_modules.attendance.models import AttendanceTotals, MonthlyAttendanceSummary
from hr_modules.attendance.service import AttendanceService
from hr_modules.payroll.models import (
    AdjustmentType,
    AdvanceRepaymentSummary,
    Employee,
    FinancialAdjustment,
    PayrollRecord,
)
from hr_modules.payroll.stores import (
    AdjustmentStore,
    EmployeeDirectory,
    PayrollStore,
    SqlAlchemyAdjustmentStore,
    SqlAlchemyEmployeeDirectory,
    SqlAlchemyPayrollStore,
)

if TYPE_CHECKING:
    from hr_config.schema import HRSettings

logger = get_logger("modules.payroll.service")

NEW_ADJUSTMENT_PREFIX = "ADJ-"


def new_adjustment_id() -> str:
    return f"{NEW_ADJUSTMENT_PREFIX}{uuid4().hex}"


def _attendance_totals(summary: MonthlyAttendanceSummary | None) -> AttendanceTotals | None:
    if summary is None or not summary.records:
        return None
    return summary.totals


# =============================================================================
# Adjustment ledger
# =============================================================================


class AdjustmentStatus(str, Enum):
    SAVED = "saved"
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    STORE_FAILED = "store_failed"


@dataclass(frozen=True)
class AdjustmentResult:
    """Outcome of a ledger write.  ``adjustments`` lists everything stored."""

    status: AdjustmentStatus
    adjustments: tuple[FinancialAdjustment, ...] = ()
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status in (AdjustmentStatus.SAVED, AdjustmentStatus.DELETED)


class AdjustmentLedgerService:
    """
    Records, lists and removes financial adjustments.

    Contract
    --------
    * ``record_adjustment`` and ``remove_adjustment`` return
      ``AdjustmentResult``; they never raise on persistence failure.
    * Adjustment DTOs validate themselves; an advance too small for its
      installment count is planned over fewer installments.
    """

    def __init__(
        self,
        session: Session,
        adjustment_store: AdjustmentStore | None = None,
    ):
        self._session = session
        self._store = adjustment_store or SqlAlchemyAdjustmentStore(session)

    def record_adjustment(
        self,
        adjustment: FinancialAdjustment,
        actor_id: UUID,
        is_editing: bool = False,
    ) -> AdjustmentResult:
        """
        Store an adjustment.

        A new adjustment with an empty id gets an ``ADJ-`` id.  A new
        advance also stores its repayment installments.  Editing replaces
        the stored adjustment with the same id (inserting it if unknown)
        and leaves existing installments untouched.
        """
        if not adjustment.id:
            adjustment = replace(adjustment, id=new_adjustment_id())

        installments: tuple[FinancialAdjustment, ...] = ()
        if adjustment.type is AdjustmentType.ADVANCE and not is_editing:
            installments = plan_advance_installments(adjustment)

        to_store = (adjustment, *installments)
        with LogContext.bind(actor_id=str(actor_id), employee_id=adjustment.employee_id):
            try:
                for item in to_store:
                    self._store.save_adjustment(item, actor_id)
                self._session.commit()
            except SQLAlchemyError as exc:
                self._session.rollback()
                logger.error(
                    "adjustment_save_failed",
                    extra={"adjustment_id": adjustment.id},
                    exc_info=True,
                )
                return AdjustmentResult(status=AdjustmentStatus.STORE_FAILED, message=str(exc))

            logger.info(
                "adjustment_updated" if is_editing else "adjustment_created",
                extra={
                    "adjustment_id": adjustment.id,
                    "adjustment_type": adjustment.type,
                    "amount": adjustment.amount,
                    "period": adjustment.payroll_period.label,
                    "installments_created": len(installments),
                },
            )
        return AdjustmentResult(status=AdjustmentStatus.SAVED, adjustments=to_store)

    def remove_adjustment(self, adjustment_id: str, actor_id: UUID) -> AdjustmentResult:
        """
        Delete one adjustment by id.

        Deleting an advance does not delete its installments.
        """
        with LogContext.bind(actor_id=str(actor_id)):
            existing = self._store.get_adjustment(adjustment_id)
            if existing is None:
                logger.warning("adjustment_not_found", extra={"adjustment_id": adjustment_id})
                return AdjustmentResult(
                    status=AdjustmentStatus.NOT_FOUND,
                    message=f"Adjustment not found: {adjustment_id}",
                )
            try:
                self._store.delete_adjustment(adjustment_id)
                self._session.commit()
            except SQLAlchemyError as exc:
                self._session.rollback()
                logger.error(
                    "adjustment_delete_failed",
                    extra={"adjustment_id": adjustment_id},
                    exc_info=True,
                )
                return AdjustmentResult(status=AdjustmentStatus.STORE_FAILED, message=str(exc))

            logger.info(
                "adjustment_deleted",
                extra={"adjustment_id": adjustment_id, "employee_id": existing.employee_id},
            )
        return AdjustmentResult(status=AdjustmentStatus.DELETED, adjustments=(existing,))

    def get_adjustment(self, adjustment_id: str) -> FinancialAdjustment:
        """
        Raises:
            AdjustmentNotFoundError: If no adjustment has this id.
        """
        adjustment = self._store.get_adjustment(adjustment_id)
        if adjustment is None:
            raise AdjustmentNotFoundError(adjustment_id)
        return adjustment

    def list_adjustments(self, employee_id: str | None = None) -> list[FinancialAdjustment]:
        """All adjustments, deduplicated and newest first."""
        return sort_history(self._store.list_adjustments(employee_id))

    def get_adjustments_for_period(
        self,
        year: int,
        month: int,
        employee_id: str | None = None,
    ) -> list[FinancialAdjustment]:
        return sort_history(self._store.get_adjustments_for_period(year, month, employee_id))

    def get_advance_summary(
        self,
        employee_id: str,
        as_of: PayrollPeriod,
    ) -> AdvanceRepaymentSummary | None:
        """Repayment progress of the employee's latest advance."""
        return summarize_advance_repayment(self._store.list_adjustments(employee_id), as_of)

    def get_employee_cost(
        self,
        year: int,
        month: int,
        employee_id: str | None = None,
    ) -> Decimal:
        """Bonus, Addition and Employee Expense total for the payroll period."""
        period = PayrollPeriod(year, month)
        return employee_cost_for_period(self._store.list_adjustments(employee_id), period)


# =============================================================================
# Payroll runs
# =============================================================================


class PayrollRunStatus(str, Enum):
    CALCULATED = "calculated"
    STORE_FAILED = "store_failed"


@dataclass(frozen=True)
class PayrollRunResult:
    """Outcome of a single-employee payroll run."""

    status: PayrollRunStatus
    record: PayrollRecord | None = None
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status is PayrollRunStatus.CALCULATED


@dataclass(frozen=True)
class PayrollBatchResult:
    """Outcome of a batch payroll run."""

    status: PayrollRunStatus
    records: tuple[PayrollRecord, ...] = ()
    skipped: tuple[str, ...] = ()
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status is PayrollRunStatus.CALCULATED

    @property
    def total_net(self) -> Decimal:
        return sum((r.net_salary for r in self.records), Decimal("0"))


@dataclass(frozen=True)
class _PayrollInputs:
    employee: Employee
    attendance: AttendanceTotals | None
    adjustments: tuple[FinancialAdjustment, ...]
    history: tuple[FinancialAdjustment, ...]


class PayrollService:
    """
    Calculates, stores and reads monthly payroll records.

    Guarantees
    ----------
    * Session is committed only after every record of a run is stored;
      otherwise rolled back.
    * Clock is injectable for deterministic testing.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        attendance_service: AttendanceService | None = None,
        employee_directory: EmployeeDirectory | None = None,
        adjustment_store: AdjustmentStore | None = None,
        payroll_store: PayrollStore | None = None,
        max_workers: int | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._employees = employee_directory or SqlAlchemyEmployeeDirectory(session)
        self._attendance = attendance_service or AttendanceService(
            session, employee_directory=self._employees,
        )
        self._adjustments = adjustment_store or SqlAlchemyAdjustmentStore(session)
        self._payroll = payroll_store or SqlAlchemyPayrollStore(session)
        self._max_workers = max_workers

    @classmethod
    def from_settings(
        cls,
        session: Session,
        settings: HRSettings,
        clock: Clock | None = None,
    ) -> PayrollService:
        """Build a service whose batch runs use ``settings.payroll_max_workers``."""
        return cls(session, clock=clock, max_workers=settings.payroll_max_workers)

    @property
    def max_workers(self) -> int | None:
        return self._max_workers

    def _stamp(self, record: PayrollRecord) -> PayrollRecord:
        return replace(record, calculated_at=self._clock.now())

    def calculate_and_save(
        self,
        employee_id: str,
        year: int,
        month: int,
        actor_id: UUID,
    ) -> PayrollRunResult:
        """
        Calculate one employee's payroll for the period and store it,
        overwriting any record already stored for the period.

        Raises:
            EmployeeNotFoundError: If the employee is not in the directory.
        """
        period = PayrollPeriod(year, month)
        with LogContext.bind(
            actor_id=str(actor_id), employee_id=employee_id, period=period.label,
        ):
            employee = self._employees.get_employee(employee_id)
            if employee is None:
                raise EmployeeNotFoundError(employee_id)

            summary = self._attendance.get_employee_attendance(employee_id, year, month)
            record = self._stamp(
                calculate_payroll(
                    employee,
                    year,
                    month,
                    _attendance_totals(summary),
                    self._adjustments.get_adjustments_for_period(year, month, employee_id),
                    all_time_history=self._adjustments.list_adjustments(employee_id),
                )
            )

            try:
                self._payroll.save_payroll_data(year, month, record, actor_id)
                self._session.commit()
            except SQLAlchemyError as exc:
                self._session.rollback()
                logger.error("payroll_save_failed", exc_info=True)
                return PayrollRunResult(status=PayrollRunStatus.STORE_FAILED, message=str(exc))

            logger.info("payroll_saved", extra={"net_salary": record.net_salary})
        return PayrollRunResult(status=PayrollRunStatus.CALCULATED, record=record)

    def _gather_inputs(
        self,
        year: int,
        month: int,
        employee_ids: Sequence[str] | None,
    ) -> tuple[list[_PayrollInputs], list[str]]:
        directory = {e.id: e for e in self._employees.get_employees()}
        wanted = list(employee_ids) if employee_ids is not None else sorted(directory)

        summaries = self._attendance.get_processed_attendance(year, month)
        period_adjustments: dict[str, list[FinancialAdjustment]] = defaultdict(list)
        for adj in self._adjustments.get_adjustments_for_period(year, month):
            period_adjustments[adj.employee_id].append(adj)
        history: dict[str, list[FinancialAdjustment]] = defaultdict(list)
        for adj in self._adjustments.list_adjustments():
            history[adj.employee_id].append(adj)

        inputs: list[_PayrollInputs] = []
        skipped: list[str] = []
        for employee_id in wanted:
            employee = directory.get(employee_id)
            if employee is None or not employee.is_active:
                skipped.append(employee_id)
                continue
            inputs.append(
                _PayrollInputs(
                    employee=employee,
                    attendance=_attendance_totals(summaries.get(employee_id)),
                    adjustments=tuple(period_adjustments.get(employee_id, ())),
                    history=tuple(history.get(employee_id, ())),
                )
            )
        return inputs, skipped

    def calculate_batch(
        self,
        year: int,
        month: int,
        actor_id: UUID,
        employee_ids: Sequence[str] | None = None,
        max_workers: int | None = None,
    ) -> PayrollBatchResult:
        """
        Calculate and store payroll for many employees.

        ``employee_ids`` defaults to the whole directory.  Unknown and
        inactive employees are reported in ``skipped``.  Records are only
        committed if all of them are stored.
        """
        period = PayrollPeriod(year, month)
        with LogContext.bind(actor_id=str(actor_id), period=period.label):
            inputs, skipped = self._gather_inputs(year, month, employee_ids)
            logger.info(
                "payroll_batch_started",
                extra={"employee_count": len(inputs), "skipped_count": len(skipped)},
            )

            def run(item: _PayrollInputs) -> PayrollRecord:
                return calculate_payroll(
                    item.employee,
                    year,
                    month,
                    item.attendance,
                    item.adjustments,
                    all_time_history=item.history,
                )

            workers = max_workers or self._max_workers
            with ThreadPoolExecutor(max_workers=workers) as executor:
                calculated = list(executor.map(run, inputs))
            records = tuple(self._stamp(r) for r in calculated)

            try:
                for record in records:
                    self._payroll.save_payroll_data(year, month, record, actor_id)
                self._session.commit()
            except SQLAlchemyError as exc:
                self._session.rollback()
                logger.error("payroll_batch_save_failed", exc_info=True)
                return PayrollBatchResult(
                    status=PayrollRunStatus.STORE_FAILED,
                    skipped=tuple(skipped),
                    message=str(exc),
                )

            result = PayrollBatchResult(
                status=PayrollRunStatus.CALCULATED,
                records=records,
                skipped=tuple(skipped),
            )
            logger.info(
                "payroll_batch_completed",
                extra={"record_count": len(records), "total_net": result.total_net},
            )
        return result

    def get_payroll(self, year: int, month: int, employee_id: str) -> PayrollRecord:
        """
        Raises:
            PayrollRecordNotFoundError: If no record has been calculated.
        """
        record = self._payroll.get_payroll_data_for_month(year, month, employee_id)
        if record is None:
            raise PayrollRecordNotFoundError(employee_id, year, month)
        return record
