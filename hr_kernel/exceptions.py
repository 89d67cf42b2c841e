"""
Typed Exception Hierarchy for the HR Kernel.

Every error a caller may want to handle has its own class with a ``code``
class attribute (machine-readable, API-safe) and structured attributes
instead of a bare message string.

    try:
        service.calculate_and_save(employee_id, 2024, 3, actor_id)
    except EmployeeNotFoundError as e:
        api_response(code=e.code, employee=e.employee_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    HRKernelError (base)
    |
    +-- ConfigError
    |   +-- InvalidAttendanceRulesError
    |   +-- ConfigFileError
    |
    +-- EmployeeError
    |   +-- EmployeeNotFoundError
    |
    +-- AdjustmentError
    |   +-- AdjustmentNotFoundError
    |
    +-- PayrollError
        +-- PayrollRecordNotFoundError

Not every failure is an exception.  The calculation engines degrade to
defined defaults (malformed punches, missing rule fields, zero working
days) and the persistence services report store failures through result
objects with a status enum.
"""


class HRKernelError(Exception):
    """
    Base exception for all HR kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "HR_KERNEL_ERROR"


# Configuration


class ConfigError(HRKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class InvalidAttendanceRulesError(ConfigError):
    """Attendance rules cannot be saved because they are incomplete or inconsistent."""

    code: str = "INVALID_ATTENDANCE_RULES"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid attendance rules: {reason}")


class ConfigFileError(ConfigError):
    """A configuration file has an unexpected shape."""

    code: str = "CONFIG_FILE_ERROR"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration file {path}: {reason}")


# Employees


class EmployeeError(HRKernelError):
    """Base exception for employee directory errors."""

    code: str = "EMPLOYEE_ERROR"


class EmployeeNotFoundError(EmployeeError):
    """Employee with the given identifier is not in the directory."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee not found: {employee_id}")


# Financial adjustments


class AdjustmentError(HRKernelError):
    """Base exception for financial adjustment errors."""

    code: str = "ADJUSTMENT_ERROR"


class AdjustmentNotFoundError(AdjustmentError):
    """Adjustment with the given identifier does not exist."""

    code: str = "ADJUSTMENT_NOT_FOUND"

    def __init__(self, adjustment_id: str):
        self.adjustment_id = adjustment_id
        super().__init__(f"Adjustment not found: {adjustment_id}")


# Payroll


class PayrollError(HRKernelError):
    """Base exception for payroll errors."""

    code: str = "PAYROLL_ERROR"


class PayrollRecordNotFoundError(PayrollError):
    """No payroll record has been calculated for the employee and period."""

    code: str = "PAYROLL_RECORD_NOT_FOUND"

    def __init__(self, employee_id: str, year: int, month: int):
        self.employee_id = employee_id
        self.year = year
        self.month = month
        super().__init__(
            f"No payroll record for employee {employee_id} in period {month:02d}/{year}"
        )
