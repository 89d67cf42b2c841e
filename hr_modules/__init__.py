"""
HR Modules.

Thin orchestration layers over the HR kernel and engines.  Each module
contains:
- Domain models (the nouns)
- Configuration (attendance rules)
- ORM persistence models and store protocols
- A service facade that owns transaction boundaries

Modules:
- Attendance: rules, holiday calendars, raw punches, processed attendance
- Payroll: employees, financial adjustment ledger, payroll records
"""
