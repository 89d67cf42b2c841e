"""
Module ORM Registry (``hr_modules._orm_registry``).

Responsibility
--------------
Ensure all module-level SQLAlchemy ORM models are imported so that
``Base.metadata`` contains their table definitions before
``hr_kernel.db.engine.create_tables()`` runs ``create_all``.
"""


def import_all_orm_models() -> None:
    """Import every ``hr_modules.*.orm`` module to register ORM models.

    This function is idempotent -- repeated calls are harmless.
    """
    import hr_modules.attendance.orm  # noqa: F401
    import hr_modules.payroll.orm  # noqa: F401
