"""Core business logic module.

Modules:
- models: Student and Loo7 records
- errors: error taxonomy shared by store, service and API
- schedule: default and rescheduled recitation dates
- loo7_service: creation, evaluation and listing of assignments
"""

__all__ = [
    "models",
    "errors",
    "schedule",
    "loo7_service",
]
