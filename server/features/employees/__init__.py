from __future__ import annotations

from .errors import EmployeeConflictError, EmployeeNotFoundError, EmployeeValidationError
from .passwords import hash_password, verify_password
from .service import create_employee, delete_employee, get_employee, list_employees, update_employee
from .types import EmployeeCreateInput, EmployeeSummary, EmployeeUpdateInput

__all__ = [
    "EmployeeConflictError",
    "EmployeeCreateInput",
    "EmployeeNotFoundError",
    "EmployeeSummary",
    "EmployeeUpdateInput",
    "EmployeeValidationError",
    "create_employee",
    "delete_employee",
    "get_employee",
    "hash_password",
    "list_employees",
    "update_employee",
    "verify_password",
]
