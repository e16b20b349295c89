from __future__ import annotations

from server.features.shared.errors import ConflictError, NotFoundError, ValidationError


class EmployeeNotFoundError(NotFoundError):
    code = "EMPLOYEE_NOT_FOUND"
    error = "Employee not found"


class EmployeeConflictError(ConflictError):
    code = "EMPLOYEE_EXISTS"
    error = "Employee already exists"


class EmployeeValidationError(ValidationError):
    pass
