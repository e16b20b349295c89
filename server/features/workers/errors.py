from __future__ import annotations

from server.features.shared.errors import ConflictError, NotFoundError, ValidationError


class WorkerNotFoundError(NotFoundError):
    code = "WORKER_NOT_FOUND"
    error = "Worker not found"


class WorkerPhoneConflictError(ConflictError):
    code = "PHONE_NUMBER_EXISTS"
    error = "Phone number already registered"


class WorkerValidationError(ValidationError):
    pass
