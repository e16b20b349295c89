from __future__ import annotations

from server.features.shared.errors import ConflictError, NotFoundError, ValidationError


class ClientNotFoundError(NotFoundError):
    code = "CLIENT_NOT_FOUND"
    error = "Client not found"


class ClientConflictError(ConflictError):
    code = "CLIENT_EXISTS"
    error = "Client already exists"


class ClientValidationError(ValidationError):
    pass
