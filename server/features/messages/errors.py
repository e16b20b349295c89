from __future__ import annotations

from server.features.shared.errors import NotFoundError, ValidationError


class MessageNotFoundError(NotFoundError):
    code = "MESSAGE_NOT_FOUND"
    error = "Message not found"


class MessageValidationError(ValidationError):
    pass
