from __future__ import annotations

from server.features.shared.errors import NotFoundError, ValidationError


class OrderNotFoundError(NotFoundError):
    code = "ORDER_NOT_FOUND"
    error = "Order not found"


class OrderValidationError(ValidationError):
    pass
