from __future__ import annotations

from .errors import OrderNotFoundError, OrderValidationError
from .repo import generate_order_id
from .types import OrderCreateInput, OrderSummary, OrderUpdateInput

__all__ = [
    "OrderCreateInput",
    "OrderNotFoundError",
    "OrderSummary",
    "OrderUpdateInput",
    "OrderValidationError",
    "generate_order_id",
]
