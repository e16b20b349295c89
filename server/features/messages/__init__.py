from __future__ import annotations

from .errors import MessageNotFoundError, MessageValidationError
from .forwarding import ForwardResult, MessageForwarder
from .service import (
    create_message,
    get_message,
    list_forwarded_messages_for_order,
    list_messages,
    list_messages_for_order,
)
from .types import MessageCreateInput, MessageDetail, MessageForwardInput, MessageSummary

__all__ = [
    "ForwardResult",
    "MessageCreateInput",
    "MessageDetail",
    "MessageForwardInput",
    "MessageForwarder",
    "MessageNotFoundError",
    "MessageSummary",
    "MessageValidationError",
    "create_message",
    "get_message",
    "list_forwarded_messages_for_order",
    "list_messages",
    "list_messages_for_order",
]
