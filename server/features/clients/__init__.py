from __future__ import annotations

from .errors import ClientConflictError, ClientNotFoundError, ClientValidationError
from .service import create_client, delete_client, get_client, list_clients, update_client
from .types import ClientCreateInput, ClientSummary, ClientUpdateInput

__all__ = [
    "ClientConflictError",
    "ClientCreateInput",
    "ClientNotFoundError",
    "ClientSummary",
    "ClientUpdateInput",
    "ClientValidationError",
    "create_client",
    "delete_client",
    "get_client",
    "list_clients",
    "update_client",
]
