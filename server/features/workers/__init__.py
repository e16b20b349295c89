from __future__ import annotations

from .errors import WorkerNotFoundError, WorkerPhoneConflictError, WorkerValidationError
from .service import (
    create_worker,
    delete_worker,
    delete_worker_phone,
    get_worker_by_phone,
    list_workers,
    update_worker,
)
from .types import WorkerCreateInput, WorkerSummary, WorkerUpdateInput

__all__ = [
    "WorkerCreateInput",
    "WorkerNotFoundError",
    "WorkerPhoneConflictError",
    "WorkerSummary",
    "WorkerUpdateInput",
    "WorkerValidationError",
    "create_worker",
    "delete_worker",
    "delete_worker_phone",
    "get_worker_by_phone",
    "list_workers",
    "update_worker",
]
