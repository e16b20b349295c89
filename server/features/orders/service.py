from __future__ import annotations

import logging
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from server.db.models import Order, WorkerPhone
from server.features.employees.errors import EmployeeNotFoundError
from server.features.shared.redact import redact_phone
from server.features.workers import repo as workers_repo
from server.features.workers.errors import WorkerNotFoundError

from . import repo
from .errors import OrderValidationError
from .types import ClientDetails, EmployeeDetails, OrderCreated, OrderReassigned, OrderSummary

logger = logging.getLogger(__name__)


class WorkerNotifier(Protocol):
    async def notify_worker_assignment(
        self,
        to: str,
        *,
        order_id: str,
        jewellery_details: dict[str, Any],
    ) -> dict[str, Any]: ...

    async def notify_worker_removal(self, to: str, *, order_id: str) -> dict[str, Any]: ...


def to_summary(order: Order) -> OrderSummary:
    employee = order.employee
    return OrderSummary(
        order_id=order.id or "",
        client_details=ClientDetails(phone=order.client_phone),
        worker_phone=order.worker_phone,
        employee_details=EmployeeDetails(
            code=order.employee_code,
            name=employee.name if employee is not None else None,
        ),
        jewellery_details=dict(order.jewellery_details or {}),
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


async def _require_worker_phone(session: AsyncSession, phone_number: str) -> WorkerPhone:
    phone = await workers_repo.get_worker_phone(session, phone_number=phone_number)
    if phone is None:
        raise WorkerNotFoundError(f"No worker is registered with phone '{phone_number}'.")
    return phone


async def _notify_worker(
    session: AsyncSession,
    notifier: WorkerNotifier,
    *,
    phone_number: str,
    order: Order,
    removal: bool = False,
) -> None:
    phones = await workers_repo.list_phone_numbers_for(session, phone_number=phone_number)
    for phone in phones:
        try:
            if removal:
                await notifier.notify_worker_removal(phone, order_id=order.id)
            else:
                await notifier.notify_worker_assignment(
                    phone,
                    order_id=order.id,
                    jewellery_details=dict(order.jewellery_details or {}),
                )
        except Exception as exc:
            logger.warning(
                "Worker %s notification for order %s to %s failed: %s",
                "removal" if removal else "assignment",
                order.id,
                redact_phone(phone),
                exc,
            )


async def create_order(
    session: AsyncSession,
    *,
    client_phone: str,
    jewellery_details: dict[str, Any] | None,
    notifier: WorkerNotifier,
    worker_phone: str | None = None,
    employee_code: str | None = None,
) -> OrderCreated:
    normalized_client = _clean(client_phone)
    if normalized_client is None or jewellery_details is None:
        raise OrderValidationError(
            "Missing required fields: client_details.phone and jewellery_details are required."
        )
    normalized_worker = _clean(worker_phone)
    normalized_employee = _clean(employee_code)

    if normalized_employee is not None and not await repo.employee_exists(
        session, employee_code=normalized_employee
    ):
        raise EmployeeNotFoundError(f"Employee '{normalized_employee}' was not found.")
    if normalized_worker is not None:
        await _require_worker_phone(session, normalized_worker)

    order = await repo.create_order(
        session,
        client_phone=normalized_client,
        jewellery_details=jewellery_details,
        worker_phone=normalized_worker,
        employee_code=normalized_employee,
    )
    logger.info("Created order %s for client %s.", order.id, redact_phone(normalized_client))

    if normalized_worker is not None:
        await _notify_worker(session, notifier, phone_number=normalized_worker, order=order)

    return OrderCreated(order_id=order.id, created_at=order.created_at)


async def list_orders(session: AsyncSession) -> list[OrderSummary]:
    return [to_summary(order) for order in await repo.list_orders(session)]


async def list_pending_orders_for_worker(
    session: AsyncSession,
    *,
    phone_number: str,
) -> list[OrderSummary]:
    normalized = _clean(phone_number)
    if normalized is None:
        raise OrderValidationError("Worker phone number is required.")
    orders = await repo.list_orders(session, worker_phone=normalized, pending_only=True)
    return [to_summary(order) for order in orders]


async def update_order(
    session: AsyncSession,
    *,
    order_id: str,
    client_phone: str | None = None,
    jewellery_details: dict[str, Any] | None = None,
    worker_phone: str | None = None,
    update_worker_phone: bool = False,
) -> OrderSummary:
    normalized_client = _clean(client_phone)
    if normalized_client is None and jewellery_details is None and not update_worker_phone:
        raise OrderValidationError("At least one field must be provided for update.")

    order = await repo.get_order(session, order_id=order_id)
    if normalized_client is not None:
        order.client_phone = normalized_client
    if jewellery_details is not None:
        order.jewellery_details = jewellery_details
    if update_worker_phone:
        normalized_worker = _clean(worker_phone)
        if normalized_worker is not None:
            await _require_worker_phone(session, normalized_worker)
        order.worker_phone = normalized_worker

    updated = await repo.save_order(session, order=order)
    logger.info("Updated order %s.", updated.id)
    return to_summary(updated)


async def reassign_worker(
    session: AsyncSession,
    *,
    order_id: str,
    worker_phone: str,
    notifier: WorkerNotifier,
) -> OrderReassigned:
    requested = _clean(worker_phone)
    if requested is None:
        raise OrderValidationError("Worker phone number is required.")

    order = await repo.get_order(session, order_id=order_id)
    previous = order.worker_phone
    phone = await _require_worker_phone(session, requested)
    primary = await workers_repo.get_primary_phone(session, worker_id=phone.worker_id) or requested

    order.worker_phone = primary
    updated = await repo.save_order(session, order=order)
    logger.info(
        "Reassigned order %s from %s to %s.",
        updated.id,
        redact_phone(previous),
        redact_phone(primary),
    )

    if previous and previous != primary:
        await _notify_worker(session, notifier, phone_number=previous, order=updated, removal=True)
    await _notify_worker(session, notifier, phone_number=primary, order=updated)

    return OrderReassigned(
        order_id=updated.id,
        old_worker_phone=previous,
        new_worker_phone=primary,
        order=to_summary(updated),
    )


async def delete_order(session: AsyncSession, *, order_id: str) -> str:
    order = await repo.get_order(session, order_id=order_id)
    await repo.delete_order(session, order=order)
    logger.info("Deleted order %s.", order_id)
    return order_id
