from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from server.db.models import Employee, Order

from .errors import OrderNotFoundError

PENDING_STATUS = "pending"


def generate_order_id(order_number: int, *, now: datetime | None = None) -> str:
    """``BS`` + two-digit year + upper-case hex order number padded to five digits."""
    year = (now or datetime.now(timezone.utc)).strftime("%y")
    return f"BS{year}{order_number:05X}"


async def employee_exists(session: AsyncSession, *, employee_code: str) -> bool:
    stmt = select(Employee.id).where(Employee.id == employee_code)
    return (await session.execute(stmt)).scalar_one_or_none() is not None


async def create_order(
    session: AsyncSession,
    *,
    client_phone: str,
    jewellery_details: dict[str, Any],
    worker_phone: str | None,
    employee_code: str | None,
) -> Order:
    order = Order(
        client_phone=client_phone,
        jewellery_details=jewellery_details,
        worker_phone=worker_phone,
        employee_code=employee_code,
    )
    session.add(order)
    try:
        await session.flush()
        order.id = generate_order_id(order.order_number)
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    await session.refresh(order)
    return order


async def list_orders(
    session: AsyncSession,
    *,
    worker_phone: str | None = None,
    pending_only: bool = False,
) -> list[Order]:
    stmt = select(Order)
    if worker_phone is not None:
        stmt = stmt.where(Order.worker_phone == worker_phone)
    if pending_only:
        stmt = stmt.where(Order.jewellery_details["status"].as_string() == PENDING_STATUS)
    stmt = stmt.order_by(Order.created_at.desc(), Order.order_number.desc())
    return list((await session.execute(stmt)).scalars().all())


async def get_order(session: AsyncSession, *, order_id: str) -> Order:
    stmt = select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
    order = (await session.execute(stmt)).scalar_one_or_none()
    if order is None:
        raise OrderNotFoundError(f"Order '{order_id}' was not found.")
    return order


async def save_order(session: AsyncSession, *, order: Order) -> Order:
    await session.commit()
    return await get_order(session, order_id=order.id)


async def delete_order(session: AsyncSession, *, order: Order) -> None:
    await session.delete(order)
    await session.commit()
