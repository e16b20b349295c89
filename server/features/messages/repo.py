from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from server.db.models import Message, Order
from server.features.orders.errors import OrderNotFoundError

from .errors import MessageNotFoundError


async def ensure_order_exists(session: AsyncSession, *, order_id: str) -> None:
    stmt = select(Order.id).where(Order.id == order_id)
    if (await session.execute(stmt)).scalar_one_or_none() is None:
        raise OrderNotFoundError(f"Order '{order_id}' was not found.")


async def create_message(
    session: AsyncSession,
    *,
    order_id: str,
    content: str,
    sender_type: str,
    media_id: str | None = None,
    forwarded_from: str | None = None,
    original_message_id: int | None = None,
) -> Message:
    await ensure_order_exists(session, order_id=order_id)
    message = Message(
        order_id=order_id,
        content=content,
        media_id=media_id,
        sender_type=sender_type,
        forwarded_from=forwarded_from,
        original_message_id=original_message_id,
    )
    session.add(message)
    await session.commit()
    await session.refresh(message)
    return message


async def list_messages(session: AsyncSession) -> list[Message]:
    stmt = select(Message).order_by(Message.created_at.desc(), Message.message_id.desc())
    return list((await session.execute(stmt)).scalars().all())


async def list_messages_for_order(
    session: AsyncSession,
    *,
    order_id: str,
    forwarded_only: bool = False,
) -> list[Message]:
    await ensure_order_exists(session, order_id=order_id)
    stmt = select(Message).where(Message.order_id == order_id)
    if forwarded_only:
        stmt = stmt.where(Message.forwarded_from.is_not(None))
    stmt = stmt.order_by(Message.created_at.asc(), Message.message_id.asc())
    return list((await session.execute(stmt)).scalars().all())


async def get_message(session: AsyncSession, *, message_id: int) -> Message:
    stmt = select(Message).where(Message.message_id == message_id)
    message = (await session.execute(stmt)).scalar_one_or_none()
    if message is None:
        raise MessageNotFoundError(f"Message '{message_id}' was not found.")
    return message
