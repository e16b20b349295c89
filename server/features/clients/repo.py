from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from server.db.models import Client

from .errors import ClientNotFoundError


async def find_client(session: AsyncSession, *, phone_number: str) -> Client | None:
    stmt = select(Client).where(Client.phone_number == phone_number)
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_client(session: AsyncSession, *, phone_number: str) -> Client:
    client = await find_client(session, phone_number=phone_number)
    if client is None:
        raise ClientNotFoundError(f"Client '{phone_number}' was not found.")
    return client


async def create_client(session: AsyncSession, *, phone_number: str, name: str) -> Client:
    client = Client(phone_number=phone_number, name=name)
    session.add(client)
    await session.commit()
    await session.refresh(client)
    return client


async def list_clients(session: AsyncSession) -> list[Client]:
    stmt = select(Client).order_by(Client.created_at.desc(), Client.phone_number.asc())
    return list((await session.execute(stmt)).scalars().all())


async def update_client(session: AsyncSession, *, client: Client, name: str) -> Client:
    client.name = name
    await session.commit()
    await session.refresh(client)
    return client


async def delete_client(session: AsyncSession, *, client: Client) -> None:
    await session.delete(client)
    await session.commit()
