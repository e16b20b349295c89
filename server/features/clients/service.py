from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from server.db.models import Client
from server.features.shared.redact import redact_phone

from . import repo
from .errors import ClientConflictError, ClientValidationError
from .types import ClientSummary

logger = logging.getLogger(__name__)


def _require(value: str | None, *, field_name: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ClientValidationError(f"{field_name} cannot be empty.")
    return cleaned


def to_summary(row: Client) -> ClientSummary:
    return ClientSummary(
        phone_number=row.phone_number,
        name=row.name,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


async def create_client(session: AsyncSession, *, phone_number: str, name: str) -> ClientSummary:
    phone = _require(phone_number, field_name="phone_number")
    normalized_name = _require(name, field_name="name")
    if await repo.find_client(session, phone_number=phone) is not None:
        raise ClientConflictError("Client with this phone number already exists.")
    row = await repo.create_client(session, phone_number=phone, name=normalized_name)
    logger.info("Created client %s.", redact_phone(phone))
    return to_summary(row)


async def list_clients(session: AsyncSession) -> list[ClientSummary]:
    return [to_summary(row) for row in await repo.list_clients(session)]


async def get_client(session: AsyncSession, *, phone_number: str) -> ClientSummary:
    return to_summary(await repo.get_client(session, phone_number=phone_number))


async def update_client(session: AsyncSession, *, phone_number: str, name: str) -> ClientSummary:
    normalized_name = _require(name, field_name="name")
    row = await repo.get_client(session, phone_number=phone_number)
    return to_summary(await repo.update_client(session, client=row, name=normalized_name))


async def delete_client(session: AsyncSession, *, phone_number: str) -> None:
    row = await repo.get_client(session, phone_number=phone_number)
    await repo.delete_client(session, client=row)
    logger.info("Deleted client %s.", redact_phone(phone_number))
