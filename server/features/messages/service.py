from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from server.db.models import SENDER_TYPES, Message
from server.features.whatsapp.client import is_valid_media_id

from . import repo
from .errors import MessageValidationError
from .types import MessageDetail, MessageSummary, OriginalMessageSummary

logger = logging.getLogger(__name__)


def validate_sender_type(value: str | None, *, field_name: str = "sender_type") -> str:
    normalized = (value or "").strip().lower()
    if normalized not in SENDER_TYPES:
        raise MessageValidationError(
            f"Invalid {field_name}. Must be one of: {', '.join(SENDER_TYPES)}."
        )
    return normalized


def _validate_content(value: str | None) -> str:
    if value is None or not value.strip():
        raise MessageValidationError("content cannot be empty.")
    return value


def _validate_media_id(value: str | None) -> str | None:
    cleaned = _clean_optional(value)
    if cleaned is not None and not is_valid_media_id(cleaned):
        raise MessageValidationError("media_id must be a WhatsApp media identifier.")
    return cleaned


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def to_summary(row: Message) -> MessageSummary:
    return MessageSummary(
        message_id=row.message_id,
        order_id=row.order_id,
        content=row.content,
        media_id=row.media_id,
        sender_type=row.sender_type,
        forwarded_from=row.forwarded_from,
        original_message_id=row.original_message_id,
        created_at=row.created_at,
        is_forwarded=row.forwarded_from is not None,
    )


def to_detail(row: Message, *, original: Message | None = None) -> MessageDetail:
    original_summary = None
    source = None
    if row.original_message_id is not None:
        source = original if original is not None else row.original_message
    if source is not None:
        original_summary = OriginalMessageSummary(
            order_id=source.order_id,
            content=source.content,
            sender_type=source.sender_type,
            created_at=source.created_at,
        )
    return MessageDetail(**to_summary(row).model_dump(), original_message=original_summary)


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
    normalized_sender = validate_sender_type(sender_type)
    normalized_content = _validate_content(content)
    normalized_media_id = _validate_media_id(media_id)
    normalized_forwarded_from = (
        validate_sender_type(forwarded_from, field_name="forwarded_from")
        if _clean_optional(forwarded_from) is not None
        else None
    )
    if original_message_id is not None:
        await repo.get_message(session, message_id=original_message_id)

    row = await repo.create_message(
        session,
        order_id=order_id.strip(),
        content=normalized_content,
        sender_type=normalized_sender,
        media_id=normalized_media_id,
        forwarded_from=normalized_forwarded_from,
        original_message_id=original_message_id,
    )
    logger.info(
        "Saved message %d on order %s (sender=%s, media=%s).",
        row.message_id,
        row.order_id,
        row.sender_type,
        "yes" if row.media_id else "no",
    )
    return row


async def list_messages(session: AsyncSession) -> list[MessageSummary]:
    rows = await repo.list_messages(session)
    return [to_summary(row) for row in rows]


async def list_messages_for_order(session: AsyncSession, *, order_id: str) -> list[MessageDetail]:
    rows = await repo.list_messages_for_order(session, order_id=order_id)
    return [to_detail(row) for row in rows]


async def list_forwarded_messages_for_order(
    session: AsyncSession,
    *,
    order_id: str,
) -> list[MessageDetail]:
    rows = await repo.list_messages_for_order(session, order_id=order_id, forwarded_only=True)
    return [to_detail(row) for row in rows]


async def get_message(session: AsyncSession, *, message_id: int) -> MessageDetail:
    row = await repo.get_message(session, message_id=message_id)
    return to_detail(row)
