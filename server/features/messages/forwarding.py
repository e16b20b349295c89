from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from server.db.models import Message
from server.features.media.types import PermanenceResult
from server.features.shared.redact import redact_phone, truncate_identifier

from . import repo
from .service import validate_sender_type

logger = logging.getLogger(__name__)


class MediaPermanence(Protocol):
    async def make_permanent(self, media_id: str) -> PermanenceResult: ...


class MessageSender(Protocol):
    async def send_order_update(self, to: str, *, order_id: str, content: str) -> dict[str, Any]: ...


@dataclass(frozen=True)
class ForwardResult:
    original: Message
    forwarded: Message
    send_result: dict[str, Any]
    media: PermanenceResult | None
    media_error: str | None
    processing_time_ms: int

    @property
    def whatsapp_message_id(self) -> str | None:
        messages = self.send_result.get("messages")
        if isinstance(messages, list) and messages and isinstance(messages[0], dict):
            message_id = messages[0].get("id")
            return str(message_id) if message_id else None
        return None


def media_annotation(result: PermanenceResult) -> str:
    return f"[Media: {result.mime_type}] {result.url}"


def media_failure_annotation(media_id: str) -> str:
    return f"[Media processing failed - ID: {media_id}]"


def _append(base: str, annotation: str) -> str:
    return f"{base}\n\n{annotation}" if base.strip() else annotation


class MessageForwarder:
    """Re-sends an existing chat message into another order's conversation.

    Media on the source message is re-hosted first. A media failure only
    changes the annotation; send and persistence failures propagate.
    """

    def __init__(self, *, permanence: MediaPermanence, sender: MessageSender) -> None:
        self._permanence = permanence
        self._sender = sender

    async def compose_content(self, message: Message) -> tuple[str, PermanenceResult | None, str | None]:
        content = message.content or ""
        if not message.media_id:
            return content, None, None

        try:
            media = await self._permanence.make_permanent(message.media_id)
        except Exception as exc:
            logger.error(
                "Media for message %d could not be processed (%s: %s); forwarding text only.",
                message.message_id,
                type(exc).__name__,
                exc,
            )
            return (
                _append(content, media_failure_annotation(message.media_id)),
                None,
                f"{type(exc).__name__}: {exc}",
            )

        if media.is_fallback:
            logger.warning(
                "Message %d forwarded with an expiring media link for %s.",
                message.message_id,
                truncate_identifier(message.media_id),
            )
        return _append(content, media_annotation(media)), media, None

    async def forward(
        self,
        session: AsyncSession,
        *,
        message_id: int,
        target_order_id: str,
        recipient: str,
        sender_type: str,
    ) -> ForwardResult:
        started = time.perf_counter()
        normalized_sender = validate_sender_type(sender_type)
        original = await repo.get_message(session, message_id=message_id)
        await repo.ensure_order_exists(session, order_id=target_order_id)

        content, media, media_error = await self.compose_content(original)

        send_result = await self._sender.send_order_update(
            recipient,
            order_id=target_order_id,
            content=content,
        )

        forwarded = await repo.create_message(
            session,
            order_id=target_order_id,
            content=content,
            sender_type=normalized_sender,
            media_id=original.media_id,
            forwarded_from=original.sender_type,
            original_message_id=original.message_id,
        )

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Forwarded message %d from order %s to order %s for %s as message %d in %dms.",
            original.message_id,
            original.order_id,
            target_order_id,
            redact_phone(recipient),
            forwarded.message_id,
            elapsed_ms,
        )
        return ForwardResult(
            original=original,
            forwarded=forwarded,
            send_result=send_result,
            media=media,
            media_error=media_error,
            processing_time_ms=elapsed_ms,
        )


__all__ = [
    "ForwardResult",
    "MediaPermanence",
    "MessageForwarder",
    "MessageSender",
    "media_annotation",
    "media_failure_annotation",
]
