from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from server.db.session import get_db_session
from server.features.media.permanence import MediaPermanenceService
from server.features.media.wiring import get_permanence_service
from server.features.whatsapp import WhatsAppClient, get_whatsapp_client

from . import service
from .forwarding import MessageForwarder
from .types import (
    ForwardedMediaInfo,
    MessageCreateInput,
    MessageDetail,
    MessageForwardInput,
    MessageForwardResponse,
    MessageList,
    MessageSummary,
    OrderMessageList,
)

router = APIRouter(prefix="/api/messages", tags=["messages"])


def get_message_forwarder(
    permanence: MediaPermanenceService = Depends(get_permanence_service),
    whatsapp: WhatsAppClient = Depends(get_whatsapp_client),
) -> MessageForwarder:
    return MessageForwarder(permanence=permanence, sender=whatsapp)


@router.post("", response_model=MessageSummary, status_code=status.HTTP_201_CREATED)
async def post_message(
    payload: MessageCreateInput,
    session: AsyncSession = Depends(get_db_session),
) -> MessageSummary:
    row = await service.create_message(
        session,
        order_id=payload.order_id,
        content=payload.content,
        sender_type=payload.sender_type,
        media_id=payload.media_id,
        forwarded_from=payload.forwarded_from,
        original_message_id=payload.original_message_id,
    )
    return service.to_summary(row)


@router.get("", response_model=MessageList)
async def get_messages(
    session: AsyncSession = Depends(get_db_session),
) -> MessageList:
    messages = await service.list_messages(session)
    return MessageList(count=len(messages), messages=messages)


@router.get("/order/{order_id}", response_model=OrderMessageList)
async def get_order_messages(
    order_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> OrderMessageList:
    messages = await service.list_messages_for_order(session, order_id=order_id)
    return OrderMessageList(order_id=order_id, count=len(messages), messages=messages)


@router.get("/order/{order_id}/forwarded", response_model=OrderMessageList)
async def get_forwarded_order_messages(
    order_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> OrderMessageList:
    messages = await service.list_forwarded_messages_for_order(session, order_id=order_id)
    return OrderMessageList(order_id=order_id, count=len(messages), messages=messages)


@router.get("/{message_id}", response_model=MessageDetail)
async def get_message_by_id(
    message_id: int,
    session: AsyncSession = Depends(get_db_session),
) -> MessageDetail:
    return await service.get_message(session, message_id=message_id)


@router.post("/{message_id}/forward", response_model=MessageForwardResponse, status_code=status.HTTP_201_CREATED)
async def forward_message(
    message_id: int,
    payload: MessageForwardInput,
    session: AsyncSession = Depends(get_db_session),
    forwarder: MessageForwarder = Depends(get_message_forwarder),
) -> MessageForwardResponse:
    result = await forwarder.forward(
        session,
        message_id=message_id,
        target_order_id=payload.order_id,
        recipient=payload.recipient_phone,
        sender_type=payload.sender_type,
    )
    media = None
    if result.media is not None:
        media = ForwardedMediaInfo(
            url=result.media.url,
            mime_type=result.media.mime_type,
            is_permanent=result.media.is_permanent,
            is_fallback=result.media.is_fallback,
        )
    return MessageForwardResponse(
        original=service.to_summary(result.original),
        forwarded=service.to_detail(result.forwarded, original=result.original),
        media=media,
        media_error=result.media_error,
        whatsapp_message_id=result.whatsapp_message_id,
        processing_time_ms=result.processing_time_ms,
    )
