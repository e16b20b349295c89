from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MessageCreateInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    order_id: str = Field(min_length=1, max_length=10)
    content: str
    sender_type: str
    media_id: str | None = Field(default=None, max_length=100)
    forwarded_from: str | None = Field(default=None, max_length=50)
    original_message_id: int | None = None


class MessageForwardInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    order_id: str = Field(min_length=1, max_length=10)
    recipient_phone: str = Field(min_length=1, max_length=20)
    sender_type: str = "enterprise"


class OriginalMessageSummary(BaseModel):
    order_id: str
    content: str
    sender_type: str
    created_at: datetime


class MessageSummary(BaseModel):
    message_id: int
    order_id: str
    content: str
    media_id: str | None
    sender_type: str
    forwarded_from: str | None
    original_message_id: int | None
    created_at: datetime
    is_forwarded: bool


class MessageDetail(MessageSummary):
    original_message: OriginalMessageSummary | None = None


class MessageList(BaseModel):
    count: int
    messages: list[MessageSummary]


class OrderMessageList(BaseModel):
    order_id: str
    count: int
    messages: list[MessageDetail]


class ForwardedMediaInfo(BaseModel):
    url: str
    mime_type: str
    is_permanent: bool
    is_fallback: bool


class MessageForwardResponse(BaseModel):
    success: bool = True
    original: MessageSummary
    forwarded: MessageDetail
    media: ForwardedMediaInfo | None = None
    media_error: str | None = None
    whatsapp_message_id: str | None = None
    processing_time_ms: int
