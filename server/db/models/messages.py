from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from server.db.base import Base

SENDER_TYPES = ("enterprise", "client", "worker")


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint(
            "sender_type IN ('enterprise', 'client', 'worker')",
            name="ck_messages_sender_type",
        ),
    )

    message_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    media_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sender_type: Mapped[str] = mapped_column(String(16), nullable=False)
    forwarded_from: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    original_message_id: Mapped[int | None] = mapped_column(
        ForeignKey("messages.message_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    original_message: Mapped[Message | None] = relationship(
        remote_side="Message.message_id",
        lazy="joined",
        join_depth=1,
    )
