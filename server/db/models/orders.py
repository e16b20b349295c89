from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, BigInteger, DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from server.db.base import Base

from .clients import Employee


class Order(Base):
    __tablename__ = "orders"

    order_number: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    id: Mapped[str | None] = mapped_column(String(10), unique=True, nullable=True, index=True)
    client_phone: Mapped[str] = mapped_column(String(15), nullable=False, index=True)
    worker_phone: Mapped[str | None] = mapped_column(
        ForeignKey("worker_phones.phone_number", ondelete="SET NULL", onupdate="CASCADE"),
        nullable=True,
        index=True,
    )
    employee_code: Mapped[str | None] = mapped_column(
        ForeignKey("employees.id", ondelete="SET NULL"),
        nullable=True,
    )
    jewellery_details: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    employee: Mapped[Employee | None] = relationship(lazy="joined")
