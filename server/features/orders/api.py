from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from server.db.session import get_db_session
from server.features.whatsapp import WhatsAppClient, get_whatsapp_client

from . import service
from .types import (
    OrderCreated,
    OrderCreateInput,
    OrderDeleted,
    OrderList,
    OrderReassigned,
    OrderReassignInput,
    OrderSummary,
    OrderUpdateInput,
)

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderCreated, status_code=status.HTTP_201_CREATED)
async def post_order(
    payload: OrderCreateInput,
    session: AsyncSession = Depends(get_db_session),
    whatsapp: WhatsAppClient = Depends(get_whatsapp_client),
) -> OrderCreated:
    return await service.create_order(
        session,
        client_phone=payload.client_details.phone,
        jewellery_details=payload.jewellery_details,
        worker_phone=payload.worker_phone,
        employee_code=payload.employee_code,
        notifier=whatsapp,
    )


@router.get("", response_model=OrderList)
async def get_orders(
    session: AsyncSession = Depends(get_db_session),
) -> OrderList:
    return OrderList(orders=await service.list_orders(session))


@router.get("/worker/{phone_number}/pending", response_model=OrderList)
async def get_worker_pending_orders(
    phone_number: str,
    session: AsyncSession = Depends(get_db_session),
) -> OrderList:
    return OrderList(orders=await service.list_pending_orders_for_worker(session, phone_number=phone_number))


@router.put("/{order_id}/reassign", response_model=OrderReassigned)
async def put_order_reassign(
    order_id: str,
    payload: OrderReassignInput,
    session: AsyncSession = Depends(get_db_session),
    whatsapp: WhatsAppClient = Depends(get_whatsapp_client),
) -> OrderReassigned:
    return await service.reassign_worker(
        session,
        order_id=order_id,
        worker_phone=payload.worker_phone,
        notifier=whatsapp,
    )


@router.put("/{order_id}", response_model=OrderSummary)
async def put_order(
    order_id: str,
    payload: OrderUpdateInput,
    session: AsyncSession = Depends(get_db_session),
) -> OrderSummary:
    return await service.update_order(
        session,
        order_id=order_id,
        client_phone=payload.client_details.phone if payload.client_details else None,
        jewellery_details=payload.jewellery_details,
        worker_phone=payload.worker_phone,
        update_worker_phone="worker_phone" in payload.model_fields_set,
    )


@router.delete("/{order_id}", response_model=OrderDeleted)
async def remove_order(
    order_id: str,
    session: AsyncSession = Depends(get_db_session),
) -> OrderDeleted:
    return OrderDeleted(order_id=await service.delete_order(session, order_id=order_id))
