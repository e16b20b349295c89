from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from server.db.session import get_db_session
from server.features.orders.service import reassign_worker
from server.features.orders.types import OrderReassigned
from server.features.whatsapp import WhatsAppClient, get_whatsapp_client

from . import service
from .types import WorkerCreateInput, WorkerDeleted, WorkerList, WorkerSummary, WorkerUpdateInput

router = APIRouter(prefix="/api/workers", tags=["workers"])


@router.post("", response_model=WorkerSummary, status_code=status.HTTP_201_CREATED)
async def post_worker(
    payload: WorkerCreateInput,
    session: AsyncSession = Depends(get_db_session),
) -> WorkerSummary:
    return await service.create_worker(
        session,
        name=payload.name,
        primary_phone=payload.primary_phone,
        secondary_phone=payload.secondary_phone,
    )


@router.get("", response_model=WorkerList)
async def get_workers(
    session: AsyncSession = Depends(get_db_session),
) -> WorkerList:
    workers = await service.list_workers(session)
    return WorkerList(count=len(workers), workers=workers)


@router.get("/{phone_number}", response_model=WorkerSummary)
async def get_worker(
    phone_number: str,
    session: AsyncSession = Depends(get_db_session),
) -> WorkerSummary:
    return await service.get_worker_by_phone(session, phone_number=phone_number)


@router.put("/{phone_number}", response_model=WorkerSummary)
async def put_worker(
    phone_number: str,
    payload: WorkerUpdateInput,
    session: AsyncSession = Depends(get_db_session),
) -> WorkerSummary:
    return await service.update_worker(
        session,
        phone_number=phone_number,
        name=payload.name,
        primary_phone=payload.primary_phone,
        secondary_phone=payload.secondary_phone,
    )


@router.delete("/{phone_number}", response_model=WorkerDeleted)
async def remove_worker(
    phone_number: str,
    session: AsyncSession = Depends(get_db_session),
) -> WorkerDeleted:
    worker_id = await service.delete_worker(session, phone_number=phone_number)
    return WorkerDeleted(worker_id=worker_id, phone_number=phone_number)


@router.delete("/{worker_id}/phone/{phone_number}", response_model=WorkerSummary)
async def remove_worker_phone(
    worker_id: int,
    phone_number: str,
    session: AsyncSession = Depends(get_db_session),
) -> WorkerSummary:
    return await service.delete_worker_phone(session, worker_id=worker_id, phone_number=phone_number)


@router.post("/reassign/{order_id}/{new_worker_phone}", response_model=OrderReassigned)
async def reassign_order_worker(
    order_id: str,
    new_worker_phone: str,
    session: AsyncSession = Depends(get_db_session),
    whatsapp: WhatsAppClient = Depends(get_whatsapp_client),
) -> OrderReassigned:
    return await reassign_worker(
        session,
        order_id=order_id,
        worker_phone=new_worker_phone,
        notifier=whatsapp,
    )
