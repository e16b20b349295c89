from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from server.db.session import get_db_session

from . import service
from .types import ClientCreateInput, ClientList, ClientSummary, ClientUpdateInput

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.post("", response_model=ClientSummary, status_code=status.HTTP_201_CREATED)
async def post_client(
    payload: ClientCreateInput,
    session: AsyncSession = Depends(get_db_session),
) -> ClientSummary:
    return await service.create_client(session, phone_number=payload.phone_number, name=payload.name)


@router.get("", response_model=ClientList)
async def get_clients(
    session: AsyncSession = Depends(get_db_session),
) -> ClientList:
    clients = await service.list_clients(session)
    return ClientList(count=len(clients), clients=clients)


@router.get("/{phone_number}", response_model=ClientSummary)
async def get_client(
    phone_number: str,
    session: AsyncSession = Depends(get_db_session),
) -> ClientSummary:
    return await service.get_client(session, phone_number=phone_number)


@router.put("/{phone_number}", response_model=ClientSummary)
async def put_client(
    phone_number: str,
    payload: ClientUpdateInput,
    session: AsyncSession = Depends(get_db_session),
) -> ClientSummary:
    return await service.update_client(session, phone_number=phone_number, name=payload.name)


@router.delete("/{phone_number}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_client(
    phone_number: str,
    session: AsyncSession = Depends(get_db_session),
) -> Response:
    await service.delete_client(session, phone_number=phone_number)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
