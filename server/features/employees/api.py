from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from server.db.session import get_db_session

from . import service
from .types import EmployeeCreateInput, EmployeeList, EmployeeSummary, EmployeeUpdateInput

router = APIRouter(prefix="/api/employees", tags=["employees"])


@router.post("", response_model=EmployeeSummary, status_code=status.HTTP_201_CREATED)
async def post_employee(
    payload: EmployeeCreateInput,
    session: AsyncSession = Depends(get_db_session),
) -> EmployeeSummary:
    return await service.create_employee(
        session,
        name=payload.name,
        phone_number=payload.phone_number,
        password=payload.password,
    )


@router.get("", response_model=EmployeeList)
async def get_employees(
    session: AsyncSession = Depends(get_db_session),
) -> EmployeeList:
    employees = await service.list_employees(session)
    return EmployeeList(count=len(employees), employees=employees)


@router.get("/{phone_number}", response_model=EmployeeSummary)
async def get_employee(
    phone_number: str,
    session: AsyncSession = Depends(get_db_session),
) -> EmployeeSummary:
    return await service.get_employee(session, phone_number=phone_number)


@router.put("/{phone_number}", response_model=EmployeeSummary)
async def put_employee(
    phone_number: str,
    payload: EmployeeUpdateInput,
    session: AsyncSession = Depends(get_db_session),
) -> EmployeeSummary:
    return await service.update_employee(
        session,
        phone_number=phone_number,
        name=payload.name,
        password=payload.password,
    )


@router.delete("/{phone_number}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_employee(
    phone_number: str,
    session: AsyncSession = Depends(get_db_session),
) -> Response:
    await service.delete_employee(session, phone_number=phone_number)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
