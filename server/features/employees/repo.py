from __future__ import annotations

import secrets
import time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from server.db.models import Employee

from .errors import EmployeeNotFoundError


def generate_employee_id() -> str:
    """``EMP`` + last three millisecond-clock digits + three random digits."""
    millis = str(time.time_ns() // 1_000_000)
    return f"EMP{millis[-3:]}{secrets.randbelow(1000):03d}"


async def employee_id_taken(session: AsyncSession, *, employee_id: str) -> bool:
    stmt = select(Employee.id).where(Employee.id == employee_id)
    return (await session.execute(stmt)).scalar_one_or_none() is not None


async def find_employee(session: AsyncSession, *, phone_number: str) -> Employee | None:
    stmt = select(Employee).where(Employee.phone_number == phone_number)
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_employee(session: AsyncSession, *, phone_number: str) -> Employee:
    employee = await find_employee(session, phone_number=phone_number)
    if employee is None:
        raise EmployeeNotFoundError(f"No employee is registered with phone '{phone_number}'.")
    return employee


async def create_employee(
    session: AsyncSession,
    *,
    employee_id: str,
    name: str,
    phone_number: str,
    password_hash: str,
) -> Employee:
    employee = Employee(
        id=employee_id,
        name=name,
        phone_number=phone_number,
        password_hash=password_hash,
    )
    session.add(employee)
    await session.commit()
    await session.refresh(employee)
    return employee


async def list_employees(session: AsyncSession) -> list[Employee]:
    stmt = select(Employee).order_by(Employee.created_at.desc(), Employee.id.asc())
    return list((await session.execute(stmt)).scalars().all())


async def update_employee(
    session: AsyncSession,
    *,
    employee: Employee,
    name: str | None = None,
    password_hash: str | None = None,
) -> Employee:
    if name is not None:
        employee.name = name
    if password_hash is not None:
        employee.password_hash = password_hash
    await session.commit()
    await session.refresh(employee)
    return employee


async def delete_employee(session: AsyncSession, *, employee: Employee) -> None:
    await session.delete(employee)
    await session.commit()
