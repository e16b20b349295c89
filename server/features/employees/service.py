from __future__ import annotations

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from server.db.models import Employee
from server.features.shared.redact import redact_phone

from . import repo
from .errors import EmployeeConflictError, EmployeeValidationError
from .passwords import hash_password
from .types import EmployeeSummary

logger = logging.getLogger(__name__)

_MAX_ID_ATTEMPTS = 5


def _require(value: str | None, *, field_name: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise EmployeeValidationError(f"{field_name} cannot be empty.")
    return cleaned


def to_summary(row: Employee) -> EmployeeSummary:
    return EmployeeSummary(
        id=row.id,
        name=row.name,
        phone_number=row.phone_number,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


async def _unused_employee_id(session: AsyncSession) -> str:
    for _ in range(_MAX_ID_ATTEMPTS):
        candidate = repo.generate_employee_id()
        if not await repo.employee_id_taken(session, employee_id=candidate):
            return candidate
    raise EmployeeConflictError("Could not allocate a unique employee id; retry the request.")


async def create_employee(
    session: AsyncSession,
    *,
    name: str,
    phone_number: str,
    password: str,
) -> EmployeeSummary:
    normalized_name = _require(name, field_name="name")
    phone = _require(phone_number, field_name="phone_number")
    if not password:
        raise EmployeeValidationError("password cannot be empty.")
    if await repo.find_employee(session, phone_number=phone) is not None:
        raise EmployeeConflictError("Employee with this phone number already exists.")

    password_hash = await asyncio.to_thread(hash_password, password)
    employee_id = await _unused_employee_id(session)
    row = await repo.create_employee(
        session,
        employee_id=employee_id,
        name=normalized_name,
        phone_number=phone,
        password_hash=password_hash,
    )
    logger.info("Created employee %s (%s).", row.id, redact_phone(phone))
    return to_summary(row)


async def list_employees(session: AsyncSession) -> list[EmployeeSummary]:
    return [to_summary(row) for row in await repo.list_employees(session)]


async def get_employee(session: AsyncSession, *, phone_number: str) -> EmployeeSummary:
    return to_summary(await repo.get_employee(session, phone_number=phone_number))


async def update_employee(
    session: AsyncSession,
    *,
    phone_number: str,
    name: str | None = None,
    password: str | None = None,
) -> EmployeeSummary:
    if name is None and not password:
        raise EmployeeValidationError("At least one field must be provided for update.")
    normalized_name = _require(name, field_name="name") if name is not None else None

    row = await repo.get_employee(session, phone_number=phone_number)
    password_hash = await asyncio.to_thread(hash_password, password) if password else None
    updated = await repo.update_employee(
        session,
        employee=row,
        name=normalized_name,
        password_hash=password_hash,
    )
    logger.info("Updated employee %s.", updated.id)
    return to_summary(updated)


async def delete_employee(session: AsyncSession, *, phone_number: str) -> str:
    row = await repo.get_employee(session, phone_number=phone_number)
    employee_id = row.id
    await repo.delete_employee(session, employee=row)
    logger.info("Deleted employee %s.", employee_id)
    return employee_id
