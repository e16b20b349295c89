from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from server.db.models import Worker, WorkerPhone

from .errors import WorkerNotFoundError


def _worker_query():
    return (
        select(Worker)
        .options(selectinload(Worker.phones))
        .execution_options(populate_existing=True)
    )


async def get_worker(session: AsyncSession, *, worker_id: int) -> Worker:
    worker = (await session.execute(_worker_query().where(Worker.id == worker_id))).scalar_one_or_none()
    if worker is None:
        raise WorkerNotFoundError(f"Worker '{worker_id}' was not found.")
    return worker


async def get_worker_phone(session: AsyncSession, *, phone_number: str) -> WorkerPhone | None:
    stmt = select(WorkerPhone).where(WorkerPhone.phone_number == phone_number)
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_worker_by_phone(session: AsyncSession, *, phone_number: str) -> Worker:
    stmt = _worker_query().join(WorkerPhone, WorkerPhone.worker_id == Worker.id).where(
        WorkerPhone.phone_number == phone_number
    )
    worker = (await session.execute(stmt)).scalar_one_or_none()
    if worker is None:
        raise WorkerNotFoundError(f"No worker is registered with phone '{phone_number}'.")
    return worker


async def list_workers(session: AsyncSession) -> list[Worker]:
    stmt = _worker_query().order_by(Worker.name.asc(), Worker.id.asc())
    return list((await session.execute(stmt)).scalars().all())


async def find_phone_owners(
    session: AsyncSession,
    *,
    phone_numbers: Iterable[str],
) -> dict[str, int]:
    numbers = [number for number in phone_numbers if number]
    if not numbers:
        return {}
    stmt = select(WorkerPhone.phone_number, WorkerPhone.worker_id).where(
        WorkerPhone.phone_number.in_(numbers)
    )
    return {number: worker_id for number, worker_id in (await session.execute(stmt)).all()}


async def list_phone_numbers_for(session: AsyncSession, *, phone_number: str) -> list[str]:
    """Every phone of the worker owning ``phone_number``, primary first."""
    owner = await get_worker_phone(session, phone_number=phone_number)
    if owner is None:
        return [phone_number]
    stmt = (
        select(WorkerPhone.phone_number)
        .where(WorkerPhone.worker_id == owner.worker_id)
        .order_by(WorkerPhone.is_primary.desc(), WorkerPhone.id.asc())
    )
    return list((await session.execute(stmt)).scalars().all())


async def get_primary_phone(session: AsyncSession, *, worker_id: int) -> str | None:
    stmt = (
        select(WorkerPhone.phone_number)
        .where(WorkerPhone.worker_id == worker_id)
        .order_by(WorkerPhone.is_primary.desc(), WorkerPhone.id.asc())
        .limit(1)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def create_worker(
    session: AsyncSession,
    *,
    name: str,
    primary_phone: str,
    secondary_phone: str | None,
) -> Worker:
    phones = [WorkerPhone(phone_number=primary_phone, is_primary=True)]
    if secondary_phone:
        phones.append(WorkerPhone(phone_number=secondary_phone, is_primary=False))
    worker = Worker(name=name, phones=phones)
    session.add(worker)
    await session.commit()
    return await get_worker(session, worker_id=worker.id)


async def save_worker(session: AsyncSession, *, worker: Worker) -> Worker:
    await session.commit()
    return await get_worker(session, worker_id=worker.id)


async def delete_worker(session: AsyncSession, *, worker: Worker) -> None:
    await session.delete(worker)
    await session.commit()
