from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from server.db.models import Worker, WorkerPhone
from server.features.shared.redact import redact_phone

from . import repo
from .errors import WorkerNotFoundError, WorkerPhoneConflictError, WorkerValidationError
from .types import WorkerPhoneSummary, WorkerSummary

logger = logging.getLogger(__name__)


def _clean_phone(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _require_name(value: str | None) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise WorkerValidationError("name cannot be empty.")
    return cleaned


def to_summary(worker: Worker) -> WorkerSummary:
    phones = sorted(worker.phones, key=lambda phone: (not phone.is_primary, phone.id or 0))
    return WorkerSummary(
        id=worker.id,
        name=worker.name,
        phones=[
            WorkerPhoneSummary(phone_number=phone.phone_number, is_primary=bool(phone.is_primary))
            for phone in phones
        ],
        created_at=worker.created_at,
        updated_at=worker.updated_at,
    )


async def _ensure_available(
    session: AsyncSession,
    *,
    phone_number: str,
    label: str,
    worker_id: int | None = None,
) -> None:
    owners = await repo.find_phone_owners(session, phone_numbers=[phone_number])
    owner = owners.get(phone_number)
    if owner is not None and owner != worker_id:
        logger.info("Rejected %s phone %s: already registered.", label, redact_phone(phone_number))
        raise WorkerPhoneConflictError(f"{label.capitalize()} phone number already exists for another worker.")


async def create_worker(
    session: AsyncSession,
    *,
    name: str,
    primary_phone: str,
    secondary_phone: str | None = None,
) -> WorkerSummary:
    normalized_name = _require_name(name)
    primary = _clean_phone(primary_phone)
    if primary is None:
        raise WorkerValidationError("primary_phone is required.")
    secondary = _clean_phone(secondary_phone)
    if secondary == primary:
        raise WorkerValidationError("secondary_phone must differ from primary_phone.")

    await _ensure_available(session, phone_number=primary, label="primary")
    if secondary is not None:
        await _ensure_available(session, phone_number=secondary, label="secondary")

    worker = await repo.create_worker(
        session,
        name=normalized_name,
        primary_phone=primary,
        secondary_phone=secondary,
    )
    logger.info("Created worker %d with %d phone(s).", worker.id, len(worker.phones))
    return to_summary(worker)


async def list_workers(session: AsyncSession) -> list[WorkerSummary]:
    return [to_summary(worker) for worker in await repo.list_workers(session)]


async def get_worker_by_phone(session: AsyncSession, *, phone_number: str) -> WorkerSummary:
    return to_summary(await repo.get_worker_by_phone(session, phone_number=phone_number))


async def update_worker(
    session: AsyncSession,
    *,
    phone_number: str,
    name: str,
    primary_phone: str | None = None,
    secondary_phone: str | None = None,
) -> WorkerSummary:
    normalized_name = _require_name(name)
    worker = await repo.get_worker_by_phone(session, phone_number=phone_number)
    primary = _clean_phone(primary_phone)
    secondary = _clean_phone(secondary_phone)

    if primary is not None:
        await _ensure_available(session, phone_number=primary, label="primary", worker_id=worker.id)
    if secondary is not None:
        await _ensure_available(session, phone_number=secondary, label="secondary", worker_id=worker.id)

    worker.name = normalized_name
    by_number = {phone.phone_number: phone for phone in worker.phones}

    if primary is not None:
        current = next((phone for phone in worker.phones if phone.is_primary), None)
        if current is None or current.phone_number != primary:
            for phone in worker.phones:
                phone.is_primary = False
            existing = by_number.get(primary)
            if existing is not None:
                existing.is_primary = True
            else:
                added = WorkerPhone(phone_number=primary, is_primary=True)
                worker.phones.append(added)
                by_number[primary] = added

    if secondary is not None and secondary not in by_number:
        worker.phones.append(WorkerPhone(phone_number=secondary, is_primary=False))

    updated = await repo.save_worker(session, worker=worker)
    logger.info("Updated worker %d.", updated.id)
    return to_summary(updated)


async def delete_worker(session: AsyncSession, *, phone_number: str) -> int:
    worker = await repo.get_worker_by_phone(session, phone_number=phone_number)
    worker_id = worker.id
    await repo.delete_worker(session, worker=worker)
    logger.info("Deleted worker %d.", worker_id)
    return worker_id


async def delete_worker_phone(
    session: AsyncSession,
    *,
    worker_id: int,
    phone_number: str,
) -> WorkerSummary:
    worker = await repo.get_worker(session, worker_id=worker_id)
    target = next((phone for phone in worker.phones if phone.phone_number == phone_number), None)
    if target is None:
        raise WorkerNotFoundError(
            f"Phone '{phone_number}' is not registered for worker '{worker_id}'.",
            code="PHONE_NOT_FOUND",
            error="Phone number not found",
        )
    if len(worker.phones) <= 1:
        raise WorkerValidationError(
            "Cannot delete the only phone number. Worker must have at least one phone number."
        )

    worker.phones.remove(target)
    if target.is_primary:
        promoted = min(worker.phones, key=lambda phone: phone.id or 0)
        promoted.is_primary = True
        logger.info("Promoted %s to primary for worker %d.", redact_phone(promoted.phone_number), worker_id)

    updated = await repo.save_worker(session, worker=worker)
    logger.info("Removed phone %s from worker %d.", redact_phone(phone_number), worker_id)
    return to_summary(updated)
