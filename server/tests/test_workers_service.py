from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from server.features.workers import service as workers_service
from server.features.workers.errors import (
    WorkerNotFoundError,
    WorkerPhoneConflictError,
    WorkerValidationError,
)


class _DummySession:
    pass


def _phone(phone_id, number, *, primary=False):
    return SimpleNamespace(id=phone_id, phone_number=number, is_primary=primary)


def _worker(*phones, worker_id=1, name="Ravi"):
    now = datetime.now(timezone.utc)
    return SimpleNamespace(id=worker_id, name=name, phones=list(phones), created_at=now, updated_at=now)


@pytest.fixture
def saved(monkeypatch):
    calls: list[object] = []

    async def _fake_save_worker(_session, *, worker):
        calls.append(worker)
        return worker

    monkeypatch.setattr(workers_service.repo, "save_worker", _fake_save_worker)
    return calls


def _patch_lookup(monkeypatch, worker, *, owners=None):
    async def _fake_get_worker(_session, *, worker_id):
        return worker

    async def _fake_get_worker_by_phone(_session, *, phone_number):
        return worker

    async def _fake_find_phone_owners(_session, *, phone_numbers):
        return {number: owner for number, owner in (owners or {}).items() if number in phone_numbers}

    monkeypatch.setattr(workers_service.repo, "get_worker", _fake_get_worker)
    monkeypatch.setattr(workers_service.repo, "get_worker_by_phone", _fake_get_worker_by_phone)
    monkeypatch.setattr(workers_service.repo, "find_phone_owners", _fake_find_phone_owners)


def test_create_worker_rejects_phone_owned_by_another_worker(monkeypatch):
    _patch_lookup(monkeypatch, None, owners={"111": 9})

    with pytest.raises(WorkerPhoneConflictError) as excinfo:
        asyncio.run(workers_service.create_worker(_DummySession(), name="Ravi", primary_phone="111"))

    assert excinfo.value.status_code == 409


def test_create_worker_rejects_duplicate_secondary():
    with pytest.raises(WorkerValidationError):
        asyncio.run(
            workers_service.create_worker(
                _DummySession(),
                name="Ravi",
                primary_phone="111",
                secondary_phone=" 111 ",
            )
        )


def test_delete_only_phone_is_rejected(monkeypatch, saved):
    _patch_lookup(monkeypatch, _worker(_phone(1, "111", primary=True)))

    with pytest.raises(WorkerValidationError):
        asyncio.run(workers_service.delete_worker_phone(_DummySession(), worker_id=1, phone_number="111"))

    assert saved == []


def test_delete_unknown_phone_is_not_found(monkeypatch, saved):
    _patch_lookup(monkeypatch, _worker(_phone(1, "111", primary=True), _phone(2, "112")))

    with pytest.raises(WorkerNotFoundError) as excinfo:
        asyncio.run(workers_service.delete_worker_phone(_DummySession(), worker_id=1, phone_number="999"))

    assert excinfo.value.code == "PHONE_NOT_FOUND"


def test_deleting_primary_promotes_oldest_remaining_phone(monkeypatch, saved):
    worker = _worker(_phone(1, "111", primary=True), _phone(5, "115"), _phone(3, "113"))
    _patch_lookup(monkeypatch, worker)

    summary = asyncio.run(
        workers_service.delete_worker_phone(_DummySession(), worker_id=1, phone_number="111")
    )

    assert [(p.phone_number, p.is_primary) for p in summary.phones] == [("113", True), ("115", False)]


def test_update_worker_swaps_primary_to_existing_secondary(monkeypatch, saved):
    worker = _worker(_phone(1, "111", primary=True), _phone(2, "112"))
    _patch_lookup(monkeypatch, worker, owners={"112": 1})

    summary = asyncio.run(
        workers_service.update_worker(
            _DummySession(),
            phone_number="111",
            name=" Ravi K ",
            primary_phone="112",
        )
    )

    assert summary.name == "Ravi K"
    assert [(p.phone_number, p.is_primary) for p in summary.phones] == [("112", True), ("111", False)]


def test_update_worker_adds_new_secondary(monkeypatch, saved):
    worker = _worker(_phone(1, "111", primary=True))
    _patch_lookup(monkeypatch, worker)

    summary = asyncio.run(
        workers_service.update_worker(
            _DummySession(),
            phone_number="111",
            name="Ravi",
            secondary_phone="113",
        )
    )

    assert [p.phone_number for p in summary.phones] == ["111", "113"]


def test_update_worker_rejects_phone_of_another_worker(monkeypatch, saved):
    _patch_lookup(monkeypatch, _worker(_phone(1, "111", primary=True)), owners={"222": 2})

    with pytest.raises(WorkerPhoneConflictError):
        asyncio.run(
            workers_service.update_worker(
                _DummySession(),
                phone_number="111",
                name="Ravi",
                secondary_phone="222",
            )
        )

    assert saved == []
