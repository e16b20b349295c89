from __future__ import annotations

import importlib
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient


@pytest.mark.asyncio
async def test_lifespan_creates_tables_when_enabled_and_disposes_engine(monkeypatch):
    main = importlib.import_module("server.main")

    calls: list[str] = []

    async def _fake_create_tables():
        calls.append("create")

    async def _fake_dispose():
        calls.append("dispose")

    monkeypatch.setattr(main, "create_tables", _fake_create_tables)
    monkeypatch.setattr(main, "async_engine", SimpleNamespace(dispose=_fake_dispose))
    monkeypatch.setattr(main.settings, "db_create_tables", True)

    async with main.lifespan(main.app):
        assert calls == ["create"]

    assert calls == ["create", "dispose"]


@pytest.mark.asyncio
async def test_lifespan_skips_table_creation_by_default(monkeypatch):
    main = importlib.import_module("server.main")

    calls: list[str] = []

    async def _fake_create_tables():
        calls.append("create")

    async def _fake_dispose():
        calls.append("dispose")

    monkeypatch.setattr(main, "create_tables", _fake_create_tables)
    monkeypatch.setattr(main, "async_engine", SimpleNamespace(dispose=_fake_dispose))
    monkeypatch.setattr(main.settings, "db_create_tables", False)

    async with main.lifespan(main.app):
        pass

    assert calls == ["dispose"]


def test_root_and_health_endpoints():
    main = importlib.import_module("server.main")
    client = TestClient(main.app)

    assert client.get("/").json() == {"status": "ok", "service": "bsgold-orders"}
    assert client.get("/health").json() == {"healthy": True}
