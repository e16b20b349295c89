from __future__ import annotations

import importlib
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from server.db.session import get_db_session
from server.features.media.types import PermanenceResult
from server.features.orders.errors import OrderNotFoundError
from server.main import app

messages_api = importlib.import_module("server.features.messages.api")
messages_service = importlib.import_module("server.features.messages.service")


async def _override_db():
    yield object()


def _row(**overrides):
    values = dict(
        message_id=1,
        order_id="BS2500001",
        content="Hello",
        media_id=None,
        sender_type="client",
        forwarded_from=None,
        original_message_id=None,
        created_at=datetime(2025, 1, 2, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def client():
    app.dependency_overrides[get_db_session] = _override_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_post_message_returns_created_summary(client, monkeypatch):
    async def _fake_create_message(_session, **fields):
        return _row(**{key: value for key, value in fields.items() if value is not None})

    monkeypatch.setattr(messages_service.repo, "create_message", _fake_create_message)

    response = client.post(
        "/api/messages",
        json={"order_id": "BS2500001", "content": "Hello", "sender_type": "client"},
    )

    assert response.status_code == 201
    payload = response.json()
    assert payload["message_id"] == 1
    assert payload["is_forwarded"] is False


def test_post_message_with_unknown_field_is_rejected(client):
    response = client.post(
        "/api/messages",
        json={"order_id": "BS2500001", "content": "Hello", "sender_type": "client", "extra": 1},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_post_message_with_invalid_sender_is_rejected(client):
    response = client.post(
        "/api/messages",
        json={"order_id": "BS2500001", "content": "Hello", "sender_type": "robot"},
    )

    assert response.status_code == 400


def test_order_messages_for_unknown_order_is_not_found(client, monkeypatch):
    async def _fake_list(_session, *, order_id, forwarded_only=False):
        raise OrderNotFoundError(f"Order '{order_id}' was not found.")

    monkeypatch.setattr(messages_service.repo, "list_messages_for_order", _fake_list)

    response = client.get("/api/messages/order/BS25FFFFF")

    assert response.status_code == 404
    assert response.json()["code"] == "ORDER_NOT_FOUND"


def test_forwarded_messages_endpoint_only_asks_for_forwarded_rows(client, monkeypatch):
    seen: dict[str, object] = {}
    original = _row(message_id=1)

    async def _fake_list(_session, *, order_id, forwarded_only=False):
        seen["forwarded_only"] = forwarded_only
        return [
            _row(
                message_id=2,
                order_id=order_id,
                forwarded_from="client",
                original_message_id=1,
                original_message=original,
            )
        ]

    monkeypatch.setattr(messages_service.repo, "list_messages_for_order", _fake_list)

    response = client.get("/api/messages/order/BS2500002/forwarded")

    assert response.status_code == 200
    payload = response.json()
    assert seen["forwarded_only"] is True
    assert payload["count"] == 1
    assert payload["messages"][0]["original_message"]["content"] == "Hello"


def test_forward_endpoint_reports_media_outcome(client):
    original = _row(message_id=5, media_id="m1")
    forwarded = _row(
        message_id=6,
        order_id="BS2500002",
        content="Hello\n\n[Media: image/jpeg] https://api.example.test/uploads/media/a.jpg",
        sender_type="enterprise",
        media_id="m1",
        forwarded_from="client",
        original_message_id=5,
    )

    class _FakeForwarder:
        async def forward(self, _session, *, message_id, target_order_id, recipient, sender_type):
            assert (message_id, target_order_id, recipient, sender_type) == (
                5,
                "BS2500002",
                "919876543210",
                "enterprise",
            )
            return SimpleNamespace(
                original=original,
                forwarded=forwarded,
                media=PermanenceResult(
                    url="https://api.example.test/uploads/media/a.jpg",
                    mime_type="image/jpeg",
                    is_permanent=True,
                    is_fallback=False,
                ),
                media_error=None,
                whatsapp_message_id="wamid.9",
                processing_time_ms=12,
            )

    app.dependency_overrides[messages_api.get_message_forwarder] = lambda: _FakeForwarder()

    response = client.post(
        "/api/messages/5/forward",
        json={"order_id": "BS2500002", "recipient_phone": "919876543210"},
    )

    assert response.status_code == 201
    payload = response.json()
    assert payload["success"] is True
    assert payload["forwarded"]["original_message"]["order_id"] == "BS2500001"
    assert payload["media"]["is_permanent"] is True
    assert payload["whatsapp_message_id"] == "wamid.9"
