from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from server.features.messages import service as messages_service
from server.features.messages.errors import MessageNotFoundError, MessageValidationError


class _DummySession:
    pass


def _row(**overrides):
    values = dict(
        message_id=7,
        order_id="BS2500001",
        content="Hello",
        media_id=None,
        sender_type="client",
        forwarded_from=None,
        original_message_id=None,
        created_at=datetime.now(timezone.utc),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_validate_sender_type_normalizes_case():
    assert messages_service.validate_sender_type(" Worker ") == "worker"

    with pytest.raises(MessageValidationError) as excinfo:
        messages_service.validate_sender_type("admin")
    assert "enterprise, client, worker" in excinfo.value.message


def test_create_message_normalizes_inputs(monkeypatch):
    captured: dict[str, object] = {}

    async def _fake_create_message(_session, **fields):
        captured.update(fields)
        return _row(**fields)

    monkeypatch.setattr(messages_service.repo, "create_message", _fake_create_message)

    row = asyncio.run(
        messages_service.create_message(
            _DummySession(),
            order_id=" BS2500001 ",
            content="Ring is ready",
            sender_type="ENTERPRISE",
            media_id="   ",
            forwarded_from="Client",
        )
    )

    assert captured["order_id"] == "BS2500001"
    assert captured["sender_type"] == "enterprise"
    assert captured["media_id"] is None
    assert captured["forwarded_from"] == "client"
    assert messages_service.to_summary(row).is_forwarded is True


def test_create_message_rejects_blank_content_and_bad_forwarded_from():
    with pytest.raises(MessageValidationError):
        asyncio.run(
            messages_service.create_message(
                _DummySession(),
                order_id="BS2500001",
                content="   ",
                sender_type="client",
            )
        )
    with pytest.raises(MessageValidationError):
        asyncio.run(
            messages_service.create_message(
                _DummySession(),
                order_id="BS2500001",
                content="ok",
                sender_type="client",
                forwarded_from="bot",
            )
        )


@pytest.mark.parametrize("media_id", ["a/b", "../me", "1?fields=x"])
def test_create_message_rejects_media_ids_that_are_not_single_identifiers(monkeypatch, media_id):
    async def _unexpected_create(*_args, **_kwargs):
        raise AssertionError("message must not be persisted")

    monkeypatch.setattr(messages_service.repo, "create_message", _unexpected_create)

    with pytest.raises(MessageValidationError):
        asyncio.run(
            messages_service.create_message(
                _DummySession(),
                order_id="BS2500001",
                content="photo",
                sender_type="client",
                media_id=media_id,
            )
        )


def test_create_message_requires_existing_original(monkeypatch):
    async def _fake_get_message(_session, *, message_id):
        raise MessageNotFoundError(f"Message '{message_id}' was not found.")

    async def _unexpected_create(*_args, **_kwargs):
        raise AssertionError("message must not be persisted")

    monkeypatch.setattr(messages_service.repo, "get_message", _fake_get_message)
    monkeypatch.setattr(messages_service.repo, "create_message", _unexpected_create)

    with pytest.raises(MessageNotFoundError):
        asyncio.run(
            messages_service.create_message(
                _DummySession(),
                order_id="BS2500001",
                content="copy",
                sender_type="enterprise",
                original_message_id=99,
            )
        )


def test_to_detail_includes_original_message_summary():
    original = _row(message_id=3, order_id="BS2500009", content="Source", sender_type="worker")
    forwarded = _row(
        message_id=8,
        forwarded_from="worker",
        original_message_id=3,
        original_message=original,
    )

    detail = messages_service.to_detail(forwarded)

    assert detail.is_forwarded is True
    assert detail.original_message.order_id == "BS2500009"
    assert detail.original_message.content == "Source"


def test_to_detail_without_original_does_not_touch_relationship():
    detail = messages_service.to_detail(_row())

    assert detail.original_message is None
    assert detail.is_forwarded is False
