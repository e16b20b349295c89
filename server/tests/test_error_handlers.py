from __future__ import annotations

import importlib
import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from server.db.session import get_db_session
from server.features.clients.errors import ClientNotFoundError
from server.features.media.errors import UpstreamMediaError
from server.features.shared.errors import NotFoundError, register_error_handlers
from server.main import app as main_app

clients_service = importlib.import_module("server.features.clients.service")


class _Payload(BaseModel):
    count: int


def _app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/missing")
    async def _missing():
        raise NotFoundError("Widget 'w1' was not found.", code="WIDGET_NOT_FOUND")

    @app.get("/upstream")
    async def _upstream():
        raise UpstreamMediaError(503, "Service Unavailable")

    @app.post("/validate")
    async def _validate(payload: _Payload):
        return payload

    @app.get("/boom")
    async def _boom():
        raise RuntimeError("secret internals")

    return app


def test_app_error_renders_error_message_and_code():
    response = TestClient(_app()).get("/missing")

    assert response.status_code == 404
    assert response.json() == {
        "error": "Not found",
        "message": "Widget 'w1' was not found.",
        "code": "WIDGET_NOT_FOUND",
    }


def test_app_error_details_are_included():
    response = TestClient(_app()).get("/upstream")

    assert response.status_code == 502
    assert response.json()["details"] == {"status": 503, "statusText": "Service Unavailable"}


def test_request_validation_uses_common_envelope():
    response = TestClient(_app()).post("/validate", json={"count": "many"})

    assert response.status_code == 400
    payload = response.json()
    assert payload["code"] == "VALIDATION_ERROR"
    assert payload["details"]["fields"] == ["body.count"]


def test_unexpected_errors_hide_internals():
    response = TestClient(_app(), raise_server_exceptions=False).get("/boom")

    assert response.status_code == 500
    payload = response.json()
    assert payload["code"] == "INTERNAL_SERVER_ERROR"
    assert "secret" not in payload["message"]


def test_client_errors_log_route_template_without_phone_numbers(monkeypatch, caplog):
    async def _override_db():
        yield object()

    async def _missing_client(_session, *, phone_number):
        raise ClientNotFoundError(f"Client '{phone_number}' was not found.")

    monkeypatch.setattr(clients_service.repo, "get_client", _missing_client)
    main_app.dependency_overrides[get_db_session] = _override_db
    try:
        with caplog.at_level(logging.INFO, logger="server.features.shared.errors"):
            response = TestClient(main_app).get("/api/clients/919876543210")
    finally:
        main_app.dependency_overrides.clear()

    assert response.status_code == 404
    assert "919876543210" in response.json()["message"]
    assert "GET /api/clients/{phone_number} failed with CLIENT_NOT_FOUND (404)." in caplog.text
    assert "919876543210" not in caplog.text


def test_unexpected_error_log_keeps_path_parameters_out(caplog):
    app = _app()

    @app.get("/boom/{phone_number}")
    async def _boom_for(phone_number: str):
        raise RuntimeError("failure")

    with caplog.at_level(logging.ERROR, logger="server.features.shared.errors"):
        response = TestClient(app, raise_server_exceptions=False).get("/boom/919876543210")

    assert response.status_code == 500
    assert "Unhandled error on GET" in caplog.text
    assert "919876543210" not in caplog.text
