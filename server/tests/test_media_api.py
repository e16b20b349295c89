from __future__ import annotations

import gzip

import httpx
import pytest
from fastapi.testclient import TestClient

from server.core.config import get_settings
from server.features.media.fetcher import MediaFetcher
from server.features.media.store import PermanentStore
from server.features.media.wiring import get_media_fetcher, get_permanent_store
from server.main import app

PROXY_PATH = "/api/proxy-fb-media"


class _Upstream:
    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body = b"\xff\xd8jpeg-bytes"
        self.headers = {"content-type": "image/jpeg", "etag": '"abc"'}
        self.raise_error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        return httpx.Response(self.status_code, content=self.body, headers=self.headers)


@pytest.fixture
def upstream():
    return _Upstream()


@pytest.fixture
def client(tmp_path, upstream):
    settings = get_settings().model_copy(update={"upload_max_size_bytes": 1024})
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_permanent_store] = lambda: PermanentStore(tmp_path)
    app.dependency_overrides[get_media_fetcher] = lambda: MediaFetcher(
        access_token="token",
        transport=httpx.MockTransport(upstream),
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_proxy_requires_url_parameter(client):
    response = client.get(PROXY_PATH)

    assert response.status_code == 400
    assert response.json()["code"] == "MISSING_URL_PARAMETER"


def test_proxy_rejects_badly_encoded_url(client):
    response = client.get(PROXY_PATH, params={"url": "https://scontent.whatsapp.net/%ff"})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_URL_ENCODING"


@pytest.mark.parametrize("url", ["not a url", "ftp://scontent.whatsapp.net/x", "https:///x"])
def test_proxy_rejects_invalid_url(client, url):
    response = client.get(PROXY_PATH, params={"url": url})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_URL"


def test_proxy_rejects_unlisted_host_without_fetching(client, upstream):
    response = client.get(PROXY_PATH, params={"url": "https://evil.example.com/x"})

    assert response.status_code == 403
    payload = response.json()
    assert payload["code"] == "UNAUTHORIZED_DOMAIN"
    assert "evil.example.com" in payload["message"]
    assert upstream.requests == []


def test_proxy_streams_allowed_media_with_cache_headers(client, upstream):
    response = client.get(PROXY_PATH, params={"url": "https://scontent.whatsapp.net/v/t61/abc.jpg"})

    assert response.status_code == 200
    assert response.content == upstream.body
    assert response.headers["content-type"] == "image/jpeg"
    assert response.headers["cache-control"] == "public, max-age=3600"
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["x-proxy-cache"] == "MISS"
    assert response.headers["x-media-source"] == "Facebook"
    assert response.headers["x-response-time"].endswith("ms")
    assert response.headers["etag"] == '"abc"'
    assert upstream.requests[0].headers["authorization"] == "Bearer token"


def test_proxy_relays_decoded_gzip_body_without_upstream_length(client, upstream):
    decoded = b"\xff\xd8" + b"0" * 5000
    upstream.body = gzip.compress(decoded)
    upstream.headers = {
        "content-type": "image/jpeg",
        "content-encoding": "gzip",
        "content-length": str(len(upstream.body)),
    }

    response = client.get(PROXY_PATH, params={"url": "https://scontent.whatsapp.net/v/t61/abc.jpg"})

    assert response.status_code == 200
    assert response.content == decoded
    assert "content-encoding" not in response.headers
    assert response.headers.get("content-length") in (None, str(len(decoded)))


def test_proxy_maps_upstream_failure_to_bad_gateway(client, upstream):
    upstream.status_code = 404

    response = client.get(PROXY_PATH, params={"url": "https://lookaside.fbsbx.com/x"})

    assert response.status_code == 502
    payload = response.json()
    assert payload["code"] == "FACEBOOK_REQUEST_FAILED"
    assert payload["details"]["status"] == 404


def test_proxy_maps_upstream_timeout(client, upstream):
    upstream.raise_error = httpx.ReadTimeout("slow upstream")

    response = client.get(PROXY_PATH, params={"url": "https://mmg.whatsapp.net/x"})

    assert response.status_code == 408
    assert response.json()["code"] == "REQUEST_TIMEOUT"


def test_proxy_preflight_returns_cors_headers(client):
    response = client.options(PROXY_PATH)

    assert response.status_code == 204
    assert response.headers["access-control-allow-methods"] == "GET, OPTIONS"


def test_upload_without_file_is_rejected(client):
    response = client.post("/api/media/upload", data={"type": "image/jpeg"})

    assert response.status_code == 400
    assert response.json()["code"] == "MISSING_FILE"


def test_upload_with_unsupported_type_is_rejected(client, tmp_path):
    response = client.post(
        "/api/media/upload",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "UNSUPPORTED_MEDIA_TYPE"
    assert list(tmp_path.iterdir()) == []


def test_upload_over_limit_is_rejected(client, tmp_path):
    response = client.post(
        "/api/media/upload",
        files={"file": ("big.png", b"p" * 2048, "image/png")},
    )

    assert response.status_code == 413
    assert response.json()["code"] == "FILE_TOO_LARGE"
    assert list(tmp_path.iterdir()) == []


def test_uploaded_media_is_served_back_unchanged(client):
    body = bytes(range(256)) * 2

    uploaded = client.post(
        "/api/media/upload",
        files={"file": ("photo.jpg", body, "image/jpeg")},
    )

    assert uploaded.status_code == 201
    payload = uploaded.json()
    assert payload["success"] is True
    assert payload["originalname"] == "photo.jpg"
    assert payload["mimetype"] == "image/jpeg"
    assert payload["size"] == len(body)
    assert payload["filename"].endswith(".jpg")
    assert payload["permanentUrl"] == f"/uploads/media/{payload['filename']}"

    served = client.get(payload["permanentUrl"])

    assert served.status_code == 200
    assert served.content == body
    assert served.headers["content-type"] == "image/jpeg"
    assert served.headers["content-length"] == str(len(body))
    assert served.headers["cache-control"] == "public, max-age=31536000"
    assert "last-modified" in served.headers


def test_serving_unknown_file_returns_not_found(client):
    response = client.get("/uploads/media/1700000000000-deadbeef.jpg")

    assert response.status_code == 404
    assert response.json()["code"] == "FILE_NOT_FOUND"


def test_media_health_reports_storage_state(client, tmp_path):
    response = client.get("/api/media/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["storage_available"] is True
    assert payload["storage_root"] == str(tmp_path.resolve())
    assert "scontent.whatsapp.net" in payload["allowed_hosts"]
