from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from datetime import datetime, timezone
from email.utils import format_datetime
from urllib.parse import unquote, urlsplit

import aiofiles.os
from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from server.core.config import Settings, get_settings
from server.features.shared.redact import url_host

from .errors import MediaStreamError, MediaTooLargeError, MediaValidationError, UnauthorizedDomainError
from .fetcher import MediaFetcher
from .hosts import is_allowed_media_host
from .schemas import MediaHealthResponse, MediaUploadResponse
from .store import PermanentStore, normalize_mime_type
from .wiring import get_media_fetcher, get_permanent_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["media"])

PROXY_CACHE_CONTROL = "public, max-age=3600"
STORED_CACHE_CONTROL = "public, max-age=31536000"
_UPLOAD_CHUNK_SIZE = 64 * 1024

_PROXY_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


async def _relay(chunks: AsyncIterator[bytes], *, label: str) -> AsyncIterator[bytes]:
    # Headers are already sent once this runs; a failure can only cut the body short.
    try:
        async for chunk in chunks:
            yield chunk
    except MediaStreamError as exc:
        logger.error("Stream for %s aborted mid-transfer: %s", label, exc.message)


def _parse_proxy_url(raw_url: str | None) -> str:
    if not raw_url:
        raise MediaValidationError(
            "URL parameter is required",
            code="MISSING_URL_PARAMETER",
            error="Missing URL parameter",
        )
    try:
        decoded = unquote(raw_url, errors="strict")
    except UnicodeDecodeError as exc:
        raise MediaValidationError(
            "URL parameter is not properly encoded",
            code="INVALID_URL_ENCODING",
            error="Invalid URL encoding",
        ) from exc

    try:
        parsed = urlsplit(decoded)
        hostname = parsed.hostname
    except ValueError as exc:
        raise MediaValidationError("URL is malformed", code="INVALID_URL", error="Invalid URL") from exc
    if parsed.scheme not in {"http", "https"} or not hostname:
        raise MediaValidationError(
            "URL must be an absolute http(s) URL",
            code="INVALID_URL",
            error="Invalid URL",
        )
    return decoded


@router.options("/api/proxy-fb-media")
async def proxy_preflight() -> Response:
    return Response(status_code=204, headers=_PROXY_CORS_HEADERS)


@router.get("/api/proxy-fb-media")
async def proxy_facebook_media(
    url: str | None = Query(default=None),
    settings: Settings = Depends(get_settings),
    fetcher: MediaFetcher = Depends(get_media_fetcher),
) -> StreamingResponse:
    started = time.perf_counter()
    target = _parse_proxy_url(url)
    host = url_host(target)

    if not is_allowed_media_host(target, settings.media_allowed_host_list):
        logger.warning("Rejected media proxy request for unauthorized host %s.", host)
        raise UnauthorizedDomainError(host)

    fetched = await fetcher.fetch(target)
    elapsed_ms = int((time.perf_counter() - started) * 1000)

    headers = {
        **_PROXY_CORS_HEADERS,
        "Cache-Control": PROXY_CACHE_CONTROL,
        "X-Proxy-Cache": "MISS",
        "X-Media-Source": "Facebook",
        "X-Response-Time": f"{elapsed_ms}ms",
    }
    if fetched.content_length is not None:
        headers["Content-Length"] = str(fetched.content_length)
    if fetched.last_modified:
        headers["Last-Modified"] = fetched.last_modified
    if fetched.etag:
        headers["ETag"] = fetched.etag

    logger.info(
        "Proxying media from %s (%s, %s bytes, headers in %dms).",
        host,
        fetched.content_type,
        fetched.content_length if fetched.content_length is not None else "unknown",
        elapsed_ms,
    )
    return StreamingResponse(
        _relay(fetched.iter_bytes(), label=host),
        media_type=fetched.content_type,
        headers=headers,
        background=BackgroundTask(fetched.aclose),
    )


async def _read_upload(file: UploadFile) -> AsyncIterator[bytes]:
    while True:
        chunk = await file.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


@router.post("/api/media/upload", status_code=201, response_model=MediaUploadResponse)
async def upload_media(
    file: UploadFile | None = File(default=None),
    type: str | None = Form(default=None),
    settings: Settings = Depends(get_settings),
    store: PermanentStore = Depends(get_permanent_store),
) -> MediaUploadResponse:
    if file is None:
        raise MediaValidationError(
            "Please provide a file to upload",
            code="MISSING_FILE",
            error="No file uploaded",
        )

    mime_type = normalize_mime_type(file.content_type or type)
    if mime_type not in settings.upload_allowed_mime_type_list:
        logger.warning("Rejected upload %s with type %s.", file.filename, mime_type)
        raise MediaValidationError(
            f"File type '{mime_type}' is not allowed",
            code="UNSUPPORTED_MEDIA_TYPE",
            error="File type not allowed",
        )

    if file.size is not None and file.size > settings.upload_max_size_bytes:
        raise MediaTooLargeError(f"File exceeds the {settings.upload_max_size_bytes} byte limit.")

    try:
        stored = await store.store(
            _read_upload(file),
            mime_type,
            byte_size=file.size,
            max_bytes=settings.upload_max_size_bytes,
        )
    finally:
        await file.close()

    logger.info(
        "Upload %s stored as %s (%s, %d bytes, declared type %s).",
        file.filename,
        stored.filename,
        stored.mime_type,
        stored.byte_size,
        type or "-",
    )
    return MediaUploadResponse(
        permanent_url=stored.relative_path,
        filename=stored.filename,
        original_name=file.filename,
        mime_type=stored.mime_type,
        size=stored.byte_size,
        uploaded_at=stored.created_at,
    )


@router.get("/uploads/media/{filename}")
async def serve_media(
    filename: str,
    store: PermanentStore = Depends(get_permanent_store),
) -> StreamingResponse:
    served = await store.serve(filename)
    logger.info("Serving stored media %s (%d bytes).", served.filename, served.length)
    return StreamingResponse(
        _relay(served.iter_bytes(), label=served.filename),
        media_type=served.content_type,
        headers={
            "Content-Length": str(served.length),
            "Cache-Control": STORED_CACHE_CONTROL,
            "Last-Modified": format_datetime(served.last_modified, usegmt=True),
        },
    )


@router.get("/api/media/health", response_model=MediaHealthResponse)
async def media_health(
    settings: Settings = Depends(get_settings),
    store: PermanentStore = Depends(get_permanent_store),
) -> MediaHealthResponse:
    available = await aiofiles.os.path.isdir(store.root)
    return MediaHealthResponse(
        status="ok" if available else "degraded",
        service="media",
        storage_root=str(store.root),
        storage_available=available,
        allowed_hosts=settings.media_allowed_host_list,
        checked_at=datetime.now(timezone.utc),
    )
