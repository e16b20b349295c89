from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

import httpx

from server.core.config import Settings
from server.features.shared.redact import url_host

from .errors import MediaFetchTimeoutError, MediaNetworkError, MediaStreamError, UpstreamMediaError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30_000
_CHUNK_SIZE = 64 * 1024


class FetchedMedia:
    """An open upstream response whose body has not been read yet.

    The body must be consumed through ``iter_bytes`` (which closes the
    connection when exhausted) or released with ``aclose``.
    """

    def __init__(self, response: httpx.Response, client: httpx.AsyncClient) -> None:
        self._response = response
        self._client = client
        self._closed = False
        headers = response.headers
        self.status_code = response.status_code
        self.content_type = headers.get("content-type") or "application/octet-stream"
        self.content_encoding = headers.get("content-encoding")
        # iter_bytes yields decoded bytes, so an encoded upstream length does not describe them.
        self.content_length = (
            None
            if _is_encoded(self.content_encoding)
            else _parse_content_length(headers.get("content-length"))
        )
        self.last_modified = headers.get("last-modified")
        self.etag = headers.get("etag")

    async def iter_bytes(self, chunk_size: int = _CHUNK_SIZE) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes(chunk_size):
                if chunk:
                    yield chunk
        except httpx.TimeoutException as exc:
            raise MediaStreamError("Upstream media stream timed out mid-transfer.") from exc
        except httpx.HTTPError as exc:
            raise MediaStreamError(f"Upstream media stream failed: {exc}") from exc
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()


def _is_encoded(content_encoding: str | None) -> bool:
    return bool(content_encoding) and content_encoding.strip().lower() != "identity"


def _parse_content_length(value: str | None) -> int | None:
    if not value:
        return None
    try:
        parsed = int(value)
    except ValueError:
        return None
    return parsed if parsed >= 0 else None


class MediaFetcher:
    """Authenticated, time-bounded GET against a media host.

    Performs no host validation; callers check the allow-list first.
    """

    def __init__(
        self,
        *,
        access_token: str,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        user_agent: str = "BSGold-Media-Proxy/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._access_token = access_token
        self._timeout_seconds = max(1, timeout_ms) / 1000
        self._user_agent = user_agent
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> MediaFetcher:
        return cls(
            access_token=settings.whatsapp_access_token,
            timeout_ms=settings.media_fetch_timeout_ms,
            user_agent=settings.media_proxy_user_agent,
            transport=transport,
        )

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "User-Agent": self._user_agent,
        }

    async def fetch(self, url: str) -> FetchedMedia:
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout_seconds),
            transport=self._transport,
            follow_redirects=False,
        )
        host = url_host(url)
        try:
            request = client.build_request("GET", url, headers=self._headers())
            # Headers must arrive within the timeout; body reads are bounded per-chunk by httpx.
            response = await asyncio.wait_for(
                client.send(request, stream=True),
                timeout=self._timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            await client.aclose()
            logger.warning("Media fetch from %s timed out after %.1fs.", host, self._timeout_seconds)
            raise MediaFetchTimeoutError(
                f"Facebook media request timed out after {self._timeout_seconds:g} seconds"
            ) from exc
        except httpx.HTTPError as exc:
            await client.aclose()
            logger.warning("Media fetch from %s failed at the network level: %s", host, exc)
            raise MediaNetworkError("Unable to connect to Facebook servers") from exc
        except BaseException:
            await client.aclose()
            raise

        if not response.is_success:
            status = response.status_code
            status_text = response.reason_phrase
            await response.aclose()
            await client.aclose()
            logger.warning("Media fetch from %s returned %d %s.", host, status, status_text)
            raise UpstreamMediaError(status, status_text)

        return FetchedMedia(response, client)


__all__ = ["DEFAULT_TIMEOUT_MS", "FetchedMedia", "MediaFetcher"]
