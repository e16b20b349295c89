from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from server.core.config import Settings
from server.features.shared.redact import truncate_identifier, url_host

from .errors import UnauthorizedDomainError
from .fetcher import MediaFetcher
from .hosts import is_allowed_media_host
from .store import PermanentStore, normalize_mime_type
from .types import MediaReference, PermanenceResult

logger = logging.getLogger(__name__)


class MediaResolver(Protocol):
    async def get_media_details(self, media_id: str) -> MediaReference: ...


class MediaPermanenceService:
    """Turns an expiring provider media id into a URL that stays valid.

    ``make_permanent`` only raises when both the primary pipeline and the
    single fallback lookup fail; otherwise it degrades to the provider's
    expiring link.
    """

    def __init__(
        self,
        *,
        resolver: MediaResolver,
        fetcher: MediaFetcher,
        store: PermanentStore,
        allowed_hosts: Iterable[str],
        public_base_url: str,
    ) -> None:
        self._resolver = resolver
        self._fetcher = fetcher
        self._store = store
        self._allowed_hosts = tuple(allowed_hosts)
        self._public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        resolver: MediaResolver,
        fetcher: MediaFetcher,
        store: PermanentStore,
    ) -> MediaPermanenceService:
        return cls(
            resolver=resolver,
            fetcher=fetcher,
            store=store,
            allowed_hosts=settings.media_allowed_host_list,
            public_base_url=settings.public_base_url,
        )

    def absolute_url(self, relative_path: str) -> str:
        return f"{self._public_base_url}/{relative_path.lstrip('/')}"

    async def _persist(self, media_id: str) -> PermanenceResult:
        reference = await self._resolver.get_media_details(media_id)

        if not is_allowed_media_host(reference.source_url, self._allowed_hosts):
            raise UnauthorizedDomainError(url_host(reference.source_url))

        fetched = await self._fetcher.fetch(reference.source_url)
        try:
            mime_type = normalize_mime_type(reference.mime_type or fetched.content_type)
            stored = await self._store.store(
                fetched.iter_bytes(),
                mime_type,
                byte_size=reference.byte_size or fetched.content_length,
            )
        finally:
            await fetched.aclose()

        return PermanenceResult(
            url=self.absolute_url(stored.relative_path),
            mime_type=stored.mime_type,
            is_permanent=True,
            is_fallback=False,
            filename=stored.filename,
            byte_size=stored.byte_size,
        )

    async def make_permanent(self, media_id: str) -> PermanenceResult:
        short_id = truncate_identifier(media_id)
        try:
            result = await self._persist(media_id)
        except Exception as primary_error:
            logger.warning(
                "Media permanence failed for %s (%s: %s); falling back to provider link.",
                short_id,
                type(primary_error).__name__,
                primary_error,
            )
            try:
                reference = await self._resolver.get_media_details(media_id)
            except Exception as recovery_error:
                logger.error(
                    "Fallback lookup for media %s also failed (%s: %s).",
                    short_id,
                    type(recovery_error).__name__,
                    recovery_error,
                )
                raise primary_error from recovery_error
            return PermanenceResult(
                url=reference.source_url,
                mime_type=normalize_mime_type(reference.mime_type),
                is_permanent=False,
                is_fallback=True,
                byte_size=reference.byte_size,
            )

        logger.info(
            "Media %s stored permanently as %s (%s bytes).",
            short_id,
            result.filename,
            result.byte_size,
        )
        return result


__all__ = ["MediaPermanenceService", "MediaResolver"]
