from __future__ import annotations

import logging
import os
import re
import secrets
import time
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import aiofiles
import aiofiles.os

from server.core.config import Settings

from .errors import MediaNotFoundError, MediaStorageError, MediaStreamError, MediaTooLargeError
from .types import StoredMedia

logger = logging.getLogger(__name__)

_fsync = aiofiles.os.wrap(os.fsync)

MEDIA_URL_PREFIX = "/uploads/media"
DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_EXTENSIONS: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "video/3gpp": ".3gp",
    "audio/mpeg": ".mp3",
    "audio/ogg": ".ogg",
    "audio/mp4": ".m4a",
    "audio/aac": ".aac",
    "audio/amr": ".amr",
    "application/pdf": ".pdf",
}

EXTENSION_MIME_TYPES: dict[str, str] = {
    **{extension: mime for mime, extension in MIME_EXTENSIONS.items()},
    ".jpeg": "image/jpeg",
}

_CHUNK_SIZE = 64 * 1024
_SAFE_FILENAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,254}$")
_UNSAFE_SUBTYPE_CHARS = re.compile(r"[^a-z0-9.-]+")


def normalize_mime_type(mime_type: str | None) -> str:
    """Lower-case and drop parameters, e.g. ``audio/ogg; codecs=opus`` -> ``audio/ogg``."""
    cleaned = (mime_type or "").split(";", 1)[0].strip().lower()
    return cleaned or DEFAULT_MIME_TYPE


def extension_for_mime(mime_type: str | None) -> str:
    normalized = normalize_mime_type(mime_type)
    known = MIME_EXTENSIONS.get(normalized)
    if known:
        return known
    _, _, subtype = normalized.partition("/")
    subtype = _UNSAFE_SUBTYPE_CHARS.sub("-", subtype).strip(".-")
    return f".{subtype}" if subtype else ".bin"


def content_type_for_filename(filename: str) -> str:
    return EXTENSION_MIME_TYPES.get(Path(filename).suffix.lower(), DEFAULT_MIME_TYPE)


def generate_media_filename(mime_type: str | None) -> str:
    return f"media_{time.time_ns()}{secrets.token_hex(4)}{extension_for_mime(mime_type)}"


@dataclass(frozen=True)
class ServedMedia:
    filename: str
    path: Path
    content_type: str
    length: int
    last_modified: datetime

    async def iter_bytes(self, chunk_size: int = _CHUNK_SIZE) -> AsyncIterator[bytes]:
        try:
            async with aiofiles.open(self.path, "rb") as handle:
                while True:
                    chunk = await handle.read(chunk_size)
                    if not chunk:
                        break
                    yield chunk
        except OSError as exc:
            raise MediaStreamError("Error occurred while serving the file") from exc


class PermanentStore:
    """Create-only media storage rooted at a single directory."""

    def __init__(self, root: str | Path, *, url_prefix: str = MEDIA_URL_PREFIX) -> None:
        root_path = Path(root)
        if not root_path.is_absolute():
            root_path = Path.cwd() / root_path
        self._root = root_path.resolve()
        self._url_prefix = url_prefix.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> PermanentStore:
        return cls(settings.media_storage_dir)

    @property
    def root(self) -> Path:
        return self._root

    def relative_path_for(self, filename: str) -> str:
        return f"{self._url_prefix}/{filename}"

    async def _ensure_root(self) -> None:
        await aiofiles.os.makedirs(self._root, exist_ok=True)

    async def store(
        self,
        chunks: AsyncIterable[bytes],
        mime_type: str | None,
        *,
        byte_size: int | None = None,
        max_bytes: int | None = None,
    ) -> StoredMedia:
        normalized_mime = normalize_mime_type(mime_type)
        filename = generate_media_filename(normalized_mime)
        final_path = self._root / filename
        temp_path = self._root / f".{filename}.{secrets.token_hex(4)}.part"

        try:
            await self._ensure_root()
        except OSError as exc:
            logger.error("Media storage root %s is not writable: %s", self._root, exc)
            raise MediaStorageError("Media storage is unavailable.") from exc

        written = 0
        committed = False
        try:
            async with aiofiles.open(temp_path, "wb") as handle:
                async for chunk in chunks:
                    written += len(chunk)
                    if max_bytes is not None and written > max_bytes:
                        raise MediaTooLargeError(f"File exceeds the {max_bytes} byte limit.")
                    await handle.write(chunk)
                await handle.flush()
                await _fsync(handle.fileno())
            await aiofiles.os.replace(temp_path, final_path)
            committed = True
        except OSError as exc:
            logger.error("Failed to write media file %s: %s", filename, exc)
            raise MediaStorageError("An error occurred while storing the file.") from exc
        finally:
            if not committed:
                await self._discard(temp_path)

        if byte_size is not None and byte_size != written:
            logger.warning(
                "Stored media %s size mismatch (declared=%d, written=%d).",
                filename,
                byte_size,
                written,
            )

        logger.info("Stored media %s (%s, %d bytes).", filename, normalized_mime, written)
        return StoredMedia(
            filename=filename,
            relative_path=self.relative_path_for(filename),
            mime_type=normalized_mime,
            byte_size=written,
            created_at=datetime.now(timezone.utc),
        )

    async def _discard(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("Could not remove partial media file %s.", path.name, exc_info=True)

    def resolve(self, filename: str) -> Path:
        if not _SAFE_FILENAME.match(filename) or ".." in filename:
            raise MediaNotFoundError("The requested media file does not exist")
        path = (self._root / filename).resolve()
        if path.parent != self._root:
            raise MediaNotFoundError("The requested media file does not exist")
        return path

    async def serve(self, filename: str) -> ServedMedia:
        path = self.resolve(filename)
        try:
            stat = await aiofiles.os.stat(path)
        except FileNotFoundError as exc:
            raise MediaNotFoundError("The requested media file does not exist") from exc
        except OSError as exc:
            raise MediaStorageError(
                "An error occurred while serving the file",
                code="SERVER_ERROR",
                error="Server error",
            ) from exc
        return ServedMedia(
            filename=filename,
            path=path,
            content_type=content_type_for_filename(filename),
            length=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )


__all__ = [
    "DEFAULT_MIME_TYPE",
    "EXTENSION_MIME_TYPES",
    "MEDIA_URL_PREFIX",
    "MIME_EXTENSIONS",
    "PermanentStore",
    "ServedMedia",
    "content_type_for_filename",
    "extension_for_mime",
    "generate_media_filename",
    "normalize_mime_type",
]
