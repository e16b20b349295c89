from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class MediaReference:
    id: str
    source_url: str
    mime_type: str
    byte_size: int | None = None
    sha256: str | None = None


@dataclass(frozen=True)
class StoredMedia:
    filename: str
    relative_path: str
    mime_type: str
    byte_size: int
    created_at: datetime


@dataclass(frozen=True)
class PermanenceResult:
    url: str
    mime_type: str
    is_permanent: bool
    is_fallback: bool
    filename: str | None = None
    byte_size: int | None = None
