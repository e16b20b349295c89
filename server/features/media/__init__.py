from .errors import (
    MediaError,
    MediaFetchTimeoutError,
    MediaNetworkError,
    MediaNotFoundError,
    MediaStorageError,
    MediaStreamError,
    MediaTooLargeError,
    MediaValidationError,
    UnauthorizedDomainError,
    UpstreamMediaError,
)
from .fetcher import FetchedMedia, MediaFetcher
from .hosts import is_allowed_media_host
from .permanence import MediaPermanenceService, MediaResolver
from .store import PermanentStore, ServedMedia, extension_for_mime, normalize_mime_type
from .types import MediaReference, PermanenceResult, StoredMedia

__all__ = [
    "FetchedMedia",
    "MediaError",
    "MediaFetchTimeoutError",
    "MediaFetcher",
    "MediaNetworkError",
    "MediaNotFoundError",
    "MediaPermanenceService",
    "MediaReference",
    "MediaResolver",
    "MediaStorageError",
    "MediaStreamError",
    "MediaTooLargeError",
    "MediaValidationError",
    "PermanenceResult",
    "PermanentStore",
    "ServedMedia",
    "StoredMedia",
    "UnauthorizedDomainError",
    "UpstreamMediaError",
    "extension_for_mime",
    "is_allowed_media_host",
    "normalize_mime_type",
]
