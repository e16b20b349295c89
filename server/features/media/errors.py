from __future__ import annotations

from server.features.shared.errors import AppError


class MediaError(AppError):
    """Base exception for media relay and storage operations."""


class MediaValidationError(MediaError):
    status_code = 400
    code = "INVALID_MEDIA_REQUEST"
    error = "Invalid media request"


class MediaTooLargeError(MediaValidationError):
    status_code = 413
    code = "FILE_TOO_LARGE"
    error = "File too large"


class UnauthorizedDomainError(MediaError):
    status_code = 403
    code = "UNAUTHORIZED_DOMAIN"
    error = "Forbidden domain"

    def __init__(self, host: str) -> None:
        super().__init__("URL must be from an authorized Facebook/WhatsApp domain")
        self.host = host


class MediaFetchTimeoutError(MediaError):
    status_code = 408
    code = "REQUEST_TIMEOUT"
    error = "Request timeout"


class UpstreamMediaError(MediaError):
    status_code = 502
    code = "FACEBOOK_REQUEST_FAILED"
    error = "Facebook request failed"

    def __init__(self, status: int, status_text: str, *, message: str | None = None) -> None:
        super().__init__(
            message or f"Facebook returned {status}: {status_text}",
            details={"status": status, "statusText": status_text},
        )
        self.status = status
        self.status_text = status_text


class MediaNetworkError(MediaError):
    status_code = 502
    code = "NETWORK_ERROR"
    error = "Network error"


class MediaStorageError(MediaError):
    status_code = 500
    code = "UPLOAD_ERROR"
    error = "Upload failed"


class MediaNotFoundError(MediaError):
    status_code = 404
    code = "FILE_NOT_FOUND"
    error = "File not found"


class MediaStreamError(MediaError):
    status_code = 500
    code = "STREAM_ERROR"
    error = "Streaming failed"
