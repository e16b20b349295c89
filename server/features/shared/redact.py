from __future__ import annotations

from urllib.parse import urlsplit


def redact_phone(phone: str | None) -> str:
    """Keep only the last four digits of a phone number for log output."""
    if not phone:
        return "<none>"
    digits = "".join(char for char in phone if char.isdigit())
    if len(digits) <= 4:
        return "***"
    return f"***{digits[-4:]}"


def truncate_identifier(value: str | None, *, keep: int = 8) -> str:
    if not value:
        return "<none>"
    if len(value) <= keep:
        return value
    return f"{value[:keep]}..."


def url_host(url: str | None) -> str:
    if not url:
        return "<none>"
    try:
        return urlsplit(url).hostname or "<invalid>"
    except ValueError:
        return "<invalid>"


__all__ = ["redact_phone", "truncate_identifier", "url_host"]
