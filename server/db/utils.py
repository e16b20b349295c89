from __future__ import annotations

_ASYNC_DRIVER_PREFIX = "postgresql+psycopg://"
_SYNC_PREFIXES = ("postgresql+psycopg2://", "postgresql://", "postgres://")


def normalize_database_url(url: str) -> str:
    """Rewrite any PostgreSQL URL so the async engine runs on psycopg 3."""
    if url.startswith(_ASYNC_DRIVER_PREFIX):
        return url
    for prefix in _SYNC_PREFIXES:
        if url.startswith(prefix):
            return f"{_ASYNC_DRIVER_PREFIX}{url[len(prefix):]}"
    return url
