from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import SplitResult, urlsplit


def is_allowed_media_host(url: str | SplitResult, allowed_hosts: Iterable[str]) -> bool:
    """Exact host match or a dot-suffixed subdomain of an allow-listed host.

    Never raises: anything unparseable is simply not allowed.
    """
    try:
        parsed = urlsplit(url) if isinstance(url, str) else url
        hostname = (parsed.hostname or "").lower().rstrip(".")
    except ValueError:
        return False
    if not hostname:
        return False
    for allowed in allowed_hosts:
        domain = allowed.strip().lower().rstrip(".")
        if not domain:
            continue
        if hostname == domain or hostname.endswith(f".{domain}"):
            return True
    return False
