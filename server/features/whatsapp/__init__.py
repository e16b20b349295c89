from __future__ import annotations

from fastapi import Depends

from server.core.config import Settings, get_settings

from .client import WhatsAppApiError, WhatsAppClient, normalize_recipient


def get_whatsapp_client(settings: Settings = Depends(get_settings)) -> WhatsAppClient:
    return WhatsAppClient.from_settings(settings)


__all__ = [
    "WhatsAppApiError",
    "WhatsAppClient",
    "get_whatsapp_client",
    "normalize_recipient",
]
