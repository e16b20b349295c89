from __future__ import annotations

from fastapi import Depends

from server.core.config import Settings, get_settings
from server.features.whatsapp import WhatsAppClient, get_whatsapp_client

from .fetcher import MediaFetcher
from .permanence import MediaPermanenceService
from .store import PermanentStore


def get_media_fetcher(settings: Settings = Depends(get_settings)) -> MediaFetcher:
    return MediaFetcher.from_settings(settings)


def get_permanent_store(settings: Settings = Depends(get_settings)) -> PermanentStore:
    return PermanentStore.from_settings(settings)


def get_permanence_service(
    settings: Settings = Depends(get_settings),
    whatsapp: WhatsAppClient = Depends(get_whatsapp_client),
    fetcher: MediaFetcher = Depends(get_media_fetcher),
    store: PermanentStore = Depends(get_permanent_store),
) -> MediaPermanenceService:
    return MediaPermanenceService.from_settings(
        settings,
        resolver=whatsapp,
        fetcher=fetcher,
        store=store,
    )


__all__ = ["get_media_fetcher", "get_permanence_service", "get_permanent_store"]
