from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import quote

import httpx

from server.core.config import Settings
from server.features.media.errors import (
    MediaFetchTimeoutError,
    MediaNetworkError,
    MediaValidationError,
    UpstreamMediaError,
)
from server.features.media.types import MediaReference
from server.features.shared.redact import redact_phone, truncate_identifier

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")
# Graph media ids are single path segments.
_MEDIA_ID = re.compile(r"^(?!\.+$)[A-Za-z0-9_.-]{1,128}$")

ORDER_UPDATE_TEMPLATE = "update_sending"
WORKER_ASSIGNMENT_TEMPLATE = "worker_assignment"
WORKER_CHANGED_TEMPLATE = "worker_changed"


class WhatsAppApiError(UpstreamMediaError):
    code = "WHATSAPP_REQUEST_FAILED"
    error = "WhatsApp request failed"


def is_valid_media_id(media_id: str | None) -> bool:
    return bool(media_id) and _MEDIA_ID.match(media_id) is not None


def normalize_recipient(phone: str) -> str:
    return _NON_DIGITS.sub("", phone)


class WhatsAppClient:
    """Graph API calls: media-details lookup and template message sends."""

    def __init__(
        self,
        *,
        api_root: str,
        api_version: str,
        phone_id: str,
        access_token: str,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = f"{api_root.rstrip('/')}/{api_version.strip('/')}"
        self._phone_id = phone_id.strip("/")
        self._access_token = access_token
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> WhatsAppClient:
        return cls(
            api_root=settings.whatsapp_api_root,
            api_version=settings.whatsapp_api_version,
            phone_id=settings.whatsapp_phone_id,
            access_token=settings.whatsapp_access_token,
            timeout_seconds=settings.whatsapp_request_timeout_seconds,
            transport=transport,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout_seconds),
            transport=self._transport,
            headers={"Authorization": f"Bearer {self._access_token}"},
        )

    async def _request(self, method: str, path: str, *, operation: str, **kwargs: Any) -> dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("WhatsApp %s timed out.", operation)
            raise MediaFetchTimeoutError(f"WhatsApp {operation} timed out.") from exc
        except httpx.HTTPError as exc:
            logger.warning("WhatsApp %s failed at the network level: %s", operation, exc)
            raise MediaNetworkError(f"Unable to reach WhatsApp for {operation}.") from exc

        if not response.is_success:
            logger.warning(
                "WhatsApp %s returned %d %s.",
                operation,
                response.status_code,
                response.reason_phrase,
            )
            raise WhatsAppApiError(
                response.status_code,
                response.reason_phrase,
                message=f"WhatsApp {operation} returned {response.status_code}: {response.reason_phrase}",
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise WhatsAppApiError(
                response.status_code,
                response.reason_phrase,
                message=f"WhatsApp {operation} returned a non-JSON body.",
            ) from exc
        if not isinstance(payload, dict):
            raise WhatsAppApiError(
                response.status_code,
                response.reason_phrase,
                message=f"WhatsApp {operation} returned an unexpected payload.",
            )
        return payload

    async def get_media_details(self, media_id: str) -> MediaReference:
        if not is_valid_media_id(media_id):
            raise MediaValidationError(
                "media_id must be a single Graph API identifier.",
                code="INVALID_MEDIA_ID",
                error="Invalid media id",
            )
        payload = await self._request("GET", f"/{quote(media_id, safe='')}", operation="media lookup")
        source_url = payload.get("url")
        if not source_url:
            logger.warning(
                "WhatsApp media lookup for %s returned no url.",
                truncate_identifier(media_id),
            )
            raise WhatsAppApiError(
                502,
                "Bad Gateway",
                message=f"Media lookup for '{truncate_identifier(media_id)}' returned no url.",
            )
        file_size = payload.get("file_size")
        return MediaReference(
            id=str(payload.get("id") or media_id),
            source_url=str(source_url),
            mime_type=str(payload.get("mime_type") or "application/octet-stream"),
            byte_size=int(file_size) if file_size is not None else None,
            sha256=payload.get("sha256"),
        )

    async def send_template(
        self,
        to: str,
        *,
        template_name: str,
        parameters: list[str],
        language_code: str = "en",
    ) -> dict[str, Any]:
        body = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": normalize_recipient(to),
            "type": "template",
            "template": {
                "name": template_name,
                "language": {"code": language_code},
                "components": [
                    {
                        "type": "body",
                        "parameters": [{"type": "text", "text": value} for value in parameters],
                    }
                ],
            },
        }
        result = await self._request(
            "POST",
            f"/{self._phone_id}/messages",
            operation=f"send {template_name}",
            json=body,
        )
        logger.info("Sent WhatsApp template %s to %s.", template_name, redact_phone(to))
        return result

    async def send_order_update(self, to: str, *, order_id: str, content: str) -> dict[str, Any]:
        return await self.send_template(
            to,
            template_name=ORDER_UPDATE_TEMPLATE,
            parameters=[order_id, content],
        )

    async def notify_worker_assignment(
        self,
        to: str,
        *,
        order_id: str,
        jewellery_details: dict[str, Any],
    ) -> dict[str, Any]:
        return await self.send_template(
            to,
            template_name=WORKER_ASSIGNMENT_TEMPLATE,
            parameters=[
                order_id,
                str(jewellery_details.get("name") or "Not specified"),
                str(jewellery_details.get("weight") or "Not specified"),
                str(jewellery_details.get("melting") or "Not specified"),
                str(jewellery_details.get("special") or "No special instructions"),
            ],
        )

    async def notify_worker_removal(self, to: str, *, order_id: str) -> dict[str, Any]:
        return await self.send_template(
            to,
            template_name=WORKER_CHANGED_TEMPLATE,
            parameters=[order_id],
        )


__all__ = [
    "ORDER_UPDATE_TEMPLATE",
    "WORKER_ASSIGNMENT_TEMPLATE",
    "WORKER_CHANGED_TEMPLATE",
    "WhatsAppApiError",
    "WhatsAppClient",
    "normalize_recipient",
]
