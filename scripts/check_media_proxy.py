#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass

import httpx

SAMPLE_MEDIA_URL = "https://lookaside.fbsbx.com/whatsapp_business/attachments/?mid=0"


@dataclass
class CheckResult:
    name: str
    status: int | None
    passed: bool
    detail: str


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Smoke-check the media proxy and media health endpoints of a running server.",
    )
    parser.add_argument("--base-url", default="http://localhost:8000", help="Server root URL.")
    parser.add_argument(
        "--media-url",
        default=SAMPLE_MEDIA_URL,
        help="A live WhatsApp media URL to proxy. Expired links are reported, not treated as failures.",
    )
    parser.add_argument("--timeout", type=float, default=30.0, help="Per-request timeout in seconds.")
    return parser.parse_args()


async def _expect_status(client: httpx.AsyncClient, name: str, expected: int, **params) -> CheckResult:
    response = await client.get("/api/proxy-fb-media", params=params or None)
    try:
        code = response.json().get("code", "")
    except ValueError:
        code = ""
    return CheckResult(
        name=name,
        status=response.status_code,
        passed=response.status_code == expected,
        detail=f"expected {expected}, code={code or '-'}",
    )


async def check_health(client: httpx.AsyncClient) -> CheckResult:
    response = await client.get("/api/media/health")
    payload = response.json() if response.is_success else {}
    return CheckResult(
        name="media health",
        status=response.status_code,
        passed=response.is_success and payload.get("storage_available") is True,
        detail=f"status={payload.get('status', '-')}, storage={payload.get('storage_root', '-')}",
    )


async def check_live_media(client: httpx.AsyncClient, media_url: str) -> CheckResult:
    async with client.stream("GET", "/api/proxy-fb-media", params={"url": media_url}) as response:
        if not response.is_success:
            await response.aread()
            # provider links expire after a few minutes
            return CheckResult(
                name="live media",
                status=response.status_code,
                passed=response.status_code == 502,
                detail="upstream rejected the link (likely expired)",
            )
        received = 0
        async for chunk in response.aiter_bytes():
            received += len(chunk)
        return CheckResult(
            name="live media",
            status=response.status_code,
            passed=received > 0,
            detail=(
                f"{received} bytes, type={response.headers.get('content-type')}, "
                f"time={response.headers.get('x-response-time')}"
            ),
        )


async def main() -> int:
    args = parse_args()
    async with httpx.AsyncClient(base_url=args.base_url, timeout=args.timeout) as client:
        try:
            results = [
                await check_health(client),
                await _expect_status(client, "missing url", 400),
                await _expect_status(client, "untrusted host", 403, url="https://malicious-site.com/fake-media"),
                await _expect_status(client, "non-http url", 400, url="ftp://lookaside.fbsbx.com/x"),
                await check_live_media(client, args.media_url),
            ]
        except httpx.HTTPError as exc:
            print(f"Could not reach {args.base_url}: {exc}")
            return 2

    for result in results:
        mark = "ok  " if result.passed else "FAIL"
        print(f"[{mark}] {result.name}: {result.status} ({result.detail})")

    return 0 if all(result.passed for result in results) else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
