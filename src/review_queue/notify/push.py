"""Pushbullet push notifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from review_queue.config import DEFAULT_PUSHBULLET_URL

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PushError(Exception):
    """Pushbullet call failure or push target misconfiguration."""

    message: str
    code: str = "push_error"

    def __str__(self) -> str:
        return self.message


class PushbulletClient:
    """Minimal Pushbullet REST client: device listing and link pushes."""

    def __init__(
        self,
        access_token: str,
        *,
        base_url: str = DEFAULT_PUSHBULLET_URL,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
            headers={"Access-Token": access_token},
            transport=transport,
        )

    async def list_devices(self) -> list[dict[str, Any]]:
        """Active devices registered for the access token."""

        payload = await self._request("GET", "devices")
        devices = payload.get("devices") if isinstance(payload, dict) else None
        if not isinstance(devices, list):
            raise PushError("Pushbullet error: malformed devices response", code="malformed")
        return [
            device
            for device in devices
            if isinstance(device, dict) and device.get("active", True)
        ]

    async def ensure_devices(self) -> None:
        """Fail fast when there is nothing to push to."""

        if not await self.list_devices():
            raise PushError("Found no active devices to push to.", code="no_devices")

    async def push_link(self, title: str, url: str) -> None:
        await self._request("POST", "pushes", json={"type": "link", "title": title, "url": url})

    async def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as error:
            raise PushError(f"Pushbullet error: {error}", code=type(error).__name__) from error
        if not response.is_success:
            raise PushError(
                f"Pushbullet error: HTTP {response.status_code}",
                code=f"HTTP {response.status_code}",
            )
        try:
            return response.json()
        except ValueError as error:
            raise PushError("Pushbullet error: invalid JSON", code="malformed") from error

    async def aclose(self) -> None:
        await self._client.aclose()
