"""
Firebase Cloud Messaging client.

Talks to the FCM legacy HTTP endpoint with a server API key.  Delivery
problems never raise to callers; they are reported back as a failed
``PushResult`` so request handlers can relay them.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

RIDE_NOTIFICATIONS: dict[str, tuple[str, str]] = {
    "accepted": ("Ride Accepted", "Your ride has been accepted"),
    "completed": ("Ride Completed", "Your ride is complete. Thank you for using VYBGO!"),
    "cancelled": ("Ride Cancelled", "Your ride has been cancelled"),
    "updated": ("Ride Update", "Your ride status has been updated"),
}


@dataclass(frozen=True)
class PushResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class MulticastResult:
    success: bool
    success_count: int = 0
    failure_count: int = 0
    errors: list[str] = field(default_factory=list)


class FCMService:
    """Async HTTP client for FCM push delivery."""

    def __init__(
        self,
        server_api_key: str,
        endpoint: str = "https://fcm.googleapis.com/fcm/send",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._server_api_key = server_api_key
        self._endpoint = endpoint
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def is_configured(self) -> bool:
        return bool(self._server_api_key)

    async def send_notification(
        self,
        device_token: str,
        title: str,
        body: str,
        data: Optional[dict[str, str]] = None,
    ) -> PushResult:
        """Send a push notification to a single device."""
        if not self.is_configured:
            return PushResult(
                success=False,
                error="FCM is not configured. Set FCM_SERVER_API_KEY",
            )

        payload = {
            "to": device_token,
            "notification": {"title": title, "body": body},
            "data": data or {},
            "priority": "high",
            "android": {"priority": "high"},
        }
        try:
            resp = await self._client.post(
                self._endpoint,
                json=payload,
                headers={"Authorization": f"key={self._server_api_key}"},
            )
            resp.raise_for_status()
            reply = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("FCM send failed: %s", exc)
            return PushResult(success=False, error=str(exc) or "Failed to send notification")

        if reply.get("success") == 1:
            message_id = reply.get("multicast_id")
            return PushResult(
                success=True,
                message_id=str(message_id) if message_id is not None else None,
            )
        if reply.get("failure"):
            return PushResult(
                success=False, error="Device token invalid or unregistered"
            )
        return PushResult(success=False, error="Unknown error")

    async def send_multicast(
        self,
        device_tokens: list[str],
        title: str,
        body: str,
        data: Optional[dict[str, str]] = None,
    ) -> MulticastResult:
        """Send the same notification to several devices, one request each."""
        if not self.is_configured:
            return MulticastResult(success=False, errors=["FCM is not configured"])
        if not device_tokens:
            return MulticastResult(success=False, errors=["No device tokens provided"])

        results = await asyncio.gather(
            *(
                self.send_notification(token, title, body, data)
                for token in device_tokens
            )
        )
        failures = [r for r in results if not r.success]
        return MulticastResult(
            success=not failures,
            success_count=len(results) - len(failures),
            failure_count=len(failures),
            errors=[r.error for r in failures if r.error],
        )

    async def send_ride_notification(
        self,
        device_token: str,
        ride_id: str,
        kind: str,
        driver_name: Optional[str] = None,
    ) -> PushResult:
        title, body = RIDE_NOTIFICATIONS.get(kind, RIDE_NOTIFICATIONS["updated"])
        if kind == "accepted" and driver_name:
            body = f"{driver_name} has accepted your ride"
        return await self.send_notification(
            device_token,
            title,
            body,
            {"type": "ride_status_update", "rideId": ride_id, "status": kind},
        )

    async def aclose(self) -> None:
        await self._client.aclose()
