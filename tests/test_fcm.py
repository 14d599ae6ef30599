"""FCM client against a mocked HTTP transport."""

from __future__ import annotations

import json

import httpx
import pytest

from vybgo.infrastructure.fcm import FCMService


def _service(handler, key: str = "server-key") -> FCMService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FCMService(key, endpoint="https://fcm.test/send", client=client)


class TestSendNotification:
    @pytest.mark.asyncio
    async def test_unconfigured_service_skips_network(self):
        def handler(request):
            raise AssertionError("no request expected")

        fcm = _service(handler, key="")
        result = await fcm.send_notification("tok", "Hi", "There")

        assert not fcm.is_configured
        assert result.success is False
        assert "not configured" in result.error

    @pytest.mark.asyncio
    async def test_success(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": 1, "multicast_id": 42})

        result = await _service(handler).send_notification(
            "tok", "Hi", "There", {"k": "v"}
        )

        assert result.success is True
        assert result.message_id == "42"
        assert seen["auth"] == "key=server-key"
        assert seen["body"]["to"] == "tok"
        assert seen["body"]["notification"] == {"title": "Hi", "body": "There"}
        assert seen["body"]["data"] == {"k": "v"}
        assert seen["body"]["priority"] == "high"

    @pytest.mark.asyncio
    async def test_invalid_token(self):
        def handler(request):
            return httpx.Response(200, json={"success": 0, "failure": 1})

        result = await _service(handler).send_notification("tok", "Hi", "There")

        assert result.success is False
        assert result.error == "Device token invalid or unregistered"

    @pytest.mark.asyncio
    async def test_unknown_reply(self):
        def handler(request):
            return httpx.Response(200, json={})

        result = await _service(handler).send_notification("tok", "Hi", "There")

        assert result.error == "Unknown error"

    @pytest.mark.asyncio
    async def test_http_error_is_reported_not_raised(self):
        def handler(request):
            return httpx.Response(401, text="unauthorized")

        result = await _service(handler).send_notification("tok", "Hi", "There")

        assert result.success is False
        assert "401" in result.error

    @pytest.mark.asyncio
    async def test_transport_error_is_reported_not_raised(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        result = await _service(handler).send_notification("tok", "Hi", "There")

        assert result.success is False
        assert "connection refused" in result.error


class TestMulticast:
    @pytest.mark.asyncio
    async def test_counts_successes_and_failures(self):
        def handler(request):
            token = json.loads(request.content)["to"]
            if token == "bad":
                return httpx.Response(200, json={"success": 0, "failure": 1})
            return httpx.Response(200, json={"success": 1, "multicast_id": 1})

        result = await _service(handler).send_multicast(
            ["a", "bad", "b"], "Hi", "There"
        )

        assert result.success is False
        assert result.success_count == 2
        assert result.failure_count == 1
        assert result.errors == ["Device token invalid or unregistered"]

    @pytest.mark.asyncio
    async def test_empty_token_list(self):
        result = await _service(lambda r: httpx.Response(200)).send_multicast(
            [], "Hi", "There"
        )

        assert result.success is False
        assert result.errors == ["No device tokens provided"]


class TestRideNotification:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kind, driver, title, body",
        [
            ("accepted", "Sam", "Ride Accepted", "Sam has accepted your ride"),
            ("accepted", None, "Ride Accepted", "Your ride has been accepted"),
            ("cancelled", None, "Ride Cancelled", "Your ride has been cancelled"),
            ("bogus", None, "Ride Update", "Your ride status has been updated"),
        ],
    )
    async def test_message_text(self, kind, driver, title, body):
        seen = {}

        def handler(request):
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={"success": 1, "multicast_id": 7})

        result = await _service(handler).send_ride_notification("tok", "r1", kind, driver)

        assert result.success is True
        assert seen["notification"] == {"title": title, "body": body}
        assert seen["data"]["type"] == "ride_status_update"
        assert seen["data"]["rideId"] == "r1"

    @pytest.mark.asyncio
    async def test_unknown_kind_keeps_caller_status_in_data(self):
        seen = {}

        def handler(request):
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={"success": 1, "multicast_id": 7})

        await _service(handler).send_ride_notification("tok", "r1", "arrived")

        assert seen["notification"]["title"] == "Ride Update"
        assert seen["data"]["status"] == "arrived"
