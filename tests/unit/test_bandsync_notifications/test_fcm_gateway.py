"""Tests for the FCM HTTP v1 gateway."""

from __future__ import annotations

import json

import httpx
import pytest

from bandsync_notifications.events import TaskCreated
from bandsync_notifications.gateway.base import DeliveryError, FailureReason
from bandsync_notifications.gateway.fcm import FcmGateway
from bandsync_notifications.payloads import build_task_payload

PAYLOAD = build_task_payload(
    TaskCreated(task_id="t1", title="Restring", assigned_user_ids=["u2"], created_by_user_id="u1"), timestamp_ms=7
)


def _error(status: int, code: str, message: str = "boom") -> httpx.Response:
    body = {
        "error": {
            "code": status,
            "message": message,
            "status": code if code.isupper() else "NOT_FOUND",
            "details": [{"@type": "type.googleapis.com/google.firebase.fcm.v1.FcmError", "errorCode": code}],
        }
    }
    return httpx.Response(status, json=body)


def _gateway(handler) -> FcmGateway:  # type: ignore[no-untyped-def]
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FcmGateway("bandsync", client, access_token="secret")


@pytest.mark.asyncio
async def test_send_posts_v1_message() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"name": "projects/bandsync/messages/42"})

    message_id = await _gateway(handler).send("tok-1", PAYLOAD)

    assert message_id == "projects/bandsync/messages/42"
    request = seen[0]
    assert request.url.path == "/v1/projects/bandsync/messages:send"
    assert request.headers["Authorization"] == "Bearer secret"
    message = json.loads(request.content)["message"]
    assert message["token"] == "tok-1"
    assert message["notification"] == {"title": "New Task Assigned", "body": "Restring"}
    assert message["data"] == {"type": "task", "taskId": "t1", "timestamp": "7"}
    assert message["apns"]["payload"]["aps"]["category"] == "TASK_NOTIFICATION"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        _error(404, "UNREGISTERED", "Requested entity was not found."),
        _error(400, "INVALID_ARGUMENT", "The registration token is not a valid FCM registration token"),
        _error(400, "messaging/registration-token-not-registered"),
        httpx.Response(
            404, json={"error": {"code": 404, "message": "Requested entity was not found.", "status": "NOT_FOUND"}}
        ),
    ],
)
async def test_dead_tokens_are_invalid_address(response: httpx.Response) -> None:
    with pytest.raises(DeliveryError) as exc_info:
        await _gateway(lambda _request: response).send("tok-1", PAYLOAD)
    assert exc_info.value.reason is FailureReason.INVALID_ADDRESS


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        _error(503, "UNAVAILABLE"),
        _error(429, "QUOTA_EXCEEDED"),
        _error(400, "INVALID_ARGUMENT", "Invalid value at 'message.data[0].value'"),
        httpx.Response(500, text="upstream exploded"),
        httpx.Response(404, text="<html>Not Found</html>"),
        httpx.Response(404, json={"detail": "Not Found"}),
        httpx.Response(404, json=["not", "an", "fcm", "error"]),
    ],
)
async def test_other_errors_are_not_invalid_address(response: httpx.Response) -> None:
    with pytest.raises(DeliveryError) as exc_info:
        await _gateway(lambda _request: response).send("tok-1", PAYLOAD)
    assert exc_info.value.reason is FailureReason.OTHER


@pytest.mark.asyncio
async def test_transport_error_is_other_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(DeliveryError) as exc_info:
        await _gateway(handler).send("tok-1", PAYLOAD)
    assert exc_info.value.reason is FailureReason.OTHER
