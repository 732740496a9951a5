"""Firebase Cloud Messaging HTTP v1 gateway."""

from __future__ import annotations

import httpx
from instrukt_ai_logging import get_logger

from bandsync_notifications.gateway.base import DeliveryError, FailureReason
from bandsync_notifications.models import NotificationPayload, short_token

logger = get_logger(__name__)

FCM_BASE_URL = "https://fcm.googleapis.com/v1"

# Codes meaning the token will never work again. The admin SDK spellings
# show up when requests are relayed through it.
INVALID_ADDRESS_CODES = frozenset(
    {
        "UNREGISTERED",
        "messaging/invalid-registration-token",
        "messaging/registration-token-not-registered",
    }
)


class FcmGateway:
    def __init__(self, project_id: str, client: httpx.AsyncClient, access_token: str | None = None) -> None:
        self._client = client
        self._url = f"{FCM_BASE_URL}/projects/{project_id}/messages:send"
        self._access_token = access_token

    async def send(self, token: str, payload: NotificationPayload) -> str:
        headers = {"Authorization": f"Bearer {self._access_token}"} if self._access_token else {}
        body = {"message": payload.to_fcm_message(token)}
        try:
            response = await self._client.post(self._url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            raise DeliveryError(FailureReason.OTHER, f"FCM transport error: {exc!r}") from exc

        if response.status_code >= 400:
            raise classify_error(response)

        try:
            message_id = str(response.json().get("name", ""))
        except ValueError as exc:
            raise DeliveryError(
                FailureReason.OTHER, f"FCM returned non-JSON (HTTP {response.status_code})"
            ) from exc
        logger.debug("fcm message accepted", token=short_token(token), message_id=message_id)
        return message_id


def classify_error(response: httpx.Response) -> DeliveryError:
    """Turn an FCM error response into a typed delivery error."""
    code: str | None = None
    status: str | None = None
    message = response.text[:200]
    try:
        body = response.json()
    except ValueError:
        body = {}
    error = body.get("error") if isinstance(body, dict) else None
    fcm_error = isinstance(error, dict) and bool(error)
    if fcm_error:
        status = error.get("status")
        message = error.get("message") or message
        for detail in error.get("details") or []:
            if isinstance(detail, dict) and detail.get("errorCode"):
                code = detail["errorCode"]
                break
    code = code or status

    detail_text = f"FCM send failed (HTTP {response.status_code}, {code}): {message}"
    if code in INVALID_ADDRESS_CODES:
        return DeliveryError(FailureReason.INVALID_ADDRESS, detail_text, code)
    # A bare 404 from a proxy or a wrong base URL says nothing about the token.
    if response.status_code == 404 and fcm_error and status == "NOT_FOUND":
        return DeliveryError(FailureReason.INVALID_ADDRESS, detail_text, code)
    if code == "INVALID_ARGUMENT" and "registration token" in message.lower():
        return DeliveryError(FailureReason.INVALID_ADDRESS, detail_text, code)
    return DeliveryError(FailureReason.OTHER, detail_text, code)
