"""Contract for sending one notification to one push address."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from bandsync_notifications.models import NotificationPayload


class FailureReason(str, Enum):
    INVALID_ADDRESS = "invalid_address"
    OTHER = "other"


class DeliveryError(Exception):
    """The gateway refused or failed to deliver a message."""

    def __init__(self, reason: FailureReason, detail: str, code: str | None = None) -> None:
        super().__init__(detail)
        self.reason = reason
        self.detail = detail
        self.code = code

    @property
    def is_invalid_address(self) -> bool:
        return self.reason is FailureReason.INVALID_ADDRESS


class PushGateway(Protocol):
    async def send(self, token: str, payload: NotificationPayload) -> str:
        """Deliver ``payload`` to ``token`` and return the gateway message id.

        Raises:
            DeliveryError: The gateway rejected the message.
        """
        ...
