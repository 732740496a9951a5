"""Pytest configuration for the notification dispatcher tests."""

from __future__ import annotations

import logging

import pytest

from bandsync_notifications.gateway.base import DeliveryError, FailureReason
from bandsync_notifications.models import NotificationPayload
from bandsync_notifications.store.memory import InMemoryStore

try:
    import instrukt_ai_logging

    def _noop_configure_logging(*_args, **_kwargs):  # type: ignore[no-untyped-def]
        return None

    instrukt_ai_logging.configure_logging = _noop_configure_logging  # type: ignore[assignment]
    logging.getLogger("bandsync_notifications").handlers.clear()
    logging.getLogger().handlers.clear()
except Exception:
    pass


def pytest_collection_modifyitems(config, items):
    """Set per-marker timeouts: unit=1s, integration=5s."""
    for item in items:
        if "unit" in item.keywords:
            item.add_marker(pytest.mark.timeout(1))
        elif "integration" in item.keywords:
            item.add_marker(pytest.mark.timeout(5))


class RecordingGateway:
    """Push gateway fake: records every send and fails configured tokens."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, NotificationPayload]] = []
        self.invalid_tokens: set[str] = set()
        self.failing_tokens: set[str] = set()
        self.crashing_tokens: set[str] = set()

    async def send(self, token: str, payload: NotificationPayload) -> str:
        self.sent.append((token, payload))
        if token in self.invalid_tokens:
            raise DeliveryError(
                FailureReason.INVALID_ADDRESS,
                "Requested entity was not found.",
                code="messaging/registration-token-not-registered",
            )
        if token in self.failing_tokens:
            raise DeliveryError(FailureReason.OTHER, "Service unavailable", code="UNAVAILABLE")
        if token in self.crashing_tokens:
            raise RuntimeError("socket closed")
        return f"projects/bandsync/messages/{len(self.sent)}"

    @property
    def sent_tokens(self) -> list[str]:
        return [token for token, _ in self.sent]


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore(
        {
            "chats": {"c1": {"participants": ["u1", "u2", "u3"]}},
            "groups": {"g1": {"members": ["u1", "u2", "u4"]}},
            "users": {
                "u1": {"fcmTokens": [{"token": "tok-u1"}]},
                "u2": {"fcmTokens": [{"token": "tok-u2a"}, {"token": "tok-u2b", "platform": "iOS"}]},
                "u3": {"fcmToken": "tok-u3"},
                "u4": {"fcmTokens": [{"token": "tok-u4"}], "fcmToken": "tok-u4"},
                "u6": {"fcmTokens": [{"token": "tok-u6"}]},
            },
        }
    )
