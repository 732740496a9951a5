"""Data model shared by the dispatch pipeline stages."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Chat(BaseModel):
    chat_id: str
    participant_user_ids: list[str] = Field(default_factory=list)


class Group(BaseModel):
    group_id: str
    member_user_ids: list[str] = Field(default_factory=list)


class Address(BaseModel):
    """A push token bound to one installed client."""

    model_config = ConfigDict(frozen=True)

    token: str


class UserProfile(BaseModel):
    user_id: str
    registered_addresses: list[Address] = Field(default_factory=list)
    # Older clients wrote a single token instead of the list.
    legacy_token: str | None = None


class ApnsHints(BaseModel):
    category: str
    interruption_level: str = "active"
    priority: str = "10"
    push_type: str = "alert"
    sound: str = "default"
    badge: int = 1


class AndroidHints(BaseModel):
    channel_id: str
    priority: str = "high"
    notification_priority: str = "PRIORITY_HIGH"
    sound: str = "default"


class PlatformHints(BaseModel):
    apns: ApnsHints
    android: AndroidHints


class NotificationPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    body: str
    data: dict[str, str] = Field(default_factory=dict)
    hints: PlatformHints

    def to_fcm_message(self, token: str) -> dict[str, object]:
        """Render as an FCM v1 ``message`` object addressed to ``token``."""
        return {
            "token": token,
            "notification": {"title": self.title, "body": self.body},
            "data": dict(self.data),
            "apns": {
                "headers": {
                    "apns-priority": self.hints.apns.priority,
                    "apns-push-type": self.hints.apns.push_type,
                },
                "payload": {
                    "aps": {
                        "alert": {"title": self.title, "body": self.body},
                        "sound": self.hints.apns.sound,
                        "badge": self.hints.apns.badge,
                        "category": self.hints.apns.category,
                        "interruption-level": self.hints.apns.interruption_level,
                    }
                },
            },
            "android": {
                "priority": self.hints.android.priority,
                "notification": {
                    "sound": self.hints.android.sound,
                    "notification_priority": self.hints.android.notification_priority,
                    "channel_id": self.hints.android.channel_id,
                },
            },
        }


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    INVALID_ADDRESS = "invalid_address"
    TRANSIENT_FAILURE = "transient_failure"


class DeliveryOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: OutcomeStatus
    message_id: str | None = None
    detail: str | None = None

    @classmethod
    def success(cls, message_id: str) -> "DeliveryOutcome":
        return cls(status=OutcomeStatus.SUCCESS, message_id=message_id)

    @classmethod
    def invalid_address(cls, detail: str | None = None) -> "DeliveryOutcome":
        return cls(status=OutcomeStatus.INVALID_ADDRESS, detail=detail)

    @classmethod
    def transient_failure(cls, detail: str) -> "DeliveryOutcome":
        return cls(status=OutcomeStatus.TRANSIENT_FAILURE, detail=detail)


class DeliveryReport(BaseModel):
    """Outcome of one delivery attempt to one address."""

    model_config = ConfigDict(frozen=True)

    token: str
    outcome: DeliveryOutcome

    @property
    def is_invalid_address(self) -> bool:
        return self.outcome.status is OutcomeStatus.INVALID_ADDRESS


def short_token(token: str) -> str:
    """Truncate a push token for log output."""
    return token if len(token) <= 12 else f"{token[:8]}…"
