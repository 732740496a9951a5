"""Push delivery gateway collaborators."""

from bandsync_notifications.gateway.base import DeliveryError, FailureReason, PushGateway
from bandsync_notifications.gateway.fcm import FcmGateway

__all__ = ["DeliveryError", "FailureReason", "PushGateway", "FcmGateway"]
