"""bandsync_notifications — push notification fan-out for BandSync chats, tasks and events."""

from bandsync_notifications.addresses import AddressBook, merge_addresses
from bandsync_notifications.dispatcher import Dispatcher
from bandsync_notifications.events import (
    CalendarEventCreated,
    DomainEvent,
    EventKind,
    MessageCreated,
    TaskCreated,
    Trigger,
    parse_trigger,
)
from bandsync_notifications.hygiene import AddressHygiene
from bandsync_notifications.models import (
    Address,
    DeliveryOutcome,
    DeliveryReport,
    NotificationPayload,
    OutcomeStatus,
    UserProfile,
)
from bandsync_notifications.payloads import PayloadBuilder
from bandsync_notifications.pipeline import NotificationPipeline, PipelineResult, PipelineStage
from bandsync_notifications.recipients import RecipientResolver
from bandsync_notifications.strategies import StrategyCatalog, build_default_catalog
from bandsync_notifications.triggers import TriggerHandlers

__all__ = [
    "Address",
    "AddressBook",
    "AddressHygiene",
    "CalendarEventCreated",
    "DeliveryOutcome",
    "DeliveryReport",
    "Dispatcher",
    "DomainEvent",
    "EventKind",
    "MessageCreated",
    "NotificationPayload",
    "NotificationPipeline",
    "OutcomeStatus",
    "PayloadBuilder",
    "PipelineResult",
    "PipelineStage",
    "RecipientResolver",
    "StrategyCatalog",
    "TaskCreated",
    "Trigger",
    "TriggerHandlers",
    "UserProfile",
    "build_default_catalog",
    "merge_addresses",
    "parse_trigger",
]
