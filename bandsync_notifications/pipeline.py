"""Notification pipeline — resolve, look up, build, dispatch, reconcile."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from instrukt_ai_logging import get_logger

from bandsync_notifications.addresses import AddressBook
from bandsync_notifications.dispatcher import Dispatcher
from bandsync_notifications.events import DomainEvent
from bandsync_notifications.gateway.base import PushGateway
from bandsync_notifications.hygiene import AddressHygiene
from bandsync_notifications.models import Address, DeliveryReport, NotificationPayload
from bandsync_notifications.payloads import PayloadBuilder
from bandsync_notifications.recipients import RecipientResolver
from bandsync_notifications.store.base import DocumentStore
from bandsync_notifications.strategies import StrategyCatalog, build_default_catalog

logger = get_logger(__name__)


class PipelineStage(str, Enum):
    TRIGGERED = "triggered"
    RESOLVING_RECIPIENTS = "resolving_recipients"
    LOOKING_UP_ADDRESSES = "looking_up_addresses"
    BUILDING_PAYLOAD = "building_payload"
    DISPATCHING = "dispatching"
    RECONCILING = "reconciling"
    DONE = "done"


@dataclass
class PipelineResult:
    event: DomainEvent
    stage: PipelineStage = PipelineStage.TRIGGERED
    recipients: set[str] = field(default_factory=set)
    payload: NotificationPayload | None = None
    reports: dict[str, list[DeliveryReport]] = field(default_factory=dict)
    removed_tokens: dict[str, list[str]] = field(default_factory=dict)

    @property
    def attempted_tokens(self) -> list[str]:
        return [report.token for reports in self.reports.values() for report in reports]


class NotificationPipeline:
    """Runs one domain event through every stage in order.

    Stages never move backwards and nothing is retried. Address lookups and
    sends for different recipients run concurrently; a lookup failure for one
    recipient only costs that recipient its notification.
    """

    def __init__(
        self,
        store: DocumentStore,
        gateway: PushGateway,
        catalog: StrategyCatalog | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        catalog = catalog or build_default_catalog()
        self._resolver = RecipientResolver(store, catalog)
        self._address_book = AddressBook(store)
        self._builder = PayloadBuilder(catalog, clock)
        self._dispatcher = Dispatcher(gateway)
        self._hygiene = AddressHygiene(store)

    async def run(self, event: DomainEvent) -> PipelineResult:
        result = PipelineResult(event=event)

        result.stage = PipelineStage.RESOLVING_RECIPIENTS
        recipients = await self._resolver.resolve(event)
        result.recipients = recipients
        if not recipients:
            logger.info("no recipients for event", kind=event.kind.value)
            result.stage = PipelineStage.DONE
            return result

        result.stage = PipelineStage.LOOKING_UP_ADDRESSES
        ordered = sorted(recipients)
        address_sets = await self._lookup_all(ordered)

        result.stage = PipelineStage.BUILDING_PAYLOAD
        payload = self._builder.build(event)
        result.payload = payload

        result.stage = PipelineStage.DISPATCHING
        logger.info("sending notifications", kind=event.kind.value, recipients=len(ordered))
        targets = [user_id for user_id in ordered if address_sets[user_id]]
        sent = await asyncio.gather(
            *(self._dispatcher.dispatch(address_sets[user_id], payload, user_id) for user_id in targets)
        )
        result.reports = dict(zip(targets, sent))

        result.stage = PipelineStage.RECONCILING
        removed = await asyncio.gather(
            *(self._hygiene.reconcile(user_id, reports) for user_id, reports in result.reports.items())
        )
        result.removed_tokens = {user_id: tokens for user_id, tokens in zip(targets, removed) if tokens}

        result.stage = PipelineStage.DONE
        logger.info(
            "notifications settled",
            kind=event.kind.value,
            attempted=len(result.attempted_tokens),
            removed=sum(len(tokens) for tokens in result.removed_tokens.values()),
        )
        return result

    async def _lookup_all(self, user_ids: list[str]) -> dict[str, list[Address]]:
        found = await asyncio.gather(
            *(self._address_book.addresses_for(user_id) for user_id in user_ids), return_exceptions=True
        )
        address_sets: dict[str, list[Address]] = {}
        for user_id, addresses in zip(user_ids, found):
            if isinstance(addresses, BaseException):
                if not isinstance(addresses, Exception):
                    raise addresses
                logger.error("address lookup failed", user_id=user_id, error=repr(addresses))
                address_sets[user_id] = []
            else:
                address_sets[user_id] = addresses
        return address_sets
