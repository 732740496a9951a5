"""Trigger boundary — the three entry points invoked by the event source.

Nothing raised inside the pipeline escapes a handler: a fault is logged with
its trigger context and the invocation still completes, so the platform
never re-invokes the same event over and over.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from instrukt_ai_logging import get_logger

from bandsync_notifications.events import Trigger, parse_trigger
from bandsync_notifications.pipeline import NotificationPipeline, PipelineResult

logger = get_logger(__name__)

TriggerHandler = Callable[[dict[str, str], dict[str, Any]], Awaitable["PipelineResult | None"]]


class TriggerHandlers:
    def __init__(self, pipeline: NotificationPipeline) -> None:
        self._pipeline = pipeline

    async def on_message_created(self, params: dict[str, str], data: dict[str, Any]) -> PipelineResult | None:
        """New record under ``messages/{chatId}/{messageId}``."""
        return await self._run(Trigger.MESSAGE_CREATED, params, data)

    async def on_task_created(self, params: dict[str, str], data: dict[str, Any]) -> PipelineResult | None:
        """New record at ``tasks/{taskId}``."""
        return await self._run(Trigger.TASK_CREATED, params, data)

    async def on_event_created(self, params: dict[str, str], data: dict[str, Any]) -> PipelineResult | None:
        """New record at ``events/{eventId}``."""
        return await self._run(Trigger.EVENT_CREATED, params, data)

    def get(self, trigger: str) -> TriggerHandler | None:
        handlers: dict[str, TriggerHandler] = {
            Trigger.MESSAGE_CREATED.value: self.on_message_created,
            Trigger.TASK_CREATED.value: self.on_task_created,
            Trigger.EVENT_CREATED.value: self.on_event_created,
        }
        return handlers.get(trigger)

    async def handle(self, trigger: str, params: dict[str, str], data: dict[str, Any]) -> PipelineResult | None:
        handler = self.get(trigger)
        if handler is None:
            logger.warning("unknown trigger", trigger=trigger)
            return None
        return await handler(params, data)

    async def _run(self, trigger: Trigger, params: dict[str, str], data: dict[str, Any]) -> PipelineResult | None:
        logger.info("trigger fired", trigger=trigger.value, params=params)
        try:
            event = parse_trigger(trigger, params, data)
            return await self._pipeline.run(event)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("notification pipeline failed", trigger=trigger.value, params=params)
            return None
