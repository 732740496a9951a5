"""Trigger processor — feeds trigger entries from a Redis stream into the trigger handlers.

Entries carry ``trigger`` plus JSON-encoded ``params`` and ``data``. Each
batch is acknowledged in one ``XACK`` once every entry in it has been
handled, whatever the outcome: a malformed entry is logged and dropped
rather than redelivered forever.
"""

from __future__ import annotations

import asyncio
import json
import os
from typing import Any

from instrukt_ai_logging import get_logger
from redis.exceptions import ResponseError

from bandsync_notifications.triggers import TriggerHandlers

logger = get_logger(__name__)

STREAM_NAME = "bandsync:triggers"
CONSUMER_GROUP = "notification-dispatch"
BATCH_SIZE = 10
BLOCK_MS = 1000
# Entry id "0" re-reads entries delivered to this consumer but never ACKed.
PENDING = "0"
NEW = ">"


def _str(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes) else value


def decode_entry(data: dict[bytes, bytes] | dict[str, str]) -> tuple[str, dict[str, str], dict[str, Any]]:
    """Split a stream entry into trigger name, path params and record data."""
    fields = {_str(k): _str(v) for k, v in data.items()}
    params = json.loads(fields["params"]) if fields.get("params") else {}
    record = json.loads(fields["data"]) if fields.get("data") else {}
    return fields["trigger"], {str(k): str(v) for k, v in params.items()}, record


class TriggerProcessor:
    def __init__(
        self,
        redis_client: Any,
        handlers: TriggerHandlers,
        stream: str = STREAM_NAME,
        group: str = CONSUMER_GROUP,
        consumer_name: str | None = None,
    ) -> None:
        self._redis = redis_client
        self._handlers = handlers
        self._stream = stream
        self._group = group
        self._consumer = consumer_name or f"dispatcher-{os.getpid()}"

    async def start(self, shutdown_event: asyncio.Event) -> None:
        """Drain this consumer's unacknowledged entries, then follow new ones until shutdown."""
        try:
            await self._redis.xgroup_create(self._stream, self._group, id="$", mkstream=True)
        except ResponseError as exc:
            if "BUSYGROUP" not in str(exc):
                raise

        recovered = await self.poll(PENDING, count=BATCH_SIZE * 5)
        if recovered:
            logger.info("recovered pending triggers", count=recovered)

        logger.info("consuming triggers", stream=self._stream, group=self._group, consumer=self._consumer)
        while not shutdown_event.is_set():
            await self.poll(NEW, count=BATCH_SIZE, block_ms=BLOCK_MS)
        logger.info("trigger consumer stopped", consumer=self._consumer)

    async def poll(self, from_id: str, count: int, block_ms: int | None = None) -> int:
        """Read one batch starting at ``from_id`` and handle it; return the number of entries handled.

        Read errors are logged and backed off, never raised, so the consumer keeps running.
        """
        try:
            batches = await self._redis.xreadgroup(
                self._group, self._consumer, {self._stream: from_id}, count=count, block=block_ms
            )
        except asyncio.CancelledError:
            raise
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("trigger stream read failed; backing off", from_id=from_id)
            await asyncio.sleep(1.0)
            return 0

        entry_ids = []
        for _stream, entries in batches or []:
            for entry_id, data in entries:
                await self._dispatch(entry_id, data)
                entry_ids.append(entry_id)
        if entry_ids:
            try:
                await self._redis.xack(self._stream, self._group, *entry_ids)
            except Exception:  # pylint: disable=broad-exception-caught
                logger.exception("failed to ACK trigger entries", count=len(entry_ids))
        return len(entry_ids)

    async def _dispatch(self, entry_id: bytes | str, data: dict[bytes, bytes] | dict[str, str]) -> None:
        try:
            trigger, params, record = decode_entry(data)
        except (KeyError, ValueError, AttributeError):
            logger.error("dropping malformed trigger entry", entry_id=_str(entry_id))
            return
        # Handlers absorb pipeline faults themselves.
        await self._handlers.handle(trigger, params, record)
