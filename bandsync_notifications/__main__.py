"""CLI entrypoint: run the webhook server, the stream consumer, or a single trigger."""

from __future__ import annotations

import argparse
import asyncio
import json
import signal
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import httpx
import uvicorn
from instrukt_ai_logging import get_logger

from bandsync_notifications.api import create_app
from bandsync_notifications.config import NotifierConfig, load_config
from bandsync_notifications.events import Trigger
from bandsync_notifications.gateway.fcm import FcmGateway
from bandsync_notifications.logging_config import setup_logging
from bandsync_notifications.pipeline import NotificationPipeline
from bandsync_notifications.processor import TriggerProcessor
from bandsync_notifications.store.firestore import FirestoreStore
from bandsync_notifications.triggers import TriggerHandlers

logger = get_logger(__name__)


@asynccontextmanager
async def build_handlers(config: NotifierConfig) -> AsyncIterator[TriggerHandlers]:
    """Wire the Firestore store and FCM gateway into trigger handlers."""
    store_client = httpx.AsyncClient(timeout=config.firestore.timeout_s)
    fcm_client = httpx.AsyncClient(timeout=config.fcm.timeout_s)
    async with store_client, fcm_client:
        store = FirestoreStore(
            config.firestore.project_id,
            store_client,
            database=config.firestore.database,
            realtime_database_url=config.firestore.realtime_database_url,
            access_token=config.firestore.access_token,
            chats_collection=config.firestore.chats_collection,
            groups_collection=config.firestore.groups_collection,
            users_collection=config.firestore.users_collection,
        )
        gateway = FcmGateway(config.fcm.project_id, fcm_client, access_token=config.fcm.access_token)
        yield TriggerHandlers(NotificationPipeline(store, gateway))


async def _serve(config: NotifierConfig) -> None:
    async with build_handlers(config) as handlers:
        server = uvicorn.Server(
            uvicorn.Config(create_app(handlers), host=config.server.host, port=config.server.port, log_level="warning")
        )
        logger.info("serving triggers", host=config.server.host, port=config.server.port)
        await server.serve()


async def _consume(config: NotifierConfig) -> None:
    from redis.asyncio import Redis

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, shutdown_event.set)

    redis_client = Redis.from_url(config.redis.url)
    try:
        async with build_handlers(config) as handlers:
            processor = TriggerProcessor(
                redis_client,
                handlers,
                stream=config.redis.stream,
                group=config.redis.group,
                consumer_name=config.redis.consumer,
            )
            await processor.start(shutdown_event)
    finally:
        await redis_client.aclose()


async def _fire(config: NotifierConfig, trigger: str, params: dict[str, str], data_file: Path) -> int:
    data = json.loads(data_file.read_text(encoding="utf-8"))
    async with build_handlers(config) as handlers:
        result = await handlers.handle(trigger, params, data)
    if result is None:
        logger.error("trigger_failed", trigger=trigger)
        return 1
    logger.info(
        "trigger_done",
        trigger=trigger,
        stage=result.stage.value,
        recipients=sorted(result.recipients),
        attempted=len(result.attempted_tokens),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="BandSync push notification dispatcher.")
    parser.add_argument("--config", type=Path, default=None, help="Path to notifications.yml.")
    parser.add_argument("--log-level", default=None, help="Override BANDSYNC_NOTIFICATIONS_LOG_LEVEL.")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("serve", help="Accept triggers over HTTP.")
    sub.add_parser("consume", help="Consume triggers from the Redis stream.")
    fire = sub.add_parser("fire", help="Run one trigger from a JSON record file.")
    fire.add_argument("trigger", choices=[t.value for t in Trigger])
    fire.add_argument("data_file", type=Path, help="JSON file holding the created record.")
    fire.add_argument(
        "--param", action="append", default=[], metavar="KEY=VALUE", help="Path param, e.g. chatId=c1."
    )

    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "serve":
        asyncio.run(_serve(config))
        return 0
    if args.command == "consume":
        asyncio.run(_consume(config))
        return 0

    params: dict[str, str] = {}
    for item in args.param:
        key, sep, value = item.partition("=")
        if not sep:
            parser.error(f"--param expects KEY=VALUE, got: {item}")
        params[key] = value
    return asyncio.run(_fire(config, args.trigger, params, args.data_file))


if __name__ == "__main__":
    raise SystemExit(main())
