"""HTTP trigger surface — lets the event source deliver triggers as webhooks."""

from __future__ import annotations

import json

from fastapi import FastAPI, HTTPException, Request
from instrukt_ai_logging import get_logger

from bandsync_notifications.triggers import TriggerHandlers

logger = get_logger(__name__)


def create_app(handlers: TriggerHandlers) -> FastAPI:
    app = FastAPI(title="BandSync notifications")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/triggers/{trigger}")
    async def fire_trigger(trigger: str, request: Request) -> dict[str, str]:
        """Run one trigger. Pipeline faults are absorbed by the handler, so known triggers always succeed."""
        handler = handlers.get(trigger)
        if handler is None:
            raise HTTPException(status_code=404, detail=f"Unknown trigger: {trigger}")

        try:
            body = json.loads(await request.body())
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON payload for trigger: %s", trigger)
            raise HTTPException(status_code=400, detail="Invalid JSON payload") from exc
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Payload must be an object")
        params = body.get("params")
        data = body.get("data")
        params = {} if params is None else params
        data = {} if data is None else data
        if not isinstance(params, dict) or not isinstance(data, dict):
            raise HTTPException(status_code=400, detail="'params' and 'data' must be objects")

        await handler({str(k): str(v) for k, v in params.items()}, data)
        return {"status": "accepted"}

    return app
