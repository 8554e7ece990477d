import asyncio
from contextlib import suppress
from typing import Annotated
from uuid import uuid4

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from chatcore.api.deps import get_event_gateway, get_realtime_manager
from chatcore.core.logger import logger
from chatcore.services.gateway import EventGateway
from chatcore.services.realtime_service import RealtimeManager

router = APIRouter()


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    realtime: Annotated[RealtimeManager, Depends(get_realtime_manager)],
    gateway: Annotated[EventGateway, Depends(get_event_gateway)],
) -> None:
    await websocket.accept()
    connection_id = uuid4().hex
    queue = await realtime.connect(connection_id)
    logger.info(f"Connection {connection_id} opened")

    async def pump() -> None:
        try:
            while True:
                data = await queue.get()
                await websocket.send_text(data)
        except (WebSocketDisconnect, RuntimeError, OSError):
            return

    sender = asyncio.create_task(pump())
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            await gateway.handle(connection_id, raw)
    except WebSocketDisconnect:
        pass
    finally:
        await gateway.disconnect(connection_id)
        await realtime.disconnect(connection_id)
        sender.cancel()
        with suppress(asyncio.CancelledError):
            await sender
        logger.info(f"Connection {connection_id} closed")
