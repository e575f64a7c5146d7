"""WebSocket handler for the tank telemetry relay.

One endpoint serves every role; the connect path decides which:

    /tanks/{tank_id}  -> receives readings for that tank
    /admin            -> receives readings for every tank
    /iot              -> controller link: sends readings, receives commands
    anything else     -> closed before accept (1008)

Protocol on the controller link:
1. Client → {action, tanks_info: [{tank_id, initial_level, current_level, refilling}]}
2. Server → nothing on success; {status: "error", message, details} on invalid data
3. Server → {action, tank_id, refill} when an administrator issues a command

Messages from subscribers are read only to notice the close.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Union

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from starlette.websockets import WebSocketState

from ...core.domain.connection import Connection, Role
from ...core.registry import resolve_role
from ...core.validation.codec import decode, encode_error
from ...errors import UnknownRole
from ...runtime import RelayRuntime

logger = logging.getLogger(__name__)

router = APIRouter()


class WebSocketSendHandle:
    """Send handle over a Starlette WebSocket. Never raises.

    Sends are serialized per socket; several tasks may write to the same peer.
    """

    def __init__(self, websocket: WebSocket):
        self._websocket = websocket
        self._send_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return (
            self._websocket.application_state == WebSocketState.CONNECTED
            and self._websocket.client_state == WebSocketState.CONNECTED
        )

    async def send(self, message: str) -> bool:
        async with self._send_lock:
            if not self.is_open:
                return False
            try:
                await self._websocket.send_text(message)
                return True
            except Exception as e:
                logger.debug("[WS] Send failed: %s", e)
                return False


def _frame_payload(message: dict) -> Optional[Union[str, bytes]]:
    if message.get("text") is not None:
        return message["text"]
    return message.get("bytes")


async def _controller_loop(websocket: WebSocket, connection: Connection, runtime: RelayRuntime) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return

        raw = _frame_payload(message)
        if raw is None:
            continue

        logger.debug("[WS] received from controller=%s: %s", connection.connection_id, raw)
        result = decode(raw)

        if not result.valid:
            runtime.service.record_validation_error()
            logger.warning(
                "[WS] Invalid data from controller=%s: %s",
                connection.connection_id, result.error.details,
            )
            await connection.handle.send(encode_error(result.error))
            continue

        await runtime.service.ingest(result.readings)


async def _drain_until_closed(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/{path:path}")
async def relay_socket(websocket: WebSocket, path: str):
    """WebSocket endpoint: classify, register, serve, unregister."""
    runtime: RelayRuntime = websocket.app.state.runtime
    logger.info("[WS] New connection path=/%s", path)

    try:
        route = resolve_role(path)
    except UnknownRole as e:
        logger.warning("[WS] %s - closing", e)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()

    connection = runtime.registry.register(route, WebSocketSendHandle(websocket))

    try:
        if connection.role is Role.CONTROLLER:
            await _controller_loop(websocket, connection, runtime)
        else:
            await _drain_until_closed(websocket)
        logger.info("[WS] Connection closed: %r", connection)

    except WebSocketDisconnect:
        logger.info("[WS] Client disconnected: %r", connection)
    except Exception as e:
        logger.exception("[WS] Connection error: %r error=%s", connection, e)
        try:
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        except Exception:
            pass
    finally:
        runtime.registry.unregister(connection)
