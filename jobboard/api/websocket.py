"""
WebSocket streaming of listener snapshots.

A socket subscribes to one listener-hub topic and receives the full
snapshot as JSON on connect and after every change:

    {"type": "<kind>", "payload": [...]}

Authentication uses the access token in the `token` query parameter.
Failures accept first and then close with 1008 (policy violation), so
clients see a close frame instead of an HTTP 403.
"""

import asyncio
import logging
from typing import Callable, Optional

from fastapi import WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder

from jobboard.core.auth import resolve_user

logger = logging.getLogger(__name__)

POLICY_VIOLATION = 1008

Subscribe = Callable[[Callable[[list], None]], Callable[[], None]]


async def authenticate_websocket(websocket: WebSocket) -> Optional[dict]:
    """Accept the socket and return the user, or close it and return None."""
    await websocket.accept()
    token = websocket.query_params.get("token")
    user = resolve_user(token) if token else None
    if not user or not user["is_active"]:
        await reject_websocket(websocket, "Invalid or expired token")
        return None
    return user


async def reject_websocket(websocket: WebSocket, reason: str) -> None:
    try:
        await websocket.send_json({"type": "error", "payload": reason})
        await websocket.close(code=POLICY_VIOLATION, reason=reason)
    except Exception as e:
        logger.debug("Error closing rejected socket: %s", e)


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    """Drain client frames until the client goes away."""
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


async def stream_snapshots(websocket: WebSocket, kind: str, subscribe: Subscribe) -> None:
    """
    Push every snapshot delivered by `subscribe` to the socket until the
    client disconnects, then unsubscribe.

    Listener callbacks may fire on any thread (writes happen in the
    threadpool or another event loop), so they hand snapshots to this
    loop with call_soon_threadsafe.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def deliver(snapshot: list) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, snapshot)

    unsubscribe = subscribe(deliver)
    disconnected = asyncio.create_task(_wait_for_disconnect(websocket))
    logger.info("WebSocket %s stream opened", kind)

    try:
        while True:
            next_snapshot = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait(
                {next_snapshot, disconnected}, return_when=asyncio.FIRST_COMPLETED
            )
            if disconnected in done:
                next_snapshot.cancel()
                break
            await websocket.send_json({"type": kind, "payload": jsonable_encoder(next_snapshot.result())})
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()
        if not disconnected.done():
            disconnected.cancel()
        logger.info("WebSocket %s stream closed", kind)
