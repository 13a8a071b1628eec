import asyncio

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.responses import PlainTextResponse

from constants import HEALTH_RESPONSE
from dispatch import MessageRouter
from logging_config import get_logger
from transport import WebSocketConnection

logger = get_logger(__name__)

relay_router = APIRouter(tags=["relay"])


def get_message_router(websocket: WebSocket) -> MessageRouter:
    return websocket.app.state.message_router


@relay_router.websocket("/{full_path:path}")
async def relay_endpoint(websocket: WebSocket, full_path: str):
    """Relay WebSocket, served on every path.

    Each inbound frame is handed to the MessageRouter as is; payloads for this
    connection are written by a dedicated writer task.
    """
    message_router = get_message_router(websocket)
    await websocket.accept()

    connection = WebSocketConnection(websocket)
    writer_task = asyncio.create_task(connection.run_writer())
    message_router.connect(connection)
    logger.info(f"WebSocket connection {connection.connection_id} accepted on /{full_path}")

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(f"WebSocket disconnected for connection {connection.connection_id}")
                break
            data = message.get("text")
            if data is None:
                data = message.get("bytes") or b""
            message_router.handle(connection, data)
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for connection {connection.connection_id}")
    except Exception as e:
        logger.error(f"Error receiving from connection {connection.connection_id}: {e}", exc_info=True)
    finally:
        message_router.disconnect(connection)
        writer_task.cancel()
        try:
            await writer_task
        except asyncio.CancelledError:
            pass


@relay_router.get("/{full_path:path}", response_class=PlainTextResponse)
async def health(full_path: str):
    return HEALTH_RESPONSE
