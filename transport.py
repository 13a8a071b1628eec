import asyncio
import uuid

from fastapi import WebSocket

from logging_config import get_logger

logger = get_logger(__name__)


class WebSocketConnection:
    """Adapts a FastAPI WebSocket to the relay core's ``send(text)`` contract.

    send() only queues the payload; run_writer() drains the queue onto the
    socket in order, so the core never awaits and each recipient sees payloads
    in the order they were produced. Once a write fails the connection is
    closed for sending and later payloads are dropped.
    """

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.connection_id = str(uuid.uuid4())
        self._outbox: "asyncio.Queue[str]" = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return self._outbox.qsize()

    def send(self, text: str) -> None:
        if self._closed:
            logger.debug(f"Dropping payload for closed connection {self.connection_id}")
            return
        self._outbox.put_nowait(text)

    async def run_writer(self) -> None:
        while True:
            text = await self._outbox.get()
            try:
                await self.websocket.send_text(text)
            except Exception as e:
                # Socket is gone; the receive loop will report the close
                logger.warning(f"Error sending to connection {self.connection_id}: {e}")
                self._close()
                return

    def _close(self) -> None:
        self._closed = True
        while not self._outbox.empty():
            self._outbox.get_nowait()

    def __repr__(self) -> str:
        return f"WebSocketConnection({self.connection_id})"
