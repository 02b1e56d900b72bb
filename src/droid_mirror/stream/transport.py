"""Transport - full-duplex message connection used by a mirroring session."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import structlog
from fastapi import WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState

logger = structlog.get_logger()


class TransportClosed(Exception):
    """Raised when the connection is gone (peer close, read or write failure)."""

    def __init__(self, reason: str = "closed", code: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.code = code


@dataclass(frozen=True)
class Message:
    """One inbound message; exactly one of text/data is set."""

    text: str | None = None
    data: bytes | None = None

    @property
    def is_text(self) -> bool:
        return self.text is not None


class Transport(ABC):
    """Message-oriented connection with explicit close."""

    @property
    def remote(self) -> str:
        return "unknown"

    @abstractmethod
    async def receive(self) -> Message:
        """Block for the next message; raise TransportClosed on close or error."""

    @abstractmethod
    async def send_text(self, text: str) -> None:
        """Send one text message; raise TransportClosed on failure."""

    @abstractmethod
    async def send_bytes(self, data: bytes) -> None:
        """Send one binary message; raise TransportClosed on failure."""

    @abstractmethod
    async def close(self, code: int = 1000) -> None:
        """Close the connection. Safe to call more than once."""


class WebSocketTransport(Transport):
    """Transport over an accepted FastAPI WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self._closed = False

    @property
    def remote(self) -> str:
        client = self._websocket.client
        if client is None:
            return "unknown"
        return f"{client.host}:{client.port}"

    async def receive(self) -> Message:
        if self._closed:
            raise TransportClosed("transport closed")
        try:
            message = await self._websocket.receive()
        except WebSocketDisconnect as exc:
            raise TransportClosed("client disconnected", code=exc.code) from exc
        except (RuntimeError, OSError) as exc:
            raise TransportClosed(f"read failed: {exc}") from exc

        if message["type"] == "websocket.disconnect":
            raise TransportClosed("client disconnected", code=message.get("code"))
        if message.get("text") is not None:
            return Message(text=message["text"])
        return Message(data=message.get("bytes") or b"")

    async def send_text(self, text: str) -> None:
        await self._send(text)

    async def send_bytes(self, data: bytes) -> None:
        await self._send(data)

    async def _send(self, payload: str | bytes) -> None:
        if self._closed:
            raise TransportClosed("transport closed")
        try:
            if isinstance(payload, bytes):
                await self._websocket.send_bytes(payload)
            else:
                await self._websocket.send_text(payload)
        except WebSocketDisconnect as exc:
            raise TransportClosed("client disconnected", code=exc.code) from exc
        except (RuntimeError, OSError) as exc:
            raise TransportClosed(f"write failed: {exc}") from exc

    async def close(self, code: int = 1000) -> None:
        if self._closed:
            return
        self._closed = True
        websocket = self._websocket
        if (
            websocket.application_state == WebSocketState.DISCONNECTED
            or websocket.client_state == WebSocketState.DISCONNECTED
        ):
            return
        try:
            await websocket.close(code=code)
        except (RuntimeError, OSError) as exc:
            logger.debug("websocket_close_failed", remote=self.remote, error=str(exc))
