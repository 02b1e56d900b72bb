"""Single-writer outbox serializing every outbound message of a session."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import structlog

from droid_mirror.stream.transport import Transport, TransportClosed

logger = structlog.get_logger()

_Pending = tuple[str | bytes, "asyncio.Future[None]"]


class Outbox:
    """Owns the transport write path.

    Senders enqueue a message and wait until the writer task has written it,
    so each sender has at most one write in flight and sees its own failure.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._queue: asyncio.Queue[_Pending] = asyncio.Queue()
        self._closed = False
        self.messages_written = 0

    @property
    def closed(self) -> bool:
        return self._closed

    async def send_bytes(self, data: bytes) -> None:
        """Write one binary message; raise TransportClosed on failure."""
        await self._submit(data)

    async def send_json(self, payload: dict[str, Any]) -> None:
        """Write one JSON text message; raise TransportClosed on failure."""
        await self._submit(json.dumps(payload, ensure_ascii=False))

    def close(self) -> None:
        """Reject further sends and fail anything still queued."""
        self._closed = True
        self._fail_pending("outbox closed")

    async def run(self) -> None:
        """Writer loop. Returns after the first failed write."""
        future: asyncio.Future[None] | None = None
        try:
            while True:
                payload, future = await self._queue.get()
                if future.done():
                    # Sender was cancelled while queued
                    continue
                try:
                    if isinstance(payload, bytes):
                        await self._transport.send_bytes(payload)
                    else:
                        await self._transport.send_text(payload)
                except TransportClosed as exc:
                    logger.info(
                        "outbox_write_failed", remote=self._transport.remote, reason=exc.reason
                    )
                    if not future.done():
                        future.set_exception(exc)
                    return
                self.messages_written += 1
                if not future.done():
                    future.set_result(None)
        finally:
            self._closed = True
            if future is not None and not future.done():
                future.set_exception(TransportClosed("transport closed"))
            self._fail_pending("transport closed")

    async def _submit(self, payload: str | bytes) -> None:
        if self._closed:
            raise TransportClosed("outbox closed")
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((payload, future))
        await future

    def _fail_pending(self, reason: str) -> None:
        while not self._queue.empty():
            _, future = self._queue.get_nowait()
            if not future.done():
                future.set_exception(TransportClosed(reason))
