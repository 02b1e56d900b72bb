"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from droid_mirror.config import MirrorConfig
from droid_mirror.device.capture import FrameSource
from droid_mirror.device.input import InputSink
from droid_mirror.errors import MirrorError
from droid_mirror.stream.protocol import InputCommand
from droid_mirror.stream.transport import Message, Transport, TransportClosed

PNG_FRAME = b"\x89PNG\r\n\x1a\nfake-frame"


class FakeTransport(Transport):
    """In-memory transport driven by the test."""

    def __init__(self) -> None:
        self._inbound: asyncio.Queue[Message | TransportClosed] = asyncio.Queue()
        self.sent: list[str | bytes] = []
        self.close_calls = 0
        self.close_codes: list[int] = []
        self.fail_writes = False
        self.fail_binary_writes = False

    @property
    def remote(self) -> str:
        return "127.0.0.1:50000"

    def push_text(self, text: str) -> None:
        self._inbound.put_nowait(Message(text=text))

    def push_json(self, payload: dict[str, Any]) -> None:
        self.push_text(json.dumps(payload))

    def push_bytes(self, data: bytes) -> None:
        self._inbound.put_nowait(Message(data=data))

    def disconnect(self) -> None:
        self._inbound.put_nowait(TransportClosed("client disconnected", code=1000))

    @property
    def frames(self) -> list[bytes]:
        return [item for item in self.sent if isinstance(item, bytes)]

    @property
    def texts(self) -> list[dict[str, Any]]:
        return [json.loads(item) for item in self.sent if isinstance(item, str)]

    async def receive(self) -> Message:
        item = await self._inbound.get()
        if isinstance(item, TransportClosed):
            raise item
        return item

    async def send_text(self, text: str) -> None:
        await self._write(text)

    async def send_bytes(self, data: bytes) -> None:
        if self.fail_binary_writes:
            raise TransportClosed("write failed")
        await self._write(data)

    async def _write(self, payload: str | bytes) -> None:
        if self.fail_writes or self.close_calls:
            raise TransportClosed("write failed")
        self.sent.append(payload)

    async def close(self, code: int = 1000) -> None:
        self.close_calls += 1
        self.close_codes.append(code)
        self._inbound.put_nowait(TransportClosed("transport closed"))


class FakeFrameSource(FrameSource):
    """Returns a fixed frame, or raises a configured error.

    With ``numbered`` set, each capture returns ``b"frame-<n>"`` instead.
    """

    def __init__(self, frame: bytes = PNG_FRAME) -> None:
        self.frame = frame
        self.numbered = False
        self.error: Exception | None = None
        self.delay = 0.0
        self.calls: list[str] = []

    async def capture(self, device_id: str) -> bytes:
        self.calls.append(device_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.numbered:
            return b"frame-%d" % len(self.calls)
        return self.frame


class FakeInputSink(InputSink):
    """Records injected commands, or raises a configured error."""

    def __init__(self) -> None:
        self.commands: list[tuple[str, InputCommand]] = []
        self.error: Exception | None = None

    async def inject(self, device_id: str, command: InputCommand) -> None:
        if self.error is not None:
            raise self.error
        self.commands.append((device_id, command))


@pytest.fixture
def transport() -> FakeTransport:
    """In-memory transport."""
    return FakeTransport()


@pytest.fixture
def make_transport() -> type[FakeTransport]:
    """Factory for tests that need several transports."""
    return FakeTransport


@pytest.fixture
def frame_source() -> FakeFrameSource:
    """Frame source returning a small PNG-like payload."""
    return FakeFrameSource()


@pytest.fixture
def input_sink() -> FakeInputSink:
    """Input sink recording commands."""
    return FakeInputSink()


@pytest.fixture
def fast_config() -> MirrorConfig:
    """Config with a short frame interval for session tests."""
    return MirrorConfig(frame_interval_ms=10, capture_timeout_s=1.0)


@pytest.fixture
def device_error() -> MirrorError:
    """A representative adb failure."""
    return MirrorError(
        code="ERR_ADB_COMMAND",
        message="adb command failed: shell input tap 1 2",
        context={"command": "shell input tap 1 2", "reason": "device offline"},
    )


@pytest.fixture
def mock_adb() -> Generator[MagicMock, None, None]:
    """Mock adbutils for unit tests."""
    with patch("adbutils.adb") as mock:
        entry = MagicMock()
        entry.serial = "emulator-5554"
        entry.state = "device"
        mock.list.return_value = [entry]
        yield mock
