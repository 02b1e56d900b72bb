"""Mirroring session - one client connection driving one device."""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime
from enum import Enum
from typing import Any

import structlog

from droid_mirror.config import MirrorConfig
from droid_mirror.device.capture import FrameSource
from droid_mirror.device.input import InputSink
from droid_mirror.stream.intake import CommandIntake
from droid_mirror.stream.outbox import Outbox
from droid_mirror.stream.pump import FramePump
from droid_mirror.stream.transport import Transport
from droid_mirror.validation import validate_device_id

logger = structlog.get_logger()

# Checked in order when several tasks finish in the same wakeup
_TRIGGER_ORDER = ("intake", "writer", "pump", "stop")


class SessionState(Enum):
    """Session lifecycle states."""

    STARTING = "starting"
    STREAMING = "streaming"
    TERMINATING = "terminating"
    TERMINATED = "terminated"


class MirrorSession:
    """Runs the frame pump and command intake over one transport.

    Both activities write through a single Outbox. Whichever of them stops
    first (or an explicit ``request_stop``) ends the session; the other is
    cancelled and the transport is closed exactly once.
    """

    def __init__(
        self,
        device_id: str,
        transport: Transport,
        frame_source: FrameSource,
        input_sink: InputSink,
        config: MirrorConfig | None = None,
    ) -> None:
        self.device_id = validate_device_id(device_id)
        self.session_id = f"m-{uuid.uuid4().hex[:8]}"
        self.created_at = datetime.now()
        self.config = config or MirrorConfig()
        self._transport = transport
        self._state = SessionState.STARTING
        self._stop_requested = asyncio.Event()
        self._started = False
        self.trigger: str | None = None

        self._outbox = Outbox(transport)
        self.pump = FramePump(
            self.device_id,
            frame_source,
            self._outbox,
            interval=self.config.frame_interval,
            capture_timeout=self.config.capture_timeout_s,
        )
        self.intake = CommandIntake(
            self.device_id,
            transport,
            self._outbox,
            input_sink,
            default_swipe_duration_ms=self.config.default_swipe_duration_ms,
            report_invalid_commands=self.config.report_invalid_commands,
        )

    @property
    def state(self) -> SessionState:
        return self._state

    def request_stop(self) -> None:
        """Ask a running session to shut down."""
        self._stop_requested.set()

    async def run(self) -> None:
        """Stream until the connection ends, then close the transport.

        Per-event failures are reported to the client; nothing is raised.
        """
        if self._started:
            raise RuntimeError(f"Session {self.session_id} already started")
        self._started = True

        log = logger.bind(
            session_id=self.session_id,
            device_id=self.device_id,
            remote=self._transport.remote,
        )
        tasks: dict[asyncio.Task[Any], str] = {}
        try:
            tasks = {
                asyncio.create_task(self._outbox.run(), name=f"{self.session_id}-writer"): "writer",
                asyncio.create_task(self.intake.run(), name=f"{self.session_id}-intake"): "intake",
                asyncio.create_task(self.pump.run(), name=f"{self.session_id}-pump"): "pump",
                asyncio.create_task(
                    self._stop_requested.wait(), name=f"{self.session_id}-stop"
                ): "stop",
            }
            self._state = SessionState.STREAMING
            log.info("session_started", frame_interval_ms=self.config.frame_interval_ms)

            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            finished = {tasks[task] for task in done}
            self.trigger = next(name for name in _TRIGGER_ORDER if name in finished)
            log.info("session_terminating", trigger=self.trigger)
        finally:
            self._state = SessionState.TERMINATING
            self._stop_requested.set()
            self._outbox.close()
            for task in tasks:
                task.cancel()
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for name, result in zip(tasks.values(), results, strict=True):
                if isinstance(result, Exception):
                    log.error("session_task_failed", task=name, exc_info=result)
            await self._transport.close()
            self._state = SessionState.TERMINATED
            log.info("session_terminated", **self.stats())

    def stats(self) -> dict[str, int]:
        """Counters for logging and status endpoints."""
        return {
            "frames_sent": self.pump.frames_sent,
            "capture_failures": self.pump.capture_failures,
            "empty_frames": self.pump.empty_frames,
            "commands_handled": self.intake.commands_handled,
            "commands_failed": self.intake.commands_failed,
        }

    def describe(self) -> dict[str, Any]:
        """JSON-serializable summary of this session."""
        return {
            "session_id": self.session_id,
            "device_id": self.device_id,
            "state": self._state.value,
            "remote": self._transport.remote,
            "created_at": self.created_at.isoformat(),
            **self.stats(),
        }
