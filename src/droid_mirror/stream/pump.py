"""Frame pump - periodic screen capture pushed to the client."""

from __future__ import annotations

import asyncio
import time

import structlog

from droid_mirror.device.capture import FrameSource
from droid_mirror.errors import MirrorError, capture_failed_error
from droid_mirror.stream.outbox import Outbox
from droid_mirror.stream.protocol import error_message
from droid_mirror.stream.transport import TransportClosed

logger = structlog.get_logger()


async def wait_for_next_tick(next_tick: float, interval: float) -> float:
    """Sleep until ``next_tick`` on the monotonic clock; return the following tick.

    An overrun cycle starts the next tick immediately and re-bases the
    schedule instead of bursting to catch up.
    """
    now = time.monotonic()
    if now < next_tick:
        await asyncio.sleep(next_tick - now)
        return next_tick + interval
    if now - next_tick > interval:
        return now + interval
    return next_tick + interval


class FramePump:
    """Captures one frame per tick and writes it as a binary message."""

    def __init__(
        self,
        device_id: str,
        frame_source: FrameSource,
        outbox: Outbox,
        *,
        interval: float,
        capture_timeout: float,
    ) -> None:
        self._device_id = device_id
        self._source = frame_source
        self._outbox = outbox
        self._interval = interval
        self._capture_timeout = capture_timeout
        self.frames_sent = 0
        self.capture_failures = 0
        self.empty_frames = 0

    async def run(self) -> None:
        """Tick until a write fails."""
        next_tick = time.monotonic()
        while True:
            next_tick = await wait_for_next_tick(next_tick, self._interval)
            if not await self.tick():
                return

    async def tick(self) -> bool:
        """Run one capture-then-send cycle.

        Returns:
            False once the transport can no longer be written
        """
        try:
            frame = await asyncio.wait_for(
                self._source.capture(self._device_id), timeout=self._capture_timeout
            )
        except TimeoutError:
            return await self._report(
                capture_failed_error(
                    self._device_id, f"timed out after {self._capture_timeout}s"
                )
            )
        except MirrorError as exc:
            return await self._report(exc)
        except Exception as exc:
            logger.exception("capture_error", device_id=self._device_id)
            return await self._report(capture_failed_error(self._device_id, str(exc)))

        if not frame:
            self.empty_frames += 1
            logger.debug("empty_frame_skipped", device_id=self._device_id)
            return True

        try:
            await self._outbox.send_bytes(frame)
        except TransportClosed as exc:
            logger.info("frame_write_failed", device_id=self._device_id, reason=exc.reason)
            return False
        self.frames_sent += 1
        return True

    async def _report(self, error: MirrorError) -> bool:
        self.capture_failures += 1
        if error.code != "ERR_CAPTURE_FAILED":
            error = capture_failed_error(self._device_id, error.message)
        try:
            await self._outbox.send_json(error_message(error))
        except TransportClosed:
            return False
        return True
