"""Frame source - still screen captures from a device."""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

from droid_mirror.device.adb import AdbRunner
from droid_mirror.errors import MirrorError, capture_failed_error

logger = structlog.get_logger()

SCREENCAP_ARGS = ["exec-out", "screencap", "-p"]


class FrameSource(ABC):
    """Produces one encoded still image of a device display."""

    @abstractmethod
    async def capture(self, device_id: str) -> bytes:
        """Capture the current screen.

        An empty result is allowed and means no frame was produced.

        Raises:
            MirrorError: ERR_CAPTURE_FAILED if the capture could not run
        """


class ScreencapFrameSource(FrameSource):
    """Captures PNG frames with `adb exec-out screencap -p`."""

    def __init__(self, runner: AdbRunner, timeout: float = 5.0) -> None:
        self._runner = runner
        self._timeout = timeout

    async def capture(self, device_id: str) -> bytes:
        try:
            return await self._runner.run(device_id, SCREENCAP_ARGS, timeout=self._timeout)
        except MirrorError as exc:
            reason = str(exc.context.get("reason") or exc.message)
            logger.warning("screencap_failed", device_id=device_id, code=exc.code, reason=reason)
            raise capture_failed_error(device_id, reason) from exc
