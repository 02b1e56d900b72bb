"""Mirror core - lifecycle and shared collaborators for the server."""

from __future__ import annotations

import structlog

from droid_mirror.config import MirrorConfig
from droid_mirror.device.adb import AdbRunner
from droid_mirror.device.capture import FrameSource, ScreencapFrameSource
from droid_mirror.device.input import AdbInputSink, InputSink
from droid_mirror.device.manager import DeviceManager
from droid_mirror.stream.registry import SessionRegistry
from droid_mirror.stream.session import MirrorSession
from droid_mirror.stream.transport import Transport

logger = structlog.get_logger()


class MirrorCore:
    """Owns the adb collaborators and live sessions for one server process."""

    def __init__(
        self,
        config: MirrorConfig | None = None,
        *,
        frame_source: FrameSource | None = None,
        input_sink: InputSink | None = None,
    ) -> None:
        self.config = config or MirrorConfig()
        self.runner = AdbRunner(self.config.adb_path)
        self.frame_source = frame_source or ScreencapFrameSource(
            self.runner, timeout=self.config.capture_timeout_s
        )
        self.input_sink = input_sink or AdbInputSink(
            self.runner, timeout=self.config.input_timeout_s
        )
        self.device_manager = DeviceManager()
        self.sessions = SessionRegistry()
        self._running = False

    async def start(self) -> None:
        """Initialize subsystems."""
        logger.info("mirror_core_starting")
        await self.device_manager.start()
        self._running = True
        logger.info("mirror_core_started", frame_interval_ms=self.config.frame_interval_ms)

    async def stop(self) -> None:
        """Stop live sessions and shut down subsystems."""
        logger.info("mirror_core_stopping")
        self._running = False
        await self.sessions.stop_all()
        await self.device_manager.stop()
        logger.info("mirror_core_stopped")

    def create_session(self, device_id: str, transport: Transport) -> MirrorSession:
        """Build a session for an accepted connection."""
        return MirrorSession(
            device_id,
            transport,
            self.frame_source,
            self.input_sink,
            self.config,
        )

    @property
    def is_running(self) -> bool:
        """Check if the core is running."""
        return self._running
