"""Device manager - adb device discovery."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from adbutils import AdbDeviceInfo

logger = structlog.get_logger()


@dataclass
class DeviceInfo:
    """A device as reported by the adb server."""

    serial: str
    state: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.serial, "status": self.state}


class DeviceManager:
    """Tracks devices known to the adb server."""

    def __init__(self) -> None:
        self._devices: dict[str, DeviceInfo] = {}
        self._lock = asyncio.Lock()

    async def start(self) -> None:
        """Run an initial discovery; adb being unavailable is not fatal."""
        logger.info("device_manager_starting")
        try:
            await self.refresh()
        except Exception:
            logger.exception("device_discovery_failed")
        logger.info("device_manager_started", device_count=len(self._devices))

    async def stop(self) -> None:
        """Forget discovered devices."""
        logger.info("device_manager_stopping")
        self._devices.clear()
        logger.info("device_manager_stopped")

    async def list_devices(self) -> list[dict[str, str]]:
        """List all devices attached to the adb server."""
        await self.refresh()
        return [info.to_dict() for info in self._devices.values()]

    async def refresh(self) -> None:
        """Re-read the adb device list."""
        from adbutils import adb

        async with self._lock:

            def _list() -> list[AdbDeviceInfo]:
                return list(adb.list())

            entries = await asyncio.to_thread(_list)
            seen: set[str] = set()

            for entry in entries:
                serial = entry.serial
                if not serial:
                    logger.warning("device_missing_serial")
                    continue
                seen.add(serial)
                previous = self._devices.get(serial)
                self._devices[serial] = DeviceInfo(serial=serial, state=entry.state)
                if previous is None:
                    logger.info("device_discovered", serial=serial, state=entry.state)
                elif previous.state != entry.state:
                    logger.info(
                        "device_state_changed",
                        serial=serial,
                        previous=previous.state,
                        state=entry.state,
                    )

            for serial in set(self._devices) - seen:
                self._devices.pop(serial, None)
                logger.info("device_disconnected", serial=serial)
