"""Run adb commands against one device without blocking the event loop."""

from __future__ import annotations

import asyncio
import shutil
import subprocess

import structlog

from droid_mirror.errors import (
    MirrorError,
    adb_command_error,
    adb_not_found_error,
    adb_timeout_error,
)

logger = structlog.get_logger()


class AdbRunner:
    """Invoke `adb -s <serial> ...` in a worker thread."""

    def __init__(self, adb_path: str | None = None) -> None:
        self._adb_path = adb_path

    def resolve_adb(self) -> str:
        """Return the adb executable path or raise ERR_ADB_NOT_FOUND."""
        adb_path = self._adb_path or shutil.which("adb")
        if not adb_path:
            raise adb_not_found_error()
        return adb_path

    async def run(
        self,
        serial: str,
        args: list[str],
        *,
        timeout: float | None = None,
    ) -> bytes:
        """Run an adb command and return raw stdout.

        Raises:
            MirrorError: ERR_ADB_NOT_FOUND, ERR_ADB_COMMAND or ERR_ADB_TIMEOUT
        """
        command = " ".join(args)

        def _run() -> subprocess.CompletedProcess[bytes]:
            return subprocess.run(
                [self.resolve_adb(), "-s", serial, *args],
                check=True,
                capture_output=True,
                timeout=timeout,
            )

        try:
            result = await asyncio.to_thread(_run)
        except MirrorError:
            raise
        except FileNotFoundError as exc:
            raise adb_not_found_error() from exc
        except subprocess.TimeoutExpired as exc:
            raise adb_timeout_error(command, exc.timeout) from exc
        except subprocess.CalledProcessError as exc:
            reason = _decode(exc.stderr or exc.stdout) or str(exc)
            raise adb_command_error(command, reason) from exc

        logger.debug("adb_command_completed", serial=serial, command=command)
        return result.stdout


def _decode(output: bytes | None) -> str:
    if not output:
        return ""
    return output.decode("utf-8", errors="replace").strip()
