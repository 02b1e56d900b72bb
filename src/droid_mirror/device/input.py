"""Input sink - inject touch, text, key and swipe events into a device."""

from __future__ import annotations

import shlex
from abc import ABC, abstractmethod

import structlog

from droid_mirror.device.adb import AdbRunner
from droid_mirror.errors import MirrorError, input_failed_error
from droid_mirror.stream.protocol import (
    InputCommand,
    KeyEventCommand,
    SwipeCommand,
    TapCommand,
    TextCommand,
)

logger = structlog.get_logger()


class InputSink(ABC):
    """Performs one input command on a device."""

    @abstractmethod
    async def inject(self, device_id: str, command: InputCommand) -> None:
        """Perform the command.

        Raises:
            MirrorError: ERR_INPUT_FAILED with the device's failure detail
        """


def escape_input_text(text: str) -> str:
    """Escape text for `input text`, which runs through the device shell.

    `input text` treats `%s` as a space, and the argument is shell-quoted so
    metacharacters arrive literally.
    """
    return shlex.quote(text.replace(" ", "%s"))


def input_args(command: InputCommand) -> list[str]:
    """Translate a command into `adb shell input ...` arguments."""
    if isinstance(command, TapCommand):
        return ["shell", "input", "tap", str(command.x), str(command.y)]
    if isinstance(command, TextCommand):
        return ["shell", "input", "text", escape_input_text(command.text)]
    if isinstance(command, KeyEventCommand):
        return ["shell", "input", "keyevent", shlex.quote(command.keycode)]
    if isinstance(command, SwipeCommand):
        return [
            "shell",
            "input",
            "swipe",
            str(command.x1),
            str(command.y1),
            str(command.x2),
            str(command.y2),
            str(command.duration),
        ]
    raise TypeError(f"Unsupported input command: {command!r}")


class AdbInputSink(InputSink):
    """Injects input with `adb shell input`."""

    def __init__(self, runner: AdbRunner, timeout: float = 10.0) -> None:
        self._runner = runner
        self._timeout = timeout

    async def inject(self, device_id: str, command: InputCommand) -> None:
        args = input_args(command)
        try:
            await self._runner.run(device_id, args, timeout=self._timeout)
        except MirrorError as exc:
            reason = str(exc.context.get("reason") or exc.message)
            logger.warning(
                "input_failed",
                device_id=device_id,
                input_type=command.type,
                code=exc.code,
                reason=reason,
            )
            raise input_failed_error(command.type, reason) from exc
        logger.debug("input_injected", device_id=device_id, input_type=command.type)
