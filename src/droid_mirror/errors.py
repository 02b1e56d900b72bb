"""Error model - Actionable errors with remediation hints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class MirrorError(Exception):
    """
    Base error with context and remediation guidance.

    All errors should be actionable - tell the caller what went wrong
    and what they can do about it.
    """

    code: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)
    remediation: str = ""

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "remediation": self.remediation,
        }


# Specific error constructors for common cases


def invalid_device_error(device_id: str) -> MirrorError:
    """Create error for an unusable device identifier."""
    return MirrorError(
        code="ERR_INVALID_DEVICE",
        message=f"Invalid device id: {device_id!r}",
        context={"device_id": device_id},
        remediation="Use a serial from 'droid-mirror devices', e.g. 'emulator-5554'.",
    )


def adb_not_found_error() -> MirrorError:
    """Create error for missing adb binary."""
    return MirrorError(
        code="ERR_ADB_NOT_FOUND",
        message="adb command not found",
        context={},
        remediation="Install Android platform-tools and ensure adb is in PATH.",
    )


def adb_command_error(command: str, reason: str) -> MirrorError:
    """Create error for adb command failure."""
    return MirrorError(
        code="ERR_ADB_COMMAND",
        message=f"adb command failed: {command}",
        context={"command": command, "reason": reason},
        remediation="Check adb connection and command arguments, then retry.",
    )


def adb_timeout_error(command: str, timeout_s: float) -> MirrorError:
    """Create error for an adb command that did not finish in time."""
    return MirrorError(
        code="ERR_ADB_TIMEOUT",
        message=f"adb command timed out after {timeout_s}s: {command}",
        context={"command": command, "timeout_s": timeout_s, "reason": "timed out"},
        remediation="Check the device is responsive or raise the timeout.",
    )


def capture_failed_error(device_id: str, reason: str) -> MirrorError:
    """Create error for a failed screen capture."""
    return MirrorError(
        code="ERR_CAPTURE_FAILED",
        message=f"Screencap failed: {reason}",
        context={"device_id": device_id, "reason": reason},
        remediation="Verify the device screen is on and adb is connected.",
    )


def invalid_message_error(reason: str) -> MirrorError:
    """Create error for a client message that could not be decoded."""
    return MirrorError(
        code="ERR_INVALID_MESSAGE",
        message=f"Invalid JSON format: {reason}",
        context={"reason": reason},
        remediation='Send a JSON object such as {"type": "input_tap", "x": 1, "y": 2}.',
    )


def unknown_input_type_error(input_type: str) -> MirrorError:
    """Create error for an unsupported command tag."""
    return MirrorError(
        code="ERR_UNKNOWN_INPUT_TYPE",
        message=f"Unknown input type: {input_type}",
        context={"type": input_type},
        remediation="Use input_tap, input_text, input_keyevent, or input_swipe.",
    )


def invalid_command_error(input_type: str, reason: str) -> MirrorError:
    """Create error for a decoded command with out-of-range values."""
    return MirrorError(
        code="ERR_INVALID_COMMAND",
        message=f"Invalid {input_type}: {reason}",
        context={"type": input_type, "reason": reason},
        remediation="Coordinates must be non-negative; text and keycode must be non-empty.",
    )


def input_failed_error(input_type: str, reason: str) -> MirrorError:
    """Create error for an input injection the device rejected."""
    return MirrorError(
        code="ERR_INPUT_FAILED",
        message=f"Failed to execute {input_type}: {reason}",
        context={"type": input_type, "reason": reason},
        remediation="Check the device is unlocked and accepting input.",
    )


def invalid_config_error(name: str, value: Any, reason: str) -> MirrorError:
    """Create error for a bad configuration value."""
    return MirrorError(
        code="ERR_INVALID_CONFIG",
        message=f"Invalid config {name}={value!r}: {reason}",
        context={"name": name, "value": value, "reason": reason},
        remediation="Fix the option or DROID_MIRROR_* environment variable.",
    )


def session_not_found_error(session_id: str) -> MirrorError:
    """Create error for a session id that is not live."""
    return MirrorError(
        code="ERR_SESSION_NOT_FOUND",
        message=f"Session not found: {session_id}",
        context={"session_id": session_id},
        remediation="List live sessions with GET /api/sessions; sessions end on disconnect.",
    )
