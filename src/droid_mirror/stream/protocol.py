"""Input control protocol - command decoding, validation, and reply shapes.

Client -> server text frames are JSON objects tagged by ``type``::

    {"type": "input_tap", "x": 100, "y": 200}
    {"type": "input_text", "text": "hello"}
    {"type": "input_keyevent", "keycode": "KEYCODE_ENTER"}
    {"type": "input_swipe", "x1": 0, "y1": 0, "x2": 100, "y2": 100, "duration": 300}

Fields missing from the object take their zero value and are then checked by
``ensure_valid``; fields present with the wrong JSON type fail decoding.
"""

from __future__ import annotations

import json
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from droid_mirror.config import DEFAULT_SWIPE_DURATION_MS
from droid_mirror.errors import (
    MirrorError,
    invalid_command_error,
    invalid_message_error,
    unknown_input_type_error,
)

INPUT_TAP = "input_tap"
INPUT_TEXT = "input_text"
INPUT_KEYEVENT = "input_keyevent"
INPUT_SWIPE = "input_swipe"

ERROR_TYPE = "error"
STATUS_SUCCESS = "success"


class BaseCommand(BaseModel):
    """Common behaviour for decoded input commands."""

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    # Fields echoed back in the success acknowledgement
    ack_fields: ClassVar[tuple[str, ...]] = ()

    type: str

    def ensure_valid(self) -> None:
        """Raise ERR_INVALID_COMMAND if values are out of range."""

    def ack(self) -> dict[str, Any]:
        """Build the success acknowledgement sent to the client."""
        message: dict[str, Any] = {"type": f"{self.type}_ack", "status": STATUS_SUCCESS}
        for name in self.ack_fields:
            message[name] = getattr(self, name)
        return message


class TapCommand(BaseCommand):
    type: Literal["input_tap"] = INPUT_TAP
    x: int = 0
    y: int = 0

    def ensure_valid(self) -> None:
        if self.x < 0 or self.y < 0:
            raise invalid_command_error(
                self.type, f"tap coordinates must be non-negative, got ({self.x},{self.y})"
            )


class TextCommand(BaseCommand):
    ack_fields: ClassVar[tuple[str, ...]] = ("text",)

    type: Literal["input_text"] = INPUT_TEXT
    text: str = ""

    def ensure_valid(self) -> None:
        if self.text == "":
            raise invalid_command_error(self.type, "text must not be empty")


class KeyEventCommand(BaseCommand):
    ack_fields: ClassVar[tuple[str, ...]] = ("keycode",)

    type: Literal["input_keyevent"] = INPUT_KEYEVENT
    keycode: str = ""

    def ensure_valid(self) -> None:
        if self.keycode == "":
            raise invalid_command_error(self.type, "keycode must not be empty")


class SwipeCommand(BaseCommand):
    type: Literal["input_swipe"] = INPUT_SWIPE
    x1: int = 0
    y1: int = 0
    x2: int = 0
    y2: int = 0
    duration: int = 0

    def ensure_valid(self) -> None:
        if min(self.x1, self.y1, self.x2, self.y2) < 0:
            raise invalid_command_error(
                self.type,
                "swipe coordinates must be non-negative, got "
                f"({self.x1},{self.y1}) to ({self.x2},{self.y2})",
            )


InputCommand = TapCommand | TextCommand | KeyEventCommand | SwipeCommand

COMMAND_TYPES: dict[str, type[InputCommand]] = {
    INPUT_TAP: TapCommand,
    INPUT_TEXT: TextCommand,
    INPUT_KEYEVENT: KeyEventCommand,
    INPUT_SWIPE: SwipeCommand,
}


def decode_command(
    raw: str,
    *,
    default_swipe_duration_ms: int = DEFAULT_SWIPE_DURATION_MS,
) -> InputCommand:
    """Decode one text frame into an InputCommand.

    Decoding does not range-check values; call ``ensure_valid`` for that.

    Args:
        raw: Text frame payload
        default_swipe_duration_ms: Duration used when a swipe omits one or
            sends a non-positive value

    Returns:
        The decoded command

    Raises:
        MirrorError: ERR_INVALID_MESSAGE for malformed payloads,
            ERR_UNKNOWN_INPUT_TYPE for unsupported tags
    """
    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError, oversized integer literals, nesting too deep
        raise invalid_message_error(str(exc) or type(exc).__name__) from exc

    if not isinstance(payload, dict):
        raise invalid_message_error(f"expected a JSON object, got {type(payload).__name__}")

    input_type = payload.get("type", "")
    if not isinstance(input_type, str):
        raise invalid_message_error("field 'type' must be a string")

    model = COMMAND_TYPES.get(input_type)
    if model is None:
        raise unknown_input_type_error(input_type)

    try:
        command = model.model_validate(payload)
    except ValidationError as exc:
        raise invalid_message_error(_summarize(exc)) from exc

    if isinstance(command, SwipeCommand) and command.duration <= 0:
        command = command.model_copy(update={"duration": default_swipe_duration_ms})
    return command


def error_message(error: MirrorError) -> dict[str, Any]:
    """Build the error frame sent to the client."""
    return {"type": ERROR_TYPE, "message": error.message}


def _summarize(exc: ValidationError) -> str:
    parts = []
    for item in exc.errors():
        location = ".".join(str(part) for part in item["loc"]) or "payload"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)
