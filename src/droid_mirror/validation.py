"""Validation helpers for user input."""

from __future__ import annotations

import re

from droid_mirror.errors import invalid_device_error

# adb serials: USB serials, emulator-NNNN, host:port for TCP devices
DEVICE_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:\-]+$")


def validate_device_id(device_id: str) -> str:
    """Validate an adb device serial.

    The serial is passed as a process argument to adb, so anything outside
    the characters adb itself produces is rejected.

    Args:
        device_id: Device serial to validate

    Returns:
        The serial, unchanged

    Raises:
        MirrorError: If the serial is empty or malformed
    """
    if not device_id or not DEVICE_ID_PATTERN.match(device_id):
        raise invalid_device_error(device_id)
    return device_id
