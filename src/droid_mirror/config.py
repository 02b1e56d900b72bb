"""Server configuration, built once at process start."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from droid_mirror.errors import invalid_config_error

ENV_PREFIX = "DROID_MIRROR_"

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5679
DEFAULT_FRAME_INTERVAL_MS = 100
DEFAULT_SWIPE_DURATION_MS = 300


@dataclass(frozen=True)
class MirrorConfig:
    """Immutable settings shared by the app and every mirroring session."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    frame_interval_ms: int = DEFAULT_FRAME_INTERVAL_MS
    capture_timeout_s: float = 5.0
    input_timeout_s: float = 10.0
    default_swipe_duration_ms: int = DEFAULT_SWIPE_DURATION_MS
    report_invalid_commands: bool = False
    cors_origins: tuple[str, ...] = field(default=("*",))
    adb_path: str | None = None
    log_level: str = "info"

    def __post_init__(self) -> None:
        if not 1 <= self.frame_interval_ms <= 10_000:
            raise invalid_config_error(
                "frame_interval_ms", self.frame_interval_ms, "must be between 1 and 10000"
            )
        if not 0 < self.port < 65536:
            raise invalid_config_error("port", self.port, "must be a TCP port")
        if self.capture_timeout_s <= 0:
            raise invalid_config_error(
                "capture_timeout_s", self.capture_timeout_s, "must be positive"
            )
        if self.input_timeout_s <= 0:
            raise invalid_config_error("input_timeout_s", self.input_timeout_s, "must be positive")
        if self.default_swipe_duration_ms <= 0:
            raise invalid_config_error(
                "default_swipe_duration_ms", self.default_swipe_duration_ms, "must be positive"
            )

    @property
    def frame_interval(self) -> float:
        """Frame interval in seconds."""
        return self.frame_interval_ms / 1000

    def with_overrides(self, **overrides: Any) -> MirrorConfig:
        """Return a copy with non-None overrides applied (CLI options)."""
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> MirrorConfig:
        """Build config from DROID_MIRROR_* environment variables.

        Example:
            DROID_MIRROR_PORT=8080 DROID_MIRROR_FRAME_INTERVAL_MS=50
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        def _get(name: str) -> str | None:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None or not raw.strip():
                return None
            return raw.strip()

        for name in ("host", "adb_path", "log_level"):
            raw = _get(name)
            if raw is not None:
                values[name] = raw

        for name in ("port", "frame_interval_ms", "default_swipe_duration_ms"):
            raw = _get(name)
            if raw is not None:
                values[name] = _parse_int(name, raw)

        for name in ("capture_timeout_s", "input_timeout_s"):
            raw = _get(name)
            if raw is not None:
                values[name] = _parse_float(name, raw)

        raw = _get("report_invalid_commands")
        if raw is not None:
            values["report_invalid_commands"] = _parse_bool("report_invalid_commands", raw)

        raw = _get("cors_origins")
        if raw is not None:
            values["cors_origins"] = tuple(
                origin.strip() for origin in raw.split(",") if origin.strip()
            )

        return cls(**values)


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as err:
        raise invalid_config_error(name, raw, "expected an integer") from err


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as err:
        raise invalid_config_error(name, raw, "expected a number") from err


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise invalid_config_error(name, raw, "expected a boolean")
