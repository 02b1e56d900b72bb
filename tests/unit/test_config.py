"""Tests for MirrorConfig."""

from __future__ import annotations

import pytest

from droid_mirror.config import DEFAULT_PORT, MirrorConfig
from droid_mirror.errors import MirrorError


class TestMirrorConfig:
    """Tests for defaults and validation."""

    def test_defaults(self) -> None:
        """Should match the documented defaults."""
        config = MirrorConfig()

        assert config.port == DEFAULT_PORT == 5679
        assert config.frame_interval_ms == 100
        assert config.frame_interval == pytest.approx(0.1)
        assert config.default_swipe_duration_ms == 300
        assert config.report_invalid_commands is False
        assert config.cors_origins == ("*",)

    @pytest.mark.parametrize("interval", [0, -5, 10_001])
    def test_rejects_bad_frame_interval(self, interval: int) -> None:
        """Should reject intervals outside 1ms..10s."""
        with pytest.raises(MirrorError) as exc_info:
            MirrorConfig(frame_interval_ms=interval)

        assert exc_info.value.code == "ERR_INVALID_CONFIG"
        assert exc_info.value.context["name"] == "frame_interval_ms"

    def test_rejects_bad_port(self) -> None:
        """Should reject ports outside the TCP range."""
        with pytest.raises(MirrorError):
            MirrorConfig(port=70000)

    def test_rejects_non_positive_timeouts(self) -> None:
        """Should reject zero timeouts."""
        with pytest.raises(MirrorError):
            MirrorConfig(capture_timeout_s=0)
        with pytest.raises(MirrorError):
            MirrorConfig(input_timeout_s=0)

    def test_with_overrides_skips_none(self) -> None:
        """Should only apply overrides that were given."""
        config = MirrorConfig(port=6000).with_overrides(port=None, frame_interval_ms=50)

        assert config.port == 6000
        assert config.frame_interval_ms == 50

    def test_with_overrides_validates(self) -> None:
        """Should validate the resulting config."""
        with pytest.raises(MirrorError):
            MirrorConfig().with_overrides(frame_interval_ms=0)


class TestFromEnv:
    """Tests for MirrorConfig.from_env."""

    def test_empty_environment(self) -> None:
        """Should fall back to defaults."""
        assert MirrorConfig.from_env({}) == MirrorConfig()

    def test_reads_prefixed_variables(self) -> None:
        """Should parse typed values from DROID_MIRROR_* variables."""
        config = MirrorConfig.from_env(
            {
                "DROID_MIRROR_PORT": "8080",
                "DROID_MIRROR_FRAME_INTERVAL_MS": "50",
                "DROID_MIRROR_CAPTURE_TIMEOUT_S": "2.5",
                "DROID_MIRROR_REPORT_INVALID_COMMANDS": "yes",
                "DROID_MIRROR_CORS_ORIGINS": "http://a.test, http://b.test",
                "DROID_MIRROR_ADB_PATH": "/opt/platform-tools/adb",
                "UNRELATED": "1",
            }
        )

        assert config.port == 8080
        assert config.frame_interval_ms == 50
        assert config.capture_timeout_s == 2.5
        assert config.report_invalid_commands is True
        assert config.cors_origins == ("http://a.test", "http://b.test")
        assert config.adb_path == "/opt/platform-tools/adb"

    def test_blank_values_ignored(self) -> None:
        """Should treat blank variables as unset."""
        config = MirrorConfig.from_env({"DROID_MIRROR_PORT": "  "})
        assert config.port == DEFAULT_PORT

    def test_invalid_integer(self) -> None:
        """Should report unparsable integers."""
        with pytest.raises(MirrorError) as exc_info:
            MirrorConfig.from_env({"DROID_MIRROR_PORT": "http"})

        assert exc_info.value.code == "ERR_INVALID_CONFIG"
        assert exc_info.value.context["name"] == "port"

    def test_invalid_boolean(self) -> None:
        """Should report unparsable booleans."""
        with pytest.raises(MirrorError):
            MirrorConfig.from_env({"DROID_MIRROR_REPORT_INVALID_COMMANDS": "maybe"})
