"""Tests for configuration and CLI parsing."""

from datetime import timedelta
from pathlib import Path

import pytest

from vakit_period.cli import create_parser
from vakit_period.config import AppConfig


class TestAppConfig:
    """Environment based configuration."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test defaults without environment variables."""
        for name in (
            "VAKIT_PERIOD_HOST",
            "VAKIT_PERIOD_PORT",
            "VAKIT_PERIOD_RECALC_INTERVAL",
            "VAKIT_PERIOD_STRICT",
        ):
            monkeypatch.delenv(name, raising=False)

        config = AppConfig.from_env()
        assert config.port == 8080
        assert config.recalculation_interval == timedelta(minutes=5)
        assert config.rollover_buffer == timedelta(seconds=5)
        assert config.sunset_buffer == timedelta(seconds=2)
        assert config.strict_validation is False

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test every variable is read."""
        monkeypatch.setenv("VAKIT_PERIOD_HOST", "127.0.0.1")
        monkeypatch.setenv("VAKIT_PERIOD_PORT", "9000")
        monkeypatch.setenv("VAKIT_PERIOD_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("VAKIT_PERIOD_SETTINGS_PATH", str(tmp_path / "s.json"))
        monkeypatch.setenv("VAKIT_PERIOD_RECALC_INTERVAL", "60")
        monkeypatch.setenv("VAKIT_PERIOD_ROLLOVER_BUFFER", "10")
        monkeypatch.setenv("VAKIT_PERIOD_SUNSET_BUFFER", "1")
        monkeypatch.setenv("VAKIT_PERIOD_STRICT", "true")

        config = AppConfig.from_env()
        assert config.host == "127.0.0.1"
        assert config.port == 9000
        assert config.log_level == "DEBUG"
        assert config.settings_path == tmp_path / "s.json"
        assert config.recalculation_interval == timedelta(minutes=1)
        assert config.rollover_buffer == timedelta(seconds=10)
        assert config.sunset_buffer == timedelta(seconds=1)
        assert config.strict_validation is True


class TestParser:
    """CLI argument parsing."""

    def test_times_arguments(self) -> None:
        """Test times command arguments."""
        args = create_parser().parse_args(["times", "--lat", "41.0", "--lng", "29.0", "-d", "3"])
        assert args.command == "times"
        assert args.days == 3
        assert args.method == 2

    def test_period_at(self) -> None:
        """Test period command parses an ISO instant."""
        args = create_parser().parse_args(
            ["period", "--lat", "41.0", "--lng", "29.0", "--at", "2024-03-10T13:00:00+03:00"]
        )
        assert args.at.hour == 13
        assert args.at.utcoffset() == timedelta(hours=3)

    def test_serve_defaults(self) -> None:
        """Test serve leaves unset options to the environment."""
        args = create_parser().parse_args(["serve"])
        assert args.host is None
        assert args.port is None
        assert args.strict is False
