"""Configuration management."""

import logging
import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Self


def _get_default_settings_path() -> Path:
    """Get default settings path."""
    return Path.home() / ".config" / "vakit-period" / "settings.json"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AppConfig:
    """Application configuration."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    # File paths
    settings_path: Path = field(default_factory=_get_default_settings_path)

    # Transition scheduler
    recalculation_interval: timedelta = timedelta(minutes=5)
    rollover_buffer: timedelta = timedelta(seconds=5)
    sunset_buffer: timedelta = timedelta(seconds=2)
    strict_validation: bool = False

    @classmethod
    def from_env(cls) -> Self:
        """Load configuration from environment variables."""
        return cls(
            host=os.getenv("VAKIT_PERIOD_HOST", "0.0.0.0"),
            port=int(os.getenv("VAKIT_PERIOD_PORT", "8080")),
            log_level=os.getenv("VAKIT_PERIOD_LOG_LEVEL", "INFO"),
            settings_path=Path(
                os.getenv("VAKIT_PERIOD_SETTINGS_PATH", str(_get_default_settings_path()))
            ),
            recalculation_interval=timedelta(
                seconds=float(os.getenv("VAKIT_PERIOD_RECALC_INTERVAL", "300"))
            ),
            rollover_buffer=timedelta(
                seconds=float(os.getenv("VAKIT_PERIOD_ROLLOVER_BUFFER", "5"))
            ),
            sunset_buffer=timedelta(seconds=float(os.getenv("VAKIT_PERIOD_SUNSET_BUFFER", "2"))),
            strict_validation=_env_bool("VAKIT_PERIOD_STRICT", False),
        )


_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get application configuration."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def setup_logging(level: str = "INFO") -> None:
    """Setup application logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
