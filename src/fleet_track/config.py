"""Environment-driven settings.

Values are read from ``FLEET_TRACK_*`` environment variables.  Entry points
call :func:`dotenv.load_dotenv` first so a project-root ``.env`` works too.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from fleet_track.playback.clock import DEFAULT_TICK_MS
from fleet_track.track.models import SpeedThresholds

_logger = logging.getLogger(__name__)

_PREFIX = "FLEET_TRACK_"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        _logger.warning("Ignoring invalid %s%s=%r, using %s", _PREFIX, name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    value = _env_float(name, float(default))
    if value <= 0:
        _logger.warning("Ignoring non-positive %s%s, using %s", _PREFIX, name, default)
        return default
    return int(value)


@dataclass
class Settings:
    """Runtime configuration.

    Attributes:
        speed_low: Lower speed band cut point, km/h.
        speed_normal: Middle speed band cut point, km/h.
        speed_over: Upper speed band cut point, km/h.
        tick_ms: Default playback tick interval.
        log_level: Root logger level name.
    """

    speed_low: float = 20.0
    speed_normal: float = 80.0
    speed_over: float = 120.0
    tick_ms: int = DEFAULT_TICK_MS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            speed_low=_env_float("SPEED_LOW", cls.speed_low),
            speed_normal=_env_float("SPEED_NORMAL", cls.speed_normal),
            speed_over=_env_float("SPEED_OVER", cls.speed_over),
            tick_ms=_env_int("TICK_MS", cls.tick_ms),
            log_level=os.environ.get(_PREFIX + "LOG_LEVEL", cls.log_level).upper(),
        )

    @property
    def thresholds(self) -> SpeedThresholds:
        return SpeedThresholds(
            low=self.speed_low,
            normal=self.speed_normal,
            over=self.speed_over,
        )


def configure_logging(settings: Settings) -> None:
    """Install a console handler on the root logger and set its level."""
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(settings.log_level)
