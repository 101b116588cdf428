"""
OEE Engine - Settings
=====================

Engine-wide tunables loaded once from environment variables.

Environment variables:
    OEE_THRESHOLD_PROFILE=strict
    OEE_SENSITIVITY_VARIATION=10
    OEE_SENSITIVITY_WORKERS=4
    OEE_REWORK_HOURS_PER_UNIT=0.1
    OEE_ECONOMIC_SPREAD=0.10
    OEE_BOTTLENECK_FLOOR=0.70
    OEE_BOTTLENECK_FRACTION=0.20
    OEE_DYNAMIC_WINDOW_SIZE=10
    OEE_LOG_LEVEL=INFO
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .assumptions import ThresholdConfiguration, ThresholdProfile

logger = logging.getLogger(__name__)


@dataclass
class EngineSettings:
    """Defaults are the documented conservative values."""
    threshold_profile: ThresholdProfile = ThresholdProfile.DEFAULT
    sensitivity_variation_percent: float = 10.0
    sensitivity_workers: int = 0            # 0 = sequential
    rework_hours_per_unit: float = 0.1
    economic_spread: float = 0.10
    bottleneck_floor: float = 0.70
    bottleneck_fraction: float = 0.20
    dynamic_window_size: int = 10
    log_level: str = "WARNING"

    @property
    def thresholds(self) -> ThresholdConfiguration:
        return ThresholdConfiguration.for_profile(self.threshold_profile)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "threshold_profile": self.threshold_profile.value,
            "sensitivity_variation_percent": self.sensitivity_variation_percent,
            "sensitivity_workers": self.sensitivity_workers,
            "rework_hours_per_unit": self.rework_hours_per_unit,
            "economic_spread": self.economic_spread,
            "bottleneck_floor": self.bottleneck_floor,
            "bottleneck_fraction": self.bottleneck_fraction,
            "dynamic_window_size": self.dynamic_window_size,
            "log_level": self.log_level,
        }


class Settings:
    """
    Singleton holding the active EngineSettings.

    Usage:
        settings = Settings.get_config()
        Settings.reset()   # reload from env (tests)
    """

    _instance: Optional[EngineSettings] = None

    @classmethod
    def _load_from_env(cls) -> EngineSettings:
        config = EngineSettings()

        profile = os.environ.get("OEE_THRESHOLD_PROFILE")
        if profile:
            try:
                config.threshold_profile = ThresholdProfile(profile.lower())
                logger.info(f"Setting threshold_profile = {profile}")
            except ValueError:
                logger.warning(f"Invalid value for OEE_THRESHOLD_PROFILE: {profile}")

        numeric_mapping = {
            "OEE_SENSITIVITY_VARIATION": ("sensitivity_variation_percent", float),
            "OEE_SENSITIVITY_WORKERS": ("sensitivity_workers", int),
            "OEE_REWORK_HOURS_PER_UNIT": ("rework_hours_per_unit", float),
            "OEE_ECONOMIC_SPREAD": ("economic_spread", float),
            "OEE_BOTTLENECK_FLOOR": ("bottleneck_floor", float),
            "OEE_BOTTLENECK_FRACTION": ("bottleneck_fraction", float),
            "OEE_DYNAMIC_WINDOW_SIZE": ("dynamic_window_size", int),
        }
        for env_var, (attr_name, cast) in numeric_mapping.items():
            value = os.environ.get(env_var)
            if value:
                try:
                    parsed = cast(value)
                except ValueError:
                    logger.warning(f"Invalid value for {env_var}: {value}")
                    continue
                if parsed < 0:
                    logger.warning(f"Negative value for {env_var} ignored: {value}")
                    continue
                setattr(config, attr_name, parsed)
                logger.info(f"Setting {attr_name} = {parsed}")

        log_level = os.environ.get("OEE_LOG_LEVEL")
        if log_level:
            if isinstance(logging.getLevelName(log_level.upper()), int):
                config.log_level = log_level.upper()
            else:
                logger.warning(f"Invalid value for OEE_LOG_LEVEL: {log_level}")

        return config

    @classmethod
    def get_config(cls) -> EngineSettings:
        if cls._instance is None:
            cls._instance = cls._load_from_env()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    @classmethod
    def override(cls, **values: Any) -> EngineSettings:
        """Replace individual settings at runtime (tests, notebooks)."""
        config = cls.get_config()
        for name, value in values.items():
            if not hasattr(config, name):
                raise AttributeError(f"Unknown setting: {name}")
            setattr(config, name, value)
        return config


def configure_logging(level: Optional[str] = None) -> None:
    """Apply the configured log level to the package logger."""
    logging.getLogger("oee_engine").setLevel(level or Settings.get_config().log_level)
