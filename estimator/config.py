"""
Configuration for the estimation engine and its HTTP surface.
"""
from pydantic import BaseModel
import logging
import os

from estimator.models import EstimationConfig


def _env_flag(name: str, default: str = "true") -> bool:
    return (os.getenv(name, default) or default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """
    Runtime settings with environment-variable overrides.
    """
    LOG_LEVEL: str = (os.getenv("LOG_LEVEL", "DEBUG") or "DEBUG")

    TIMER_INTERVAL: float = float(os.getenv("TIMER_INTERVAL", "1.0"))
    CACHE_MAX_ENTRIES: int = int(os.getenv("CACHE_MAX_ENTRIES", "256"))
    SESSION_MAX_ENTRIES: int = int(os.getenv("SESSION_MAX_ENTRIES", "1024"))

    INCLUDE_INTERACTION_TIME: bool = _env_flag("INCLUDE_INTERACTION_TIME")
    INCLUDE_BREAK_TIME: bool = _env_flag("INCLUDE_BREAK_TIME")
    USE_PERSONALIZATION: bool = _env_flag("USE_PERSONALIZATION")
    CONFIDENCE_THRESHOLD: float = float(os.getenv("CONFIDENCE_THRESHOLD", "0.6"))

    def __init__(self, **data):
        super().__init__(**data)
        # Normalize LOG_LEVEL: strip comments/extra words, upper-case, validate
        level = (self.LOG_LEVEL or "INFO").strip().split()[0].upper()
        if not isinstance(logging.getLevelName(level), int):
            level = "INFO"
        object.__setattr__(self, "LOG_LEVEL", level)
        object.__setattr__(self, "CONFIDENCE_THRESHOLD", max(0.0, min(1.0, self.CONFIDENCE_THRESHOLD)))
        if self.TIMER_INTERVAL <= 0:
            object.__setattr__(self, "TIMER_INTERVAL", 1.0)
        if self.CACHE_MAX_ENTRIES < 1:
            object.__setattr__(self, "CACHE_MAX_ENTRIES", 1)
        if self.SESSION_MAX_ENTRIES < 1:
            object.__setattr__(self, "SESSION_MAX_ENTRIES", 1)

    def estimation_config(self) -> EstimationConfig:
        """Default EstimationConfig built from these settings."""
        return EstimationConfig(
            include_interaction_time=self.INCLUDE_INTERACTION_TIME,
            include_break_time=self.INCLUDE_BREAK_TIME,
            confidence_threshold=self.CONFIDENCE_THRESHOLD,
            use_personalization=self.USE_PERSONALIZATION,
        )
