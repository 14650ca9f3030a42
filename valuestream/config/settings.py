"""
Application Settings

Environment configuration for the metrics engine and CLI.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Application settings from environment."""

    # Classify unlabelled right-to-left connections as rework
    infer_rework_from_position: bool = True

    # Logging
    log_level: str = "WARNING"

    # Decimal places shown in reports
    display_precision: int = 2

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            infer_rework_from_position=_env_flag("VSM_INFER_REWORK_FROM_POSITION", True),
            log_level=os.getenv("VSM_LOG_LEVEL", "WARNING").upper(),
            display_precision=int(os.getenv("VSM_DISPLAY_PRECISION", "2")),
        )
