"""Core components for stagedit."""

from stagedit.core.config import SettingsManager

__all__ = [
    "SettingsManager",
]
