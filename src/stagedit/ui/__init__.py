"""User interface components for stagedit."""

from stagedit.ui.console import ConsoleInterface, configure_logging

__all__ = [
    "ConsoleInterface",
    "configure_logging",
]
