"""Console output for stagedit commands.

Delegates rendering to rich.console.Console and keeps formatting decisions out
of the command logic.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from stagedit.editing.installer import InstallOutcome, InstallReport

_OUTCOME_STYLES = {
    InstallOutcome.INSTALLED: ("✓", "green", "installed"),
    InstallOutcome.UNCHANGED: ("·", "dim", "unchanged"),
    InstallOutcome.SKIPPED_EMPTY: ("·", "yellow", "empty, not installed"),
    InstallOutcome.FAILED: ("❌", "red", "failed"),
}


def configure_logging(verbose: bool = False, console: Console | None = None) -> None:
    """Route library logging through rich on stderr."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=verbose,
        markup=False,
    )
    root = logging.getLogger("stagedit")
    root.handlers = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


class ConsoleInterface:
    """User-facing messages for the command line."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def show_message(self, message: str, style: str | None = None) -> None:
        # Messages carry file paths, which may contain rich markup brackets
        if style:
            self.console.print(message, style=style, markup=False)
        else:
            self.console.print(message, markup=False)

    def show_system_error(self, message: str) -> None:
        self.show_message(f"❌ {message}", style="red")

    def show_system_success(self, message: str) -> None:
        self.show_message(f"✓ {message}")

    def show_warning(self, message: str) -> None:
        self.show_message(f"⚠️ {message}", style="yellow")

    def show_info(self, message: str) -> None:
        self.show_message(message)

    def show_install_report(self, report: InstallReport) -> None:
        """Print one line per edited file."""
        for result in report.files:
            icon, style, label = _OUTCOME_STYLES[result.outcome]
            line = f"{icon} {result.path}: {label}"
            if result.error is not None:
                line += f" ({result.error.message})"
            self.show_message(line, style=style)
