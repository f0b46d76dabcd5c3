"""Installer: stage, edit, trim and move edited files into place."""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum

from stagedit.editing.base import EditSession, EditTarget, TrimResult
from stagedit.editing.launcher import EditorLauncher
from stagedit.editing.staging import StagingWriter
from stagedit.editing.trimmer import trim_edit_markers
from stagedit.error_handling import (
    InstallError,
    NoFilesError,
    StageditError,
    wrap_os_error,
)

logger = logging.getLogger(__name__)


class InstallOutcome(Enum):
    """What happened to one target after the editor exited."""

    INSTALLED = "installed"
    UNCHANGED = "unchanged"
    SKIPPED_EMPTY = "skipped_empty"
    FAILED = "failed"


@dataclass
class FileOutcome:
    """Per-target result of an install run."""

    path: str
    outcome: InstallOutcome
    error: StageditError | None = None


@dataclass
class InstallReport:
    """Outcomes of an install run, in session order."""

    files: list[FileOutcome] = field(default_factory=list)

    @property
    def installed(self) -> list[str]:
        return [f.path for f in self.files if f.outcome == InstallOutcome.INSTALLED]

    @property
    def failed(self) -> list[FileOutcome]:
        return [f for f in self.files if f.outcome == InstallOutcome.FAILED]

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


def _same_contents(temp_path: str, target_path: str) -> bool:
    """Check whether the edited file is byte-identical to the current target."""
    try:
        if os.path.getsize(temp_path) != os.path.getsize(target_path):
            return False
        with open(temp_path, "rb") as a, open(target_path, "rb") as b:
            return a.read() == b.read()
    except FileNotFoundError:
        return False


class Installer:
    """Runs the edit-and-install workflow over an EditSession."""

    def __init__(
        self,
        launcher: EditorLauncher | None = None,
        writer: StagingWriter | None = None,
    ):
        self.launcher = launcher or EditorLauncher()
        self.writer = writer or StagingWriter()

    def run(self, session: EditSession) -> InstallReport:
        """Edit every target in one editor and install the changed ones.

        Staging and editor failures abort the whole run before anything is
        installed. Failures on individual files after the editor exits are
        recorded in the report and do not stop the remaining files.

        Raises:
            NoFilesError: If the session is empty
            StagingError: If a staging copy cannot be created
            EditorLaunchError: If no editor could be run
        """
        if len(session) == 0:
            raise NoFilesError()

        marker_start, marker_end = session.markers

        for target in session:
            if target.staged:
                continue
            staged = self.writer.stage(target, marker_start, marker_end)
            target.temp_path = staged.temp_path
            target.cursor_line = staged.cursor_line

        targets = list(session)
        self.launcher.launch(
            [target.temp_path for target in targets],
            cursor_line=targets[0].cursor_line,
        )

        report = InstallReport()
        for target in targets:
            report.files.append(self._install_one(target, marker_start, marker_end))

        return report

    def _install_one(
        self,
        target: EditTarget,
        marker_start: str | None,
        marker_end: str | None,
    ) -> FileOutcome:
        # Always trim, even untemplated files, to tell whether the edit is empty
        try:
            result = trim_edit_markers(target.temp_path, marker_start, marker_end)
        except StageditError as e:
            logger.error(e.message)
            return FileOutcome(target.path, InstallOutcome.FAILED, error=e)

        if result == TrimResult.EMPTIED:
            logger.info(f"Edited file for '{target.path}' is empty, not installing.")
            return FileOutcome(target.path, InstallOutcome.SKIPPED_EMPTY)

        try:
            unchanged = _same_contents(target.temp_path, target.path)
        except OSError as e:
            logger.debug(f"Could not compare with '{target.path}': {e}")
            unchanged = False
        if unchanged:
            logger.info(f"No changes to '{target.path}'.")
            return FileOutcome(target.path, InstallOutcome.UNCHANGED)

        try:
            os.replace(target.temp_path, target.path)
        except OSError as e:
            error = wrap_os_error(
                e,
                f'Failed to rename "{target.temp_path}" to "{target.path}"',
                operation="install",
                file_path=target.temp_path,
                related_path=target.path,
                error_class=InstallError,
            )
            logger.error(error.message)
            return FileOutcome(target.path, InstallOutcome.FAILED, error=error)

        target.temp_path = None
        logger.info(f"Successfully installed edited file '{target.path}'.")
        return FileOutcome(target.path, InstallOutcome.INSTALLED)
