"""Edit-and-install workflow for stagedit."""

from stagedit.editing.base import EditSession, EditTarget, StagedFile, TrimResult
from stagedit.editing.installer import (
    FileOutcome,
    InstallOutcome,
    Installer,
    InstallReport,
)
from stagedit.editing.labels import NullSecurityLabeler, SecurityLabeler
from stagedit.editing.launcher import (
    EditorLauncher,
    SpawnOutcome,
    SpawnResult,
    spawn_and_wait,
)
from stagedit.editing.staging import StagingWriter
from stagedit.editing.trimmer import trim_edit_markers

__all__ = [
    "EditSession",
    "EditTarget",
    "StagedFile",
    "TrimResult",
    "StagingWriter",
    "EditorLauncher",
    "SpawnOutcome",
    "SpawnResult",
    "spawn_and_wait",
    "trim_edit_markers",
    "Installer",
    "InstallReport",
    "InstallOutcome",
    "FileOutcome",
    "SecurityLabeler",
    "NullSecurityLabeler",
]
