"""Edit targets and the session registry that owns them."""

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from stagedit.utils.validation import validate_marker_pair

logger = logging.getLogger(__name__)


class TrimResult(Enum):
    """Outcome of stripping template markers from an edited file."""

    UNCHANGED = "unchanged"
    CHANGED = "changed"
    EMPTIED = "emptied"


@dataclass
class StagedFile:
    """A staging copy created for one target."""

    temp_path: str
    cursor_line: int = 1


@dataclass
class EditTarget:
    """One file being edited."""

    path: str
    original_path: str | None = None
    # None disables templating; an empty list still templates
    comment_sources: list[str] | None = None
    temp_path: str | None = None
    cursor_line: int = 1

    @property
    def templated(self) -> bool:
        return self.comment_sources is not None

    @property
    def staged(self) -> bool:
        return bool(self.temp_path)


@dataclass
class EditSession:
    """Ordered set of edit targets plus the markers shared by all of them.

    Use as a context manager so staging files are removed on every exit path:

        with EditSession(marker_start=start, marker_end=end) as session:
            session.add("/etc/app/override.conf", comment_sources=[])
            Installer().run(session)
    """

    marker_start: str | None = None
    marker_end: str | None = None
    remove_empty_parent: bool = False
    targets: list[EditTarget] = field(default_factory=list)

    def __post_init__(self):
        validate_marker_pair(self.marker_start, self.marker_end)

    def __enter__(self) -> "EditSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def __len__(self) -> int:
        return len(self.targets)

    def __iter__(self) -> Iterator[EditTarget]:
        return iter(self.targets)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.contains(path)

    @property
    def markers(self) -> tuple[str | None, str | None]:
        return self.marker_start, self.marker_end

    def contains(self, path: str) -> bool:
        """Check whether a target with exactly this path is registered."""
        return any(target.path == path for target in self.targets)

    def add(
        self,
        path: str,
        original_path: str | None = None,
        comment_sources: list[str] | None = None,
    ) -> bool:
        """Register a target.

        Args:
            path: Final destination of the edited file
            original_path: File whose contents seed the staging copy
            comment_sources: Files embedded as commented reference material;
                passing a list (even an empty one) enables templating

        Returns:
            False if the path was already registered, True otherwise
        """
        if self.contains(path):
            logger.debug(f"Skipping duplicate edit target '{path}'")
            return False

        self.targets.append(
            EditTarget(
                path=path,
                original_path=original_path,
                comment_sources=(
                    list(comment_sources) if comment_sources is not None else None
                ),
            )
        )
        return True

    def cleanup(self) -> None:
        """Remove leftover staging files and, if configured, empty parents.

        Never raises on filesystem errors and may be called more than once.
        """
        for target in self.targets:
            if target.temp_path:
                try:
                    os.unlink(target.temp_path)
                except FileNotFoundError:
                    pass
                except OSError as e:
                    logger.debug(
                        f"Failed to remove temporary file '{target.temp_path}', "
                        f"ignoring: {e}"
                    )
                target.temp_path = None

            if self.remove_empty_parent:
                parent = os.path.dirname(target.path)
                if not parent:
                    logger.debug(
                        f"Failed to extract directory from '{target.path}', ignoring"
                    )
                    continue

                # rmdir refuses non-empty directories, so no emptiness check
                try:
                    os.rmdir(parent)
                except OSError:
                    pass

        self.targets.clear()
