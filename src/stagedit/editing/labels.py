"""Security label hooks bracketing file and directory creation.

Labeling systems (e.g. SELinux) need to know the *final* path of a file at the
moment a file is created so the new inode gets the label the final location
would have. Staging files live under a random name, so creation is bracketed by
a context keyed on the target path.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path


class SecurityLabeler(ABC):
    """Base class for security labeling backends."""

    @abstractmethod
    def begin_create(self, path: str, is_dir: bool = False) -> None:
        """Prepare the label for a file or directory about to be created."""
        pass

    @abstractmethod
    def end_create(self) -> None:
        """Clear the label prepared by begin_create."""
        pass

    @contextmanager
    def create_context(self, path: str, is_dir: bool = False) -> Iterator[None]:
        """Bracket creation of `path` with begin_create/end_create."""
        self.begin_create(path, is_dir=is_dir)
        try:
            yield
        finally:
            self.end_create()

    def make_parent_dirs(self, path: str, mode: int = 0o755) -> list[str]:
        """Create the missing parent directories of `path`, labeling each one.

        Returns:
            The directories that were created, outermost first
        """
        created = []
        missing = []
        parent = Path(path).parent
        while not parent.exists() and parent != parent.parent:
            missing.append(parent)
            parent = parent.parent

        for directory in reversed(missing):
            with self.create_context(str(directory), is_dir=True):
                try:
                    directory.mkdir(mode=mode)
                except FileExistsError:
                    continue
            created.append(str(directory))

        return created


class NullSecurityLabeler(SecurityLabeler):
    """Labeler for systems without mandatory access control."""

    def begin_create(self, path: str, is_dir: bool = False) -> None:
        pass

    def end_create(self) -> None:
        pass
