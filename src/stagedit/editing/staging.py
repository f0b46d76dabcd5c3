"""Staging writer: builds the editable temp copy of one target.

Two shapes are produced:

- a plain copy of the target's original file (or an empty file when there is
  none yet), for editing a whole file;
- a templated document, where the current target contents sit between a start
  and an end marker and the contents of related files follow as commented-out
  reference blocks:

      ### Editing /etc/app/override.conf
      <start marker>

      <current contents>

      <end marker>


      ### /usr/lib/app/app.conf
      # key=value

Temp files are created next to their target so the final install is a
same-filesystem rename.
"""

import logging
import os
import secrets
import shutil

from stagedit.editing.base import EditTarget, StagedFile
from stagedit.editing.labels import NullSecurityLabeler, SecurityLabeler
from stagedit.error_handling import StagingError, wrap_os_error

logger = logging.getLogger(__name__)

# Encoding used for all text handling; surrogateescape keeps undecodable
# bytes intact across read and write.
ENCODING = "utf-8"
ERRORS = "surrogateescape"

FILE_MODE = 0o644
DIR_MODE = 0o755

TEMPLATE_CURSOR_LINE = 4
# Only these count as surrounding whitespace; other blanks are content
WHITESPACE = " \t\n\r"
_TEMP_CREATE_ATTEMPTS = 16


def temp_filename_for(path: str) -> str:
    """Derive a random hidden filename in the same directory as `path`."""
    directory, name = os.path.split(path)
    return os.path.join(directory, f".#{name}{secrets.token_hex(8)}")


def read_text(path: str) -> str:
    with open(path, encoding=ENCODING, errors=ERRORS, newline="") as f:
        return f.read()


def comment_block(source_path: str, contents: str) -> str:
    """Render one commented reference block for a related file."""
    block = f"\n\n### {source_path}"
    stripped = contents.strip(WHITESPACE)
    if stripped:
        block += "\n# " + stripped.replace("\n", "\n# ")
    return block


def render_template(
    target_path: str,
    target_contents: str,
    marker_start: str,
    marker_end: str,
) -> str:
    """Render the header and editable region of a templated staging file."""
    if target_contents and not target_contents.endswith("\n"):
        target_contents += "\n"
    elif not target_contents:
        target_contents = "\n"

    return (
        f"### Editing {target_path}\n"
        f"{marker_start}\n"
        "\n"
        f"{target_contents}"
        "\n"
        f"{marker_end}\n"
    )


class StagingWriter:
    """Creates staging copies for edit targets."""

    def __init__(self, labeler: SecurityLabeler | None = None):
        self.labeler = labeler or NullSecurityLabeler()

    def stage(
        self,
        target: EditTarget,
        marker_start: str | None = None,
        marker_end: str | None = None,
    ) -> StagedFile:
        """Create the staging copy for `target`.

        Args:
            target: Target to stage
            marker_start: Start marker, required when the target is templated
            marker_end: End marker, required when the target is templated

        Returns:
            The temp path and the line the editor cursor should start on

        Raises:
            StagingError: If the temp file cannot be created or a comment
                source cannot be read
            ValueError: If the target is templated but markers are missing
        """
        if target.templated and (marker_start is None or marker_end is None):
            raise ValueError(
                f"Templating '{target.path}' requires both a start and end marker"
            )

        try:
            created = self.labeler.make_parent_dirs(target.path, mode=DIR_MODE)
        except OSError as e:
            raise wrap_os_error(
                e,
                f'Failed to create parent directories for "{target.path}"',
                operation="mkdir_parents",
                file_path=target.path,
                error_class=StagingError,
            ) from e
        for directory in created:
            logger.debug(f"Created directory '{directory}'")

        fd, temp_path = self._create_temp_file(target.path)
        try:
            try:
                f = os.fdopen(fd, "w", encoding=ENCODING, errors=ERRORS, newline="")
            except BaseException:
                os.close(fd)
                raise
            with f:
                if target.templated:
                    cursor_line = self._write_template(
                        f, target, temp_path, marker_start, marker_end
                    )
                else:
                    cursor_line = self._write_copy(f, target, temp_path)

                f.flush()
                os.fsync(f.fileno())
        except BaseException:
            _remove_quietly(temp_path)
            raise

        logger.debug(f"Staged '{target.path}' as '{temp_path}'")
        return StagedFile(temp_path=temp_path, cursor_line=cursor_line)

    def _create_temp_file(self, target_path: str) -> tuple[int, str]:
        """Exclusively create a new temp file beside the target."""
        flags = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_CLOEXEC", 0)
        for _ in range(_TEMP_CREATE_ATTEMPTS):
            temp_path = temp_filename_for(target_path)
            try:
                with self.labeler.create_context(target_path):
                    fd = os.open(temp_path, flags, FILE_MODE)
            except FileExistsError:
                continue
            except OSError as e:
                raise wrap_os_error(
                    e,
                    f'Failed to create temporary file for "{target_path}"',
                    operation="create_temp",
                    file_path=temp_path,
                    related_path=target_path,
                    error_class=StagingError,
                ) from e

            try:
                os.fchmod(fd, FILE_MODE)
            except OSError as e:
                os.close(fd)
                _remove_quietly(temp_path)
                raise wrap_os_error(
                    e,
                    f'Failed to change mode of temporary file "{temp_path}"',
                    operation="chmod_temp",
                    file_path=temp_path,
                    error_class=StagingError,
                ) from e
            return fd, temp_path

        raise StagingError(
            f'Failed to determine temporary filename for "{target_path}": '
            "too many collisions"
        )

    def _write_copy(self, f, target: EditTarget, temp_path: str) -> int:
        """Seed the staging file from the original file, if there is one."""
        if not target.original_path:
            return 1

        try:
            with open(
                target.original_path, encoding=ENCODING, errors=ERRORS, newline=""
            ) as src:
                shutil.copyfileobj(src, f)
        except FileNotFoundError:
            # First-time creation: edit an empty file
            logger.debug(
                f"Original '{target.original_path}' does not exist, starting empty"
            )
            return 1
        except OSError as e:
            raise wrap_os_error(
                e,
                f'Failed to copy "{target.original_path}" to "{temp_path}"',
                operation="copy_original",
                file_path=target.original_path,
                related_path=temp_path,
                error_class=StagingError,
            ) from e

        try:
            shutil.copymode(target.original_path, temp_path)
        except OSError as e:
            logger.debug(f"Could not copy mode of '{target.original_path}': {e}")

        return 1

    def _write_template(
        self,
        f,
        target: EditTarget,
        temp_path: str,
        marker_start: str,
        marker_end: str,
    ) -> int:
        """Write the templated document and return the cursor line."""
        try:
            target_contents = read_text(target.path)
        except FileNotFoundError:
            target_contents = ""
        except OSError as e:
            raise wrap_os_error(
                e,
                f'Failed to read target file "{target.path}"',
                operation="read_target",
                file_path=target.path,
                error_class=StagingError,
            ) from e

        f.write(render_template(target.path, target_contents, marker_start, marker_end))

        own_path = os.path.normpath(target.path)
        for source in target.comment_sources or []:
            if os.path.normpath(source) == own_path:
                continue

            try:
                contents = read_text(source)
            except OSError as e:
                raise wrap_os_error(
                    e,
                    f'Failed to read original file "{source}"',
                    operation="read_comment_source",
                    file_path=source,
                    related_path=target.path,
                    error_class=StagingError,
                ) from e

            f.write(comment_block(source, contents))

        return TEMPLATE_CURSOR_LINE


def _remove_quietly(path: str) -> None:
    try:
        os.unlink(path)
    except OSError as e:
        logger.debug(f"Failed to remove '{path}', ignoring: {e}")
