"""Strip template scaffolding out of an edited staging file."""

import logging

from stagedit.editing.base import TrimResult
from stagedit.editing.staging import ENCODING, ERRORS, WHITESPACE, read_text
from stagedit.error_handling import TrimError, wrap_os_error

logger = logging.getLogger(__name__)


def extract_region(
    contents: str, marker_start: str | None, marker_end: str | None
) -> str:
    """Return the text between the markers, without surrounding whitespace.

    A missing start marker means the region starts at the top of the file; a
    missing end marker means it runs to the end. The first occurrence of each
    marker is used.
    """
    start = 0
    if marker_start is not None:
        index = contents.find(marker_start)
        if index >= 0:
            start = index + len(marker_start)

    end = len(contents)
    if marker_end is not None:
        index = contents.find(marker_end, start)
        if index >= 0:
            end = index

    return contents[start:end].strip(WHITESPACE)


def trim_edit_markers(
    path: str, marker_start: str | None = None, marker_end: str | None = None
) -> TrimResult:
    """Reduce an edited staging file to its meaningful content.

    Args:
        path: Staging file to trim in place
        marker_start: Start marker, or None when the file was not templated
        marker_end: End marker, or None when the file was not templated

    Returns:
        EMPTIED if nothing but whitespace remains (the file is left as is),
        UNCHANGED if the file already held exactly the trimmed content,
        CHANGED if the file was rewritten

    Raises:
        TrimError: If the file cannot be read or rewritten
        ValueError: If only one of the markers is given
    """
    if (marker_start is None) != (marker_end is None):
        raise ValueError("Markers must be given as a pair")

    try:
        old_contents = read_text(path)
    except OSError as e:
        raise wrap_os_error(
            e,
            f'Failed to read temporary file "{path}"',
            operation="read_temp",
            file_path=path,
            error_class=TrimError,
        ) from e

    region = extract_region(old_contents, marker_start, marker_end)
    if not region:
        return TrimResult.EMPTIED

    new_contents = region + "\n"
    if new_contents == old_contents:
        return TrimResult.UNCHANGED

    try:
        with open(path, "w", encoding=ENCODING, errors=ERRORS, newline="") as f:
            f.write(new_contents)
    except OSError as e:
        raise wrap_os_error(
            e,
            f'Failed to modify temporary file "{path}"',
            operation="write_temp",
            file_path=path,
            error_class=TrimError,
        ) from e

    logger.debug(f"Trimmed template scaffolding from '{path}'")
    return TrimResult.CHANGED
