"""Input validation utilities for stagedit."""

from pathlib import Path


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


def validate_marker(marker: str, context: str = "marker") -> str:
    """Validate a template marker string.

    Args:
        marker: The marker to validate
        context: Context for error messages (e.g., "start marker")

    Returns:
        The marker, unchanged

    Raises:
        ValidationError: If the marker is invalid

    Rules:
        - Must be a string
        - Must not be empty or only whitespace
        - Must fit on a single line
    """
    if not isinstance(marker, str):
        raise ValidationError(f"Invalid {context}: must be a string")

    if not marker.strip():
        raise ValidationError(f"Invalid {context}: cannot be empty")

    if "\n" in marker or "\r" in marker:
        raise ValidationError(f"Invalid {context}: must be a single line")

    return marker


def validate_marker_pair(
    marker_start: str | None, marker_end: str | None
) -> tuple[str | None, str | None]:
    """Validate that markers are either both set or both unset.

    Raises:
        ValidationError: If only one marker is set, or either is invalid
    """
    if (marker_start is None) != (marker_end is None):
        raise ValidationError(
            "Markers must be given as a pair: set both the start and end marker "
            "or neither"
        )

    if marker_start is None:
        return None, None

    validate_marker(marker_start, context="start marker")
    validate_marker(marker_end, context="end marker")

    if marker_start == marker_end:
        raise ValidationError("Start and end markers must differ")

    return marker_start, marker_end


def validate_target_path(path: str) -> str:
    """Validate an edit target path.

    Args:
        path: The target path to validate

    Returns:
        The path, unchanged (targets are compared by exact string)

    Raises:
        ValidationError: If the path is empty or names a directory
    """
    if not path:
        raise ValidationError("Target path cannot be empty")

    if path.endswith("/") or Path(path).is_dir():
        raise ValidationError(f"Invalid target path '{path}': is a directory")

    return path


def validate_editor_list(editors: list[str]) -> list[str]:
    """Validate a list of fallback editor program names.

    Raises:
        ValidationError: If the list is empty or holds blank entries
    """
    if not isinstance(editors, list) or not editors:
        raise ValidationError("Fallback editors must be a non-empty list")

    cleaned = []
    for name in editors:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError(
                "Fallback editor names must be non-empty strings"
            )
        cleaned.append(name.strip())

    return cleaned
