"""Utility modules for stagedit."""

from stagedit.utils.validation import (
    ValidationError,
    validate_editor_list,
    validate_marker_pair,
    validate_target_path,
)

__all__ = [
    "ValidationError",
    "validate_editor_list",
    "validate_marker_pair",
    "validate_target_path",
]
