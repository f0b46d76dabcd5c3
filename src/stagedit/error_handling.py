"""Error types for stagedit with categorized, user-facing messages."""

import errno
import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for better handling."""

    FILE_SYSTEM = "file_system"
    PERMISSION = "permission"
    VALIDATION = "validation"
    EDITOR = "editor"
    RESOURCE = "resource"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Context information for errors."""

    operation: str
    file_path: str | None = None
    related_path: str | None = None


class StageditError(Exception):
    """Base exception class for stagedit with enhanced context."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.context = context
        self.original_error = original_error

        # Auto-classify error if not provided
        if category == ErrorCategory.UNKNOWN and original_error:
            self.category = self._classify_error(original_error)

    def _classify_error(self, error: Exception) -> ErrorCategory:
        """Classify the wrapped error by its type and errno."""
        if isinstance(error, PermissionError):
            return ErrorCategory.PERMISSION
        if isinstance(error, OSError):
            if error.errno in (errno.EACCES, errno.EPERM, errno.EROFS):
                return ErrorCategory.PERMISSION
            if error.errno in (errno.ENOMEM, errno.ENOSPC, errno.EMFILE):
                return ErrorCategory.RESOURCE
            return ErrorCategory.FILE_SYSTEM
        if isinstance(error, (ValueError, TypeError)):
            return ErrorCategory.VALIDATION
        return ErrorCategory.UNKNOWN

    def get_user_message(self) -> str:
        """Get user-friendly error message."""
        base_message = self.message

        if self.category == ErrorCategory.PERMISSION:
            return (
                f"Permission denied: {base_message}\n💡 Try running with "
                "appropriate permissions or check file ownership."
            )
        elif self.category == ErrorCategory.FILE_SYSTEM:
            return (
                f"File system error: {base_message}\n💡 Check if the "
                "file/directory exists and you have the right permissions."
            )
        elif self.category == ErrorCategory.RESOURCE:
            return (
                f"Out of resources: {base_message}\n"
                "💡 Free some disk space or file descriptors and try again."
            )
        elif self.category == ErrorCategory.EDITOR:
            return (
                f"Editor error: {base_message}\n"
                "💡 Set $STAGEDIT_EDITOR, $EDITOR or $VISUAL to a working editor."
            )
        elif self.category == ErrorCategory.VALIDATION:
            return (
                f"Validation error: {base_message}\n"
                "💡 Please check your input parameters."
            )
        else:
            return f"Error: {base_message}"


class NoFilesError(StageditError):
    """Raised when an edit session has nothing to edit."""

    def __init__(self, message: str = "Got no files to edit."):
        super().__init__(
            message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
        )


class StagingError(StageditError):
    """Raised when a staging copy cannot be created."""


class EditorLaunchError(StageditError):
    """Raised when the editor could not be executed."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(
            message,
            category=ErrorCategory.EDITOR,
            original_error=original_error,
        )


class EditorNotFoundError(EditorLaunchError):
    """Raised when no override is set and no fallback editor exists."""


class TrimError(StageditError):
    """Raised when an edited staging file cannot be read or rewritten."""


class InstallError(StageditError):
    """Raised when an edited file cannot be moved onto its target."""


def wrap_os_error(
    error: OSError,
    message: str,
    operation: str,
    file_path: str | None = None,
    related_path: str | None = None,
    error_class: type[StageditError] = StageditError,
) -> StageditError:
    """Wrap an OSError with the path and operation it failed on."""
    reason = error.strerror or str(error)
    wrapped = error_class(
        f"{message}: {reason}",
        context=ErrorContext(
            operation=operation, file_path=file_path, related_path=related_path
        ),
        original_error=error,
    )
    logger.debug(f"[{wrapped.category.value}] {wrapped.message} (in {operation})")
    return wrapped
