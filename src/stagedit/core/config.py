"""Configuration management for stagedit."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from stagedit.utils.validation import (
    ValidationError,
    validate_editor_list,
    validate_marker,
)

logger = logging.getLogger(__name__)

# Checked in this order; the first non-empty value wins.
EDITOR_ENV_VARS = ("STAGEDIT_EDITOR", "EDITOR", "VISUAL")

DEFAULT_FALLBACK_EDITORS = ["editor", "nano", "vim", "vi"]

DEFAULT_MARKER_START = (
    "### Anything between here and the comment below will become the contents "
    "of the file"
)
DEFAULT_MARKER_END = "### Edits below this comment will be discarded"


class SettingsManager:
    """Manages user settings and configuration."""

    def __init__(self, settings_dir: str | None = None):
        self.settings_dir = Path(settings_dir or Path.home() / ".stagedit")
        self.settings_file = self.settings_dir / "user-settings.json"

    def load_user_settings(self) -> dict[str, Any]:
        """Load user settings from file."""
        if not self.settings_file.exists():
            return {}

        try:
            with open(self.settings_file, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not load settings from {self.settings_file}: {e}")
            return {}

    def save_user_settings(self, settings: dict[str, Any]) -> None:
        """Save user settings to file."""
        try:
            self.settings_dir.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, "w", encoding="utf-8") as f:
                json.dump(settings, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not save settings: {e}")

    def update_user_setting(self, key: str, value: Any) -> None:
        """Update a single user setting with validation.

        Args:
            key: Setting key to update
            value: Setting value

        Raises:
            ValidationError: If the key is unknown or the value is invalid
        """
        if key in ("markerStart", "markerEnd"):
            value = validate_marker(value, context=key)
        elif key == "fallbackEditors":
            if isinstance(value, str):
                value = value.split(":")
            value = validate_editor_list(value)
        elif key == "removeEmptyParent":
            value = _parse_bool(value, key)
        else:
            raise ValidationError(
                f"Unknown setting: {key}. Must be one of 'markerStart', "
                "'markerEnd', 'fallbackEditors', 'removeEmptyParent'"
            )

        settings = self.load_user_settings()
        settings[key] = value
        self.save_user_settings(settings)

    def get_editor_overrides(
        self, environ: dict[str, str] | None = None
    ) -> list[tuple[str, str]]:
        """Get the editor override variables in precedence order.

        Args:
            environ: Environment mapping to read (default: os.environ)

        Returns:
            (variable name, value) pairs for every override that is set and
            non-empty, highest precedence first
        """
        env = os.environ if environ is None else environ
        overrides = []
        for name in EDITOR_ENV_VARS:
            value = env.get(name, "")
            if value and value.strip():
                overrides.append((name, value))
        return overrides

    def get_fallback_editors(self) -> list[str]:
        """Get the well-known editors to try when no override is set.

        Note:
            STAGEDIT_FALLBACK_EDITORS is a colon-separated list, like $PATH.
        """
        # First check environment
        env_value = os.getenv("STAGEDIT_FALLBACK_EDITORS", "")
        if env_value.strip():
            names = [name for name in env_value.split(":") if name.strip()]
            if names:
                return validate_editor_list(names)

        # Then check settings file
        settings = self.load_user_settings()
        editors = settings.get("fallbackEditors")
        if editors:
            try:
                return validate_editor_list(editors)
            except ValidationError as e:
                logger.warning(f"Ignoring fallbackEditors setting: {e}")

        return list(DEFAULT_FALLBACK_EDITORS)

    def get_markers(self) -> tuple[str, str]:
        """Get the template start and end markers."""
        settings = self.load_user_settings()
        marker_start = settings.get("markerStart") or DEFAULT_MARKER_START
        marker_end = settings.get("markerEnd") or DEFAULT_MARKER_END
        return marker_start, marker_end

    def get_remove_empty_parent(self) -> bool:
        """Get whether cleanup removes empty parent directories of targets."""
        env_value = os.getenv("STAGEDIT_REMOVE_EMPTY_PARENT", "").lower()
        if env_value in ("1", "true", "yes"):
            return True
        if env_value in ("0", "false", "no"):
            return False

        settings = self.load_user_settings()
        return bool(settings.get("removeEmptyParent", False))

    def get_verbose_mode(self) -> bool:
        """Get verbose/debug mode setting.

        Note:
            Checks STAGEDIT_VERBOSE environment variable first, then settings file.
            Accepts: "1", "true", "yes" (case-insensitive)
        """
        verbose_env = os.getenv("STAGEDIT_VERBOSE", "").lower()
        if verbose_env in ("1", "true", "yes"):
            return True

        settings = self.load_user_settings()
        return bool(settings.get("verbose", False))


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes"):
            return True
        if lowered in ("0", "false", "no"):
            return False
    raise ValidationError(f"Invalid value for {key}: {value!r}. Must be true or false")
