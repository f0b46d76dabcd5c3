"""Editor launcher: resolve the user's editor and run it over staged files."""

import ctypes
import logging
import os
import resource
import shlex
import signal
import subprocess
import sys
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum

from stagedit.core.config import (
    DEFAULT_FALLBACK_EDITORS,
    EDITOR_ENV_VARS,
    SettingsManager,
)
from stagedit.error_handling import EditorLaunchError, EditorNotFoundError

logger = logging.getLogger(__name__)

PR_SET_PDEATHSIG = 1
SAFE_NOFILE_LIMIT = 1024


class SpawnOutcome(Enum):
    """How an attempt to run a program ended."""

    EXITED = "exited"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class SpawnResult:
    """Result of running one candidate program to completion."""

    outcome: SpawnOutcome
    argv: list[str] = field(default_factory=list)
    returncode: int | None = None
    error: Exception | None = None


Spawner = Callable[[list[str]], SpawnResult]


def _load_libc():
    if not sys.platform.startswith("linux"):
        return None
    try:
        return ctypes.CDLL(None, use_errno=True)
    except OSError:
        return None


# Loaded in the parent; the child only calls into it after fork.
_libc = _load_libc()


def _prepare_child() -> None:
    """Runs in the forked child just before exec."""
    signal.pthread_sigmask(signal.SIG_SETMASK, [])
    for sig in signal.valid_signals():
        if sig in (signal.SIGKILL, signal.SIGSTOP):
            continue
        try:
            signal.signal(sig, signal.SIG_DFL)
        except (OSError, ValueError):
            pass

    if _libc is not None:
        _libc.prctl(PR_SET_PDEATHSIG, int(signal.SIGTERM), 0, 0, 0)

    soft, hard = resource.getrlimit(resource.RLIMIT_NOFILE)
    if soft == resource.RLIM_INFINITY or soft > SAFE_NOFILE_LIMIT:
        resource.setrlimit(resource.RLIMIT_NOFILE, (SAFE_NOFILE_LIMIT, hard))


@contextmanager
def _interrupts_ignored() -> Iterator[None]:
    """Leave SIGINT and SIGQUIT to the editor while it runs in the foreground."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = {
        sig: signal.signal(sig, signal.SIG_IGN)
        for sig in (signal.SIGINT, signal.SIGQUIT)
    }
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def spawn_and_wait(argv: list[str]) -> SpawnResult:
    """Run `argv` as a child process and block until it exits.

    Returns:
        NOT_FOUND if the program does not exist, FAILED if it exists but could
        not be executed, EXITED with the return code otherwise
    """
    try:
        with _interrupts_ignored():
            completed = subprocess.run(argv, preexec_fn=_prepare_child, close_fds=True)
    except FileNotFoundError as e:
        return SpawnResult(SpawnOutcome.NOT_FOUND, argv=argv, error=e)
    except (OSError, subprocess.SubprocessError) as e:
        return SpawnResult(SpawnOutcome.FAILED, argv=argv, error=e)

    return SpawnResult(SpawnOutcome.EXITED, argv=argv, returncode=completed.returncode)


def resolve_editor(
    overrides: Sequence[tuple[str, str]],
) -> tuple[str, list[str]] | None:
    """Pick the first usable editor override.

    Args:
        overrides: (variable name, value) pairs, highest precedence first

    Returns:
        The variable name and the editor command split into arguments, or None
        when no override is set

    Raises:
        EditorLaunchError: If the winning override cannot be parsed
    """
    for name, value in overrides:
        if not value or not value.strip():
            continue
        try:
            args = shlex.split(value)
        except ValueError as e:
            raise EditorLaunchError(
                f"Cannot parse ${name} ({value!r}): {e}", original_error=e
            ) from e
        if args:
            return name, args
    return None


def build_file_args(temp_paths: Sequence[str], cursor_line: int = 1) -> list[str]:
    """Build the arguments that follow the editor command."""
    args = []
    # +LINE puts the cursor on the right line, only meaningful for one file
    if len(temp_paths) == 1 and cursor_line > 1:
        args.append(f"+{cursor_line}")
    args.extend(temp_paths)
    return args


class EditorLauncher:
    """Runs the resolved editor once over a batch of files."""

    def __init__(
        self,
        overrides: Sequence[tuple[str, str]] | None = None,
        fallback_editors: Sequence[str] | None = None,
        spawner: Spawner | None = None,
    ):
        """Initialize the launcher.

        Args:
            overrides: Editor override variables as (name, value) pairs,
                highest precedence first (default: read from os.environ)
            fallback_editors: Programs tried in order when no override is set
            spawner: Runs a command and waits for it (default: spawn_and_wait)
        """
        if overrides is None:
            overrides = [
                (name, os.environ[name])
                for name in EDITOR_ENV_VARS
                if os.environ.get(name)
            ]
        self.overrides = list(overrides)
        self.fallback_editors = list(fallback_editors or DEFAULT_FALLBACK_EDITORS)
        self.spawner = spawner or spawn_and_wait

    @classmethod
    def from_settings(
        cls, settings: SettingsManager, environ: dict[str, str] | None = None
    ) -> "EditorLauncher":
        """Build a launcher from a SettingsManager."""
        return cls(
            overrides=settings.get_editor_overrides(environ),
            fallback_editors=settings.get_fallback_editors(),
        )

    def describe(self) -> str:
        """Describe which editor would be used, without running anything."""
        resolved = resolve_editor(self.overrides)
        if resolved:
            name, args = resolved
            return f"{shlex.join(args)} (from ${name})"
        return "first available of: " + ", ".join(self.fallback_editors)

    def launch(self, temp_paths: Sequence[str], cursor_line: int = 1) -> SpawnResult:
        """Open all files in one editor process and wait for it to exit.

        The editor's exit status is logged but not acted upon.

        Raises:
            EditorLaunchError: If an override is set but cannot be executed,
                or a fallback editor exists but fails to execute
            EditorNotFoundError: If no override is set and no fallback exists
        """
        file_args = build_file_args(list(temp_paths), cursor_line)

        resolved = resolve_editor(self.overrides)
        if resolved:
            name, editor_args = resolved
            result = self.spawner(editor_args + file_args)
            if result.outcome != SpawnOutcome.EXITED:
                raise EditorLaunchError(
                    f"Failed to execute '{editor_args[0]}' from ${name}: "
                    f"{_reason(result)}",
                    original_error=result.error,
                )
            return self._finished(result)

        for editor in self.fallback_editors:
            result = self.spawner([editor] + file_args)
            if result.outcome == SpawnOutcome.NOT_FOUND:
                # Try each one before failing
                logger.debug(f"Editor '{editor}' not found, trying next")
                continue
            if result.outcome == SpawnOutcome.FAILED:
                raise EditorLaunchError(
                    f"Failed to execute '{editor}': {_reason(result)}",
                    original_error=result.error,
                )
            return self._finished(result)

        raise EditorNotFoundError(
            "Cannot edit files, no editor available. Please set either "
            + ", ".join(f"${name}" for name in EDITOR_ENV_VARS[:-1])
            + f" or ${EDITOR_ENV_VARS[-1]}."
        )

    def _finished(self, result: SpawnResult) -> SpawnResult:
        if result.returncode:
            logger.info(
                f"Editor '{result.argv[0]}' exited with status {result.returncode}"
            )
        else:
            logger.debug(f"Editor '{result.argv[0]}' exited")
        return result


def _reason(result: SpawnResult) -> str:
    error = result.error
    if isinstance(error, OSError) and error.strerror:
        return error.strerror
    return str(error) if error else result.outcome.value
