"""Tests for editor resolution and launching."""

import sys

import pytest

from stagedit.editing import EditorLauncher, SpawnOutcome, SpawnResult, spawn_and_wait
from stagedit.editing.launcher import build_file_args, resolve_editor
from stagedit.error_handling import (
    EditorLaunchError,
    EditorNotFoundError,
    ErrorCategory,
)


class FakeSpawner:
    """Spawner that records argv and answers per program name."""

    def __init__(self, outcomes=None):
        self.outcomes = outcomes or {}
        self.calls = []

    def __call__(self, argv):
        self.calls.append(list(argv))
        outcome = self.outcomes.get(argv[0], SpawnOutcome.EXITED)
        if outcome == SpawnOutcome.EXITED:
            return SpawnResult(outcome, argv=argv, returncode=0)
        error = FileNotFoundError(2, "No such file or directory")
        if outcome == SpawnOutcome.FAILED:
            error = PermissionError(13, "Permission denied")
        return SpawnResult(outcome, argv=argv, error=error)


class TestResolveEditor:
    """Tests for override precedence."""

    def test_first_override_wins(self):
        overrides = [("STAGEDIT_EDITOR", "emacs -nw"), ("EDITOR", "vim")]
        assert resolve_editor(overrides) == ("STAGEDIT_EDITOR", ["emacs", "-nw"])

    def test_blank_override_skipped(self):
        overrides = [("STAGEDIT_EDITOR", "  "), ("EDITOR", ""), ("VISUAL", "code --wait")]
        assert resolve_editor(overrides) == ("VISUAL", ["code", "--wait"])

    def test_no_override(self):
        assert resolve_editor([]) is None

    def test_unbalanced_quotes(self):
        with pytest.raises(EditorLaunchError):
            resolve_editor([("EDITOR", "vim '")])


class TestBuildFileArgs:
    """Tests for the +LINE cursor convention."""

    def test_single_file_with_line(self):
        assert build_file_args(["/t/a"], cursor_line=4) == ["+4", "/t/a"]

    def test_single_file_first_line(self):
        assert build_file_args(["/t/a"], cursor_line=1) == ["/t/a"]

    def test_multiple_files_never_get_line(self):
        assert build_file_args(["/t/a", "/t/b"], cursor_line=4) == ["/t/a", "/t/b"]


class TestEditorLauncher:
    """Tests for launching with overrides and fallbacks."""

    def test_override_used_with_arguments(self):
        spawner = FakeSpawner()
        launcher = EditorLauncher(
            overrides=[("EDITOR", "vim -u NONE")], spawner=spawner
        )

        launcher.launch(["/t/a"], cursor_line=4)

        assert spawner.calls == [["vim", "-u", "NONE", "+4", "/t/a"]]

    def test_missing_override_is_fatal(self):
        """Test that an unusable override does not fall back."""
        spawner = FakeSpawner({"nosuch": SpawnOutcome.NOT_FOUND})
        launcher = EditorLauncher(overrides=[("EDITOR", "nosuch")], spawner=spawner)

        with pytest.raises(EditorLaunchError, match=r"\$EDITOR") as exc_info:
            launcher.launch(["/t/a"])

        assert exc_info.value.category == ErrorCategory.EDITOR
        assert spawner.calls == [["nosuch", "/t/a"]]

    def test_fallbacks_tried_in_order(self):
        spawner = FakeSpawner(
            {"editor": SpawnOutcome.NOT_FOUND, "nano": SpawnOutcome.NOT_FOUND}
        )
        launcher = EditorLauncher(overrides=[], spawner=spawner)

        result = launcher.launch(["/t/a", "/t/b"])

        assert [call[0] for call in spawner.calls] == ["editor", "nano", "vim"]
        assert spawner.calls[-1] == ["vim", "/t/a", "/t/b"]
        assert result.outcome == SpawnOutcome.EXITED

    def test_fallback_failure_is_fatal(self):
        """Test that an editor that exists but cannot run stops the search."""
        spawner = FakeSpawner(
            {"editor": SpawnOutcome.NOT_FOUND, "nano": SpawnOutcome.FAILED}
        )
        launcher = EditorLauncher(overrides=[], spawner=spawner)

        with pytest.raises(EditorLaunchError, match="Permission denied"):
            launcher.launch(["/t/a"])

        assert [call[0] for call in spawner.calls] == ["editor", "nano"]

    def test_no_editor_available(self):
        spawner = FakeSpawner({name: SpawnOutcome.NOT_FOUND for name in ["ed", "ex"]})
        launcher = EditorLauncher(
            overrides=[], fallback_editors=["ed", "ex"], spawner=spawner
        )

        with pytest.raises(EditorNotFoundError, match=r"\$STAGEDIT_EDITOR"):
            launcher.launch(["/t/a"])

    def test_nonzero_exit_is_not_an_error(self):
        launcher = EditorLauncher(
            overrides=[("EDITOR", "false")],
            spawner=lambda argv: SpawnResult(
                SpawnOutcome.EXITED, argv=argv, returncode=1
            ),
        )

        assert launcher.launch(["/t/a"]).returncode == 1

    def test_overrides_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("STAGEDIT_EDITOR", "")
        monkeypatch.setenv("EDITOR", "nano")
        monkeypatch.setenv("VISUAL", "code")

        launcher = EditorLauncher()

        assert launcher.overrides == [("EDITOR", "nano"), ("VISUAL", "code")]

    def test_describe(self):
        assert (
            EditorLauncher(overrides=[("VISUAL", "code --wait")]).describe()
            == "code --wait (from $VISUAL)"
        )
        assert EditorLauncher(overrides=[], fallback_editors=["vi"]).describe() == (
            "first available of: vi"
        )


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX process handling")
class TestSpawnAndWait:
    """Tests that run real child processes."""

    def test_exited(self):
        result = spawn_and_wait([sys.executable, "-c", "raise SystemExit(3)"])
        assert result.outcome == SpawnOutcome.EXITED
        assert result.returncode == 3

    def test_not_found(self):
        result = spawn_and_wait(["stagedit-no-such-editor-program"])
        assert result.outcome == SpawnOutcome.NOT_FOUND

    def test_not_executable(self, tmp_path):
        script = tmp_path / "editor"
        script.write_text("#!/bin/sh\n")
        script.chmod(0o644)

        result = spawn_and_wait([str(script)])

        assert result.outcome == SpawnOutcome.FAILED
        assert isinstance(result.error, PermissionError)

    def test_child_nofile_limit_is_capped(self, tmp_path):
        out = tmp_path / "limit"
        code = (
            "import resource,sys;"
            f"open({str(out)!r},'w').write(str(resource.getrlimit(resource.RLIMIT_NOFILE)[0]))"
        )

        spawn_and_wait([sys.executable, "-c", code])

        assert int(out.read_text()) <= 1024
