"""Tests for marker trimming."""

import pytest

from stagedit.editing import EditTarget, StagingWriter, TrimResult, trim_edit_markers
from stagedit.editing.trimmer import extract_region
from stagedit.error_handling import TrimError

START = "#START#"
END = "#END#"


def write(tmp_path, contents):
    path = tmp_path / "staged"
    path.write_text(contents)
    return str(path)


class TestExtractRegion:
    """Tests for locating the editable region."""

    def test_between_markers(self):
        assert extract_region("head\n#START#\n a \n#END#\ntail", START, END) == "a"

    def test_missing_start_marker_uses_file_start(self):
        assert extract_region("a\nb\n#END#\ntail", START, END) == "a\nb"

    def test_missing_end_marker_runs_to_eof(self):
        assert extract_region("head\n#START#\na\nb\n", START, END) == "a\nb"

    def test_end_marker_searched_after_start(self):
        """Test that an end marker before the start marker is ignored."""
        assert extract_region("#END#\n#START#\nx\n#END#", START, END) == "x"

    def test_first_start_marker_wins(self):
        assert extract_region("#START#a#START#b#END#", START, END) == "a#START#b"

    def test_no_markers(self):
        assert extract_region("  whole file \n", None, None) == "whole file"


class TestTrimEditMarkers:
    """Tests for trimming staging files in place."""

    def test_changed(self, tmp_path):
        path = write(tmp_path, "### Editing x\n#START#\n\nnew=1\n\n#END#\n\n### y\n# a")

        assert trim_edit_markers(path, START, END) == TrimResult.CHANGED
        assert open(path).read() == "new=1\n"

    def test_unchanged_leaves_file_untouched(self, tmp_path):
        path = write(tmp_path, "key=value\n")

        assert trim_edit_markers(path) == TrimResult.UNCHANGED
        assert open(path).read() == "key=value\n"

    def test_trailing_newline_normalized(self, tmp_path):
        path = write(tmp_path, "key=value\n\n\n")

        assert trim_edit_markers(path) == TrimResult.CHANGED
        assert open(path).read() == "key=value\n"

    def test_whitespace_only_is_emptied(self, tmp_path):
        path = write(tmp_path, "### Editing x\n#START#\n\n  \n\t\n#END#\n")
        assert trim_edit_markers(path, START, END) == TrimResult.EMPTIED

    def test_empty_file_is_emptied(self, tmp_path):
        path = write(tmp_path, "")
        assert trim_edit_markers(path) == TrimResult.EMPTIED

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(TrimError, match="Failed to read temporary file"):
            trim_edit_markers(str(tmp_path / "missing"))

    def test_mismatched_markers_rejected(self, tmp_path):
        path = write(tmp_path, "x\n")
        with pytest.raises(ValueError):
            trim_edit_markers(path, START, None)


@pytest.mark.parametrize(
    "content",
    ["key=value", "[Service]\nExecStart=/bin/true", "a\n\nb"],
)
def test_template_then_trim_restores_content(tmp_path, content):
    """Test that trimming an untouched template gives back the target content."""
    target_file = tmp_path / "app.conf"
    target_file.write_text(content)
    target = EditTarget(path=str(target_file), comment_sources=[])

    staged = StagingWriter().stage(target, START, END)

    assert trim_edit_markers(staged.temp_path, START, END) == TrimResult.CHANGED
    assert open(staged.temp_path).read() == content + "\n"


def test_only_ascii_whitespace_is_trimmed(tmp_path):
    """Test that form feeds and no-break spaces at the edges are kept."""
    assert extract_region("\x0cx\xa0", None, None) == "\x0cx\xa0"
    assert extract_region(" \t\r\n\x0cx\xa0\n", None, None) == "\x0cx\xa0"

    target_file = tmp_path / "app.conf"
    target_file.write_text("x=1\xa0\n\x0c", encoding="utf-8")
    target = EditTarget(path=str(target_file), comment_sources=[])

    staged = StagingWriter().stage(target, START, END)

    assert trim_edit_markers(staged.temp_path, START, END) == TrimResult.CHANGED
    with open(staged.temp_path, encoding="utf-8", newline="") as f:
        assert f.read() == "x=1\xa0\n\x0c\n"
