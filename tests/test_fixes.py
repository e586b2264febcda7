# tests/test_fixes.py
"""
Tests for the "add missing #undef" fix: planning, applying and reformatting.
"""

import logging
import os
import subprocess
import sys
from unittest.mock import MagicMock, patch

import pytest

from macrocheck.fixes import (
    AddUndefFix,
    TextEdit,
    apply_fixes,
    command_reformatter,
    plan_append_undef,
)


class TestPlan:

    def test_appends_after_trailing_newline(self):
        content = "int x;\n"
        assert plan_append_undef(content, "BAR").apply(content) == "int x;\n#undef BAR\n"

    def test_inserts_newline_when_missing(self):
        content = "int x;"
        assert plan_append_undef(content, "BAR").apply(content) == "int x;\n#undef BAR\n"

    def test_empty_file(self):
        assert plan_append_undef("", "BAR").apply("") == "#undef BAR\n"

    def test_edit_offset_is_end_of_file(self):
        assert plan_append_undef("abc\n", "X") == TextEdit(offset=4, text="#undef X\n")

    def test_text_edit_inserts_in_middle(self):
        assert TextEdit(offset=1, text="-").apply("ab") == "a-b"


class TestAddUndefFix:

    def test_names(self):
        fix = AddUndefFix("FOO")
        assert fix.name == "Add '#undef FOO' at the end of the file"
        assert fix.family_name == "Add missing #undef"

    def test_plan_uses_macro_name(self):
        assert AddUndefFix("FOO").plan("").text == "#undef FOO\n"


class TestApplyFixes:

    def test_single_write_for_several_names(self, write_source):
        path = write_source("a.c", "#define A\n#define B")
        def _write(p, content):
            p.write_text(content, encoding="utf-8")

        with patch("macrocheck.fixes._write_replace", side_effect=_write) as writer:
            assert apply_fixes(path, ["A", "B"]) is True
        assert writer.call_count == 1
        assert path.read_text(encoding="utf-8") == "#define A\n#define B\n#undef A\n#undef B\n"

    def test_repeated_names_collapse(self, write_source):
        path = write_source("a.c", "#define A\n")
        apply_fixes(path, ["A", "A"])
        assert path.read_text(encoding="utf-8") == "#define A\n#undef A\n"

    def test_crlf_content_left_alone(self, write_source):
        path = write_source("a.c", "#define A\r\n")
        apply_fixes(path, ["A"])
        with open(path, "r", encoding="utf-8", newline="") as fh:
            assert fh.read() == "#define A\r\n#undef A\n"

    def test_missing_file_is_noop(self, tmp_path):
        assert apply_fixes(tmp_path / "gone.c", ["A"]) is False
        assert not (tmp_path / "gone.c").exists()

    def test_no_names_is_noop(self, write_source):
        path = write_source("a.c", "x")
        assert apply_fixes(path, []) is False
        assert path.read_text(encoding="utf-8") == "x"

    def test_non_utf8_bytes_preserved(self, tmp_path):
        path = tmp_path / "latin1.c"
        path.write_bytes(b"/* caf\xe9 */\n#define X\n")
        assert apply_fixes(path, ["X"]) is True
        assert path.read_bytes() == b"/* caf\xe9 */\n#define X\n#undef X\n"

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_mode_preserved(self, write_source):
        path = write_source("a.c", "#define A\n")
        os.chmod(path, 0o640)
        apply_fixes(path, ["A"])
        assert (os.stat(path).st_mode & 0o777) == 0o640

    def test_no_temp_file_left(self, write_source, tmp_path):
        path = write_source("a.c", "#define A\n")
        apply_fixes(path, ["A"])
        assert sorted(p.name for p in tmp_path.iterdir()) == ["a.c"]

    def test_write_failure_returns_false(self, write_source):
        path = write_source("a.c", "#define A\n")
        with patch("macrocheck.fixes._write_replace", side_effect=PermissionError("ro")):
            assert apply_fixes(path, ["A"]) is False
        assert path.read_text(encoding="utf-8") == "#define A\n"

    def test_reformat_called_after_write(self, write_source):
        path = write_source("a.c", "#define A\n")
        seen = []
        apply_fixes(path, ["A"], reformat=lambda p: seen.append(p.read_text(encoding="utf-8")))
        assert seen == ["#define A\n#undef A\n"]

    def test_reformat_failure_is_logged(self, write_source, caplog):
        path = write_source("a.c", "#define A\n")
        failing = MagicMock(side_effect=subprocess.CalledProcessError(1, ["fmt"]))
        with caplog.at_level(logging.WARNING, logger="macrocheck.fixes"):
            assert apply_fixes(path, ["A"], reformat=failing) is True
        assert "Reformatting" in caplog.text
        assert path.read_text(encoding="utf-8") == "#define A\n#undef A\n"


class TestCommandReformatter:

    def test_runs_command_with_path(self, tmp_path):
        target = tmp_path / "a.c"
        done = subprocess.CompletedProcess(["clang-format", "-i", str(target)], 0, "", "")
        with patch("macrocheck.fixes.subprocess.run", return_value=done) as run:
            command_reformatter("clang-format -i")(target)
        assert run.call_args[0][0] == ["clang-format", "-i", str(target)]

    def test_nonzero_exit_raises(self, tmp_path):
        done = subprocess.CompletedProcess(["fmt"], 3, "", "boom")
        with patch("macrocheck.fixes.subprocess.run", return_value=done):
            with pytest.raises(subprocess.CalledProcessError):
                command_reformatter(["fmt"])(tmp_path / "a.c")

    def test_empty_command_rejected(self):
        with pytest.raises(ValueError):
            command_reformatter("   ")
