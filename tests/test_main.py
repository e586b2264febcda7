# tests/test_main.py
"""
Tests for the ``macrocheck`` command line: check, fix and whitelist editing.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from macrocheck import __version__
from macrocheck.checkers import SourceUnit
from macrocheck.config import CONFIG_FILE_NAME, DEFAULT_WHITELIST, MacroCheckConfig
from macrocheck.errors import ErrorCodes, SourceParseError
from macrocheck.main import EXIT_FINDINGS, EXIT_INFRA, EXIT_OK, main

from conftest import MockConfiguration, MockDirective, MockDump


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Run each CLI test from an empty project directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestTopLevel:

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--version"])
        assert info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == EXIT_INFRA
        assert "usage:" in capsys.readouterr().err


class TestCheck:

    def test_clean_file(self, project, write_source, capsys):
        write_source("ok.c", "#define A\n#undef A\n")
        assert main(["check", "ok.c"]) == EXIT_OK
        assert capsys.readouterr().out == ""

    def test_findings_gcc(self, project, write_source, capsys):
        write_source("bad.c", "int x;\n#define FOO 1\n")
        assert main(["check", "bad.c"]) == EXIT_FINDINGS
        assert capsys.readouterr().out == (
            "bad.c:2:1: style: Macro 'FOO' is defined but never undefined "
            "with #undef [macroDefineWithoutUndef]\n"
        )

    def test_json_output(self, project, write_source, capsys):
        write_source("bad.c", "#define FOO 1\n")
        main(["check", "bad.c", "--output", "json"])
        record = json.loads(capsys.readouterr().out)
        assert record["errorId"] == "macroDefineWithoutUndef"
        assert record["extra"] == "Add '#undef FOO' at the end of the file"

    def test_pretty_and_summary_outputs(self, project, write_source, capsys):
        write_source("bad.c", "#define FOO 1\n")
        main(["check", "bad.c", "--output", "pretty"])
        assert "help: Add '#undef FOO'" in capsys.readouterr().out
        main(["check", "bad.c", "--output", "summary"])
        assert "1 diagnostics in 1 file(s)" in capsys.readouterr().out

    def test_directory_walk_respects_extensions(self, project, write_source, capsys):
        write_source("src/a.c", "#define A\n")
        write_source("src/sub/b.hpp", "#define B\n")
        write_source("src/notes.txt", "#define C\n")
        assert main(["check", "src"]) == EXIT_FINDINGS
        out = capsys.readouterr().out
        assert "'A'" in out and "'B'" in out and "'C'" not in out

        main(["check", "src", "--extensions", "txt"])
        out = capsys.readouterr().out
        assert "'C'" in out and "'A'" not in out

    def test_missing_path(self, project, caplog):
        assert main(["check", "nope.c"]) == EXIT_INFRA
        assert "path not found" in caplog.text

    def test_whitelist_file_used(self, project, write_source):
        MacroCheckConfig().save(project / CONFIG_FILE_NAME)
        write_source("dbg.c", "#define DEBUG 1\n")
        assert main(["check", "dbg.c"]) == EXIT_OK

    def test_explicit_config(self, project, write_source):
        cfg = project / "custom.json"
        cfg.write_text(json.dumps({
            "enableWhitelist": True,
            "macros": [{"name": "MINE", "enabled": True}],
        }), encoding="utf-8")
        write_source("m.c", "#define MINE\n")
        assert main(["check", "m.c", "--config", str(cfg)]) == EXIT_OK

    def test_bad_config(self, project, write_source, capsys):
        (project / CONFIG_FILE_NAME).write_text("[", encoding="utf-8")
        write_source("m.c", "")
        assert main(["check", "m.c"]) == EXIT_INFRA
        assert "MCHK-0002" in capsys.readouterr().err

    def test_non_utf8_config(self, project, write_source, capsys):
        (project / CONFIG_FILE_NAME).write_bytes(b'\xff\xfe{"macros": []}')
        write_source("m.c", "")
        assert main(["check", "m.c"]) == EXIT_INFRA
        assert "MCHK-0002" in capsys.readouterr().err

    def test_unreadable_source_fails_run(self, project, write_source, capsys):
        write_source("good.c", "#define A\n#undef A\n")
        write_source("bad.c", "")
        real = SourceUnit.from_file

        def _from_file(path):
            if path.name == "bad.c":
                raise SourceParseError(
                    "cannot read source file", code=ErrorCodes.SOURCE_UNREADABLE, path=path,
                )
            return real(path)

        with patch("macrocheck.main.SourceUnit.from_file", side_effect=_from_file):
            assert main(["check", "good.c", "bad.c"]) == EXIT_INFRA
        assert "MCHK-1000" in capsys.readouterr().err

    def test_suppress(self, project, write_source):
        write_source("bad.c", "#define FOO\n")
        assert main(["check", "bad.c", "--suppress", "macroDefineWithoutUndef"]) == EXIT_OK

    def test_dump_file(self, project, write_source, capsys):
        write_source("main.c.dump", "<dump/>")
        dump = MockDump([MockConfiguration("", [
            MockDirective("#define FROM_DUMP", file="main.c", linenr=4),
        ])])
        with patch("macrocheck.main.load_dump", return_value=dump):
            assert main(["check", "main.c.dump"]) == EXIT_FINDINGS
        assert capsys.readouterr().out.startswith("main.c:4:1: style:")

    def test_dump_without_cppcheckdata(self, project, write_source):
        write_source("main.c.dump", "<dump/>")
        with patch("macrocheck.main.load_dump", side_effect=ImportError("cppcheckdata")):
            assert main(["check", "main.c.dump"]) == EXIT_INFRA


class TestFix:

    def test_fix_appends_undefs(self, project, write_source):
        path = write_source("bad.c", "#define A\n#define B")
        assert main(["check", "bad.c", "--fix"]) == EXIT_OK
        assert path.read_text(encoding="utf-8") == "#define A\n#define B\n#undef A\n#undef B\n"
        assert main(["check", "bad.c"]) == EXIT_OK

    def test_fix_keeps_non_utf8_bytes(self, project):
        path = project / "latin1.c"
        path.write_bytes(b"/* caf\xe9 */\n#define X\n")
        assert main(["check", "latin1.c", "--fix"]) == EXIT_OK
        assert path.read_bytes() == b"/* caf\xe9 */\n#define X\n#undef X\n"

    def test_format_command_run(self, project, write_source):
        write_source("bad.c", "#define A\n")
        reformat = MagicMock()
        with patch("macrocheck.main.command_reformatter", return_value=reformat) as build:
            main(["check", "bad.c", "--fix", "--format-command", "clang-format -i"])
        build.assert_called_once_with("clang-format -i")
        assert reformat.call_count == 1

    def test_unwritable_fix_keeps_findings(self, project, write_source):
        write_source("bad.c", "#define A\n")
        with patch("macrocheck.main.apply_fixes", return_value=False):
            assert main(["check", "bad.c", "--fix"]) == EXIT_FINDINGS


class TestWhitelistCommands:

    def _saved(self, project):
        return MacroCheckConfig.load(project / CONFIG_FILE_NAME)

    def test_list_defaults(self, project, capsys):
        assert main(["whitelist", "list"]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.startswith("Enable whitelist: on\n")
        assert "Macro" in out and "Enabled" in out
        for name in DEFAULT_WHITELIST:
            assert name in out

    def test_list_empty(self, project, capsys):
        (project / CONFIG_FILE_NAME).write_text('{"macros": []}', encoding="utf-8")
        main(["whitelist", "list"])
        assert "No whitelisted macros" in capsys.readouterr().out

    def test_add_then_duplicate(self, project):
        assert main(["whitelist", "add", "MY_FLAG"]) == EXIT_OK
        assert ("MY_FLAG", True) in self._saved(project).get_all_macros()
        assert main(["whitelist", "add", "my_flag"]) == EXIT_FINDINGS

    def test_add_disabled(self, project):
        main(["whitelist", "add", "OFF_FLAG", "--disabled"])
        assert ("OFF_FLAG", False) in self._saved(project).get_all_macros()

    def test_remove_rename_enable_disable(self, project):
        main(["whitelist", "add", "X"])
        assert main(["whitelist", "rename", "X", "Y"]) == EXIT_OK
        assert main(["whitelist", "disable", "Y"]) == EXIT_OK
        assert ("Y", False) in self._saved(project).get_all_macros()
        assert main(["whitelist", "enable", "y"]) == EXIT_OK
        assert ("Y", True) in self._saved(project).get_all_macros()
        assert main(["whitelist", "remove", "Y"]) == EXIT_OK
        assert main(["whitelist", "remove", "Y"]) == EXIT_FINDINGS

    def test_on_off(self, project):
        assert main(["whitelist", "off"]) == EXIT_OK
        assert self._saved(project).is_enable_whitelist() is False
        assert main(["whitelist", "on"]) == EXIT_OK
        assert self._saved(project).is_enable_whitelist() is True

    def test_reset(self, project):
        main(["whitelist", "remove", "DEBUG"])
        main(["whitelist", "off"])
        assert main(["whitelist", "reset"]) == EXIT_OK
        saved = self._saved(project)
        assert [n for n, _ in saved.get_all_macros()] == list(DEFAULT_WHITELIST)
        assert saved.is_enable_whitelist() is True

    def test_config_option(self, project):
        target = project / "conf" / "wl.json"
        main(["whitelist", "add", "ELSEWHERE", "--config", str(target)])
        assert ("ELSEWHERE", True) in MacroCheckConfig.load(target).get_all_macros()
        assert not (project / CONFIG_FILE_NAME).exists()

    def test_missing_action_prints_help(self, project):
        assert main(["whitelist"]) == EXIT_INFRA
