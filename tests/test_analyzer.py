# tests/test_analyzer.py
"""
Tests for define/undef pairing and whitelist exemption.
"""

import pytest

from macrocheck.analyzer import (
    DISABLED_WHITELIST,
    WhitelistSnapshot,
    analyze,
    analyze_file,
)
from macrocheck.collector import collect_directives
from macrocheck.config import MacroCheckConfig, WhitelistState, MacroEntry

from conftest import tree_of


def _names(findings):
    return sorted(f.macro_name for f in findings)


def _whitelist(*names, enabled=True):
    return WhitelistSnapshot(enable_whitelist=enabled, enabled_names=frozenset(names))


class TestPairing:

    def test_single_unmatched_define(self):
        findings = analyze_file(tree_of("#define FOO"))
        assert _names(findings) == ["FOO"]

    @pytest.mark.parametrize("texts", [
        ("#define FOO", "#undef FOO"),
        ("#undef FOO", "#define FOO"),
    ])
    def test_undef_in_either_order_matches(self, texts):
        assert analyze_file(tree_of(*texts)) == []

    def test_function_like_define_pairs_with_bare_undef(self):
        assert analyze_file(tree_of("#define MAX(a, b) ((a) > (b))", "#undef MAX")) == []

    def test_undef_without_define_is_silent(self):
        assert analyze_file(tree_of("#undef NEVER_DEFINED")) == []

    def test_each_unmatched_name_reported_once(self):
        findings = analyze_file(tree_of("#define A", "#define B", "#define C", "#undef B"))
        assert _names(findings) == ["A", "C"]

    def test_repeated_define_reports_last_location(self):
        root = tree_of("#define FOO 1", "int x;", "#define FOO 2")
        (finding,) = analyze_file(root)
        assert finding.macro_name == "FOO"
        assert finding.location is root.children[2]

    def test_names_are_case_sensitive(self):
        assert _names(analyze_file(tree_of("#define foo", "#undef FOO"))) == ["foo"]

    def test_empty_input(self):
        assert analyze([]) == []


class TestWhitelist:

    def test_enabled_whitelist_exempts(self):
        assert analyze_file(tree_of("#define FOO"), _whitelist("FOO")) == []

    def test_disabled_whitelist_is_ignored(self):
        findings = analyze_file(tree_of("#define FOO"), _whitelist("FOO", enabled=False))
        assert _names(findings) == ["FOO"]

    def test_membership_is_case_sensitive(self):
        findings = analyze_file(tree_of("#define foo"), _whitelist("FOO"))
        assert _names(findings) == ["foo"]

    def test_default_snapshot_exempts_nothing(self):
        assert DISABLED_WHITELIST.exempts("DEBUG") is False
        assert _names(analyze_file(tree_of("#define DEBUG"))) == ["DEBUG"]

    def test_disabled_entries_do_not_exempt(self):
        config = MacroCheckConfig(WhitelistState(
            whitelist_macros=[MacroEntry("FOO", False), MacroEntry("BAR", True)],
            enable_whitelist=True,
        ))
        records = collect_directives(tree_of("#define FOO", "#define BAR"))
        assert _names(analyze(records, config.snapshot())) == ["FOO"]

    def test_default_config_exempts_debug_macros(self):
        snapshot = MacroCheckConfig().snapshot()
        records = collect_directives(tree_of("#define NDEBUG", "#define MINE"))
        assert _names(analyze(records, snapshot)) == ["MINE"]
