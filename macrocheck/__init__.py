"""
macrocheck — define/undef pairing lint for C and C++
====================================================

Reports every macro that a file ``#define``s but never ``#undef``s, and
offers a fix that appends the missing ``#undef`` at the end of the file.
A project whitelist (``MacroCheck.json``) exempts well-known macros.

Core modules
------------
collector
    Walks a file's tree and records each ``#define`` / ``#undef``.
analyzer
    Pairs the records and yields one finding per unmatched define.
fixes
    The "add missing #undef" text edit and its file writer.
config
    The whitelist store and its JSON persistence.
settings
    Headless table model for editing the whitelist.
source_tree
    parsimonious grammar for C sources; cppcheck dump adapter.
checkers
    Checker framework, runner and cppcheck addon entry point.
reporter
    Coloured terminal rendering of diagnostics.

Quick start
-----------
>>> from macrocheck import CheckerRunner, MacroCheckConfig, SourceUnit
>>> config = MacroCheckConfig.for_project(".")
>>> runner = CheckerRunner(whitelist=config.snapshot())
>>> results = runner.run(SourceUnit.from_file("main.c"))
>>> print(results.to_gcc_format())
"""

from __future__ import annotations

import logging
from typing import List

__version__ = "0.1.0"
__author__ = "macrocheck contributors"
__license__ = "MIT"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from macrocheck.analyzer import (  # noqa: E402
    DISABLED_WHITELIST,
    Finding,
    WhitelistSnapshot,
    analyze,
    analyze_file,
)
from macrocheck.checkers import (  # noqa: E402
    CheckerRunner,
    CheckerRunResults,
    Diagnostic,
    DiagnosticSeverity,
    MacroDefineUndefChecker,
    SourceLocation,
    SourceUnit,
    SuppressionManager,
    run_addon,
)
from macrocheck.collector import (  # noqa: E402
    DirectiveKind,
    DirectiveRecord,
    collect_directives,
    extract_macro_name,
)
from macrocheck.config import (  # noqa: E402
    DEFAULT_WHITELIST,
    MacroCheckConfig,
    MacroEntry,
    WhitelistState,
)
from macrocheck.errors import ConfigError, MacroCheckError, SourceParseError  # noqa: E402
from macrocheck.fixes import AddUndefFix, apply_fixes, plan_append_undef  # noqa: E402

__all__: List[str] = [
    "__version__",
    # analysis
    "DirectiveKind",
    "DirectiveRecord",
    "collect_directives",
    "extract_macro_name",
    "Finding",
    "WhitelistSnapshot",
    "DISABLED_WHITELIST",
    "analyze",
    "analyze_file",
    # fixes
    "AddUndefFix",
    "plan_append_undef",
    "apply_fixes",
    # whitelist
    "DEFAULT_WHITELIST",
    "MacroEntry",
    "WhitelistState",
    "MacroCheckConfig",
    # checker framework
    "CheckerRunner",
    "CheckerRunResults",
    "Diagnostic",
    "DiagnosticSeverity",
    "MacroDefineUndefChecker",
    "SourceLocation",
    "SourceUnit",
    "SuppressionManager",
    "run_addon",
    # errors
    "MacroCheckError",
    "ConfigError",
    "SourceParseError",
]
