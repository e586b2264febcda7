"""
macrocheck/checkers.py
══════════════════════

Checker framework that turns directive analysis into diagnostics.

Architecture
────────────

  ┌─────────────────────────────────────────────────────────┐
  │                   CheckerRunner                         │
  │            ┌──────────────────────────┐                 │
  │            │ MacroDefineUndefChecker  │                 │
  │            └────────────┬─────────────┘                 │
  │                         │                               │
  │  ┌──────────────────────▼────────────────────────────┐  │
  │  │              Evidence Collection                  │  │
  │  │   source_tree  →  collector  →  analyzer          │  │
  │  └──────────────────────┬────────────────────────────┘  │
  │                         │                               │
  │  ┌──────────────────────▼────────────────────────────┐  │
  │  │           SuppressionManager                      │  │
  │  │          file-level  │  global                    │  │
  │  └──────────────────────┬────────────────────────────┘  │
  │                         │                               │
  │  ┌──────────────────────▼────────────────────────────┐  │
  │  │        Diagnostic Formatter (JSON / text)         │  │
  │  └───────────────────────────────────────────────────┘  │
  └─────────────────────────────────────────────────────────┘

Each Checker follows a four-phase lifecycle:

  1. **configure()**        — take the whitelist snapshot
  2. **collect_evidence()** — walk the file's tree
  3. **diagnose()**         — turn evidence into Diagnostics
  4. **report()**           — emit Diagnostics (filtered by suppressions)

The runner creates a fresh checker instance for every file, so no
per-file state ever leaks into the next one.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum, auto
from fnmatch import fnmatch
from pathlib import Path
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    Type,
    Union,
)

from macrocheck.analyzer import DISABLED_WHITELIST, WhitelistSnapshot, analyze
from macrocheck.collector import DirectiveRecord, collect_directives
from macrocheck.fixes import AddUndefFix
from macrocheck.messages import message
from macrocheck.source_tree import dump_file_trees, read_source_tree

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    """cppcheck-compatible severity levels."""
    ERROR = "error"
    WARNING = "warning"
    STYLE = "style"
    PERFORMANCE = "performance"
    PORTABILITY = "portability"
    INFORMATION = "information"


class Confidence(Enum):
    """
    How certain we are that the diagnostic is a true positive.

    HIGH   — the pattern is matched exactly
    MEDIUM — matched, but the surrounding context may change the verdict
    LOW    — heuristic
    """
    HIGH = auto()
    MEDIUM = auto()
    LOW = auto()


@dataclass(frozen=True)
class SourceLocation:
    """A specific point in source code."""
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single diagnostic finding.

    Attributes
    ----------
    error_id     : Unique identifier (e.g., "macroDefineWithoutUndef")
    message      : Human-readable description
    severity     : DiagnosticSeverity
    location     : Primary source location
    confidence   : Confidence level
    checker_name : Name of the checker that produced this
    addon        : Addon name for cppcheck protocol
    extra        : Additional context string
    fixes        : Fix offerings attached to this diagnostic
    evidence     : Machine-readable evidence dict for downstream tooling
    """
    error_id: str
    message: str
    severity: DiagnosticSeverity
    location: SourceLocation
    confidence: Confidence = Confidence.MEDIUM
    checker_name: str = ""
    addon: str = "macrocheck"
    extra: str = ""
    fixes: Tuple[AddUndefFix, ...] = ()
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_cppcheck_json(self) -> Dict[str, Any]:
        """Serialize to cppcheck's JSON addon output format."""
        return {
            "file": self.location.file,
            "linenr": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "message": self.message,
            "addon": self.addon,
            "errorId": self.error_id,
            "extra": self.extra,
        }

    def to_json_str(self) -> str:
        """Single-line JSON string for cppcheck addon stdout."""
        return json.dumps(self.to_cppcheck_json(), ensure_ascii=False)

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message."""
        sev = self.severity.value
        return f"{self.location}: {sev}: {self.message} [{self.error_id}]"


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

class SuppressionManager:
    """
    Manages diagnostic suppressions.

    Sources:
      1. File-level suppressions (error id + path or fnmatch pattern)
      2. Global suppressions (command-line)

    ``"*"`` as an error id suppresses everything in its scope.

    Usage
    -----
    >>> sm = SuppressionManager()
    >>> sm.add_file_suppression("macroDefineWithoutUndef", "third_party/*")
    >>> sm.add_global_suppression("checkerInternalError")
    >>> if not sm.is_suppressed(diagnostic):
    ...     emit(diagnostic)
    """

    def __init__(self) -> None:
        # file pattern → set of error_ids
        self._file_level: Dict[str, Set[str]] = defaultdict(set)
        # globally suppressed error_ids
        self._global: Set[str] = set()

    def add_file_suppression(self, error_id: str, file_pattern: str) -> None:
        """Suppress ``error_id`` in files matching ``file_pattern``."""
        self._file_level[file_pattern].add(error_id)

    def add_global_suppression(self, error_id: str) -> None:
        """Globally suppress ``error_id``."""
        self._global.add(error_id)

    def is_suppressed(self, diag: Diagnostic) -> bool:
        """Check whether a diagnostic should be suppressed."""
        eid = diag.error_id

        if eid in self._global or "*" in self._global:
            return True

        file = diag.location.file
        for pattern, ids in self._file_level.items():
            if eid in ids or "*" in ids:
                if pattern == file or file.endswith(pattern):
                    return True
                if fnmatch(file, pattern):
                    return True

        return False

    def filter_diagnostics(
        self, diagnostics: Iterable[Diagnostic]
    ) -> List[Diagnostic]:
        """Return only non-suppressed diagnostics."""
        return [d for d in diagnostics if not self.is_suppressed(d)]


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — CHECKER BASE CLASS
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class SourceUnit:
    """One file to check: its path and the tree the collector walks."""
    path: str
    tree: Any

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> SourceUnit:
        return cls(path=str(path), tree=read_source_tree(path))


def units_from_configuration(cfg: Any) -> List[SourceUnit]:
    """One unit per file that has directives in a cppcheck configuration."""
    return [SourceUnit(path=root.file, tree=root) for root in dump_file_trees(cfg)]


@dataclass
class CheckerContext:
    """
    Context passed to every checker for one file.

    Attributes
    ----------
    unit         : SourceUnit being checked
    whitelist    : WhitelistSnapshot taken before the run
    suppressions : SuppressionManager
    stats        : mutable dict for timing / counting statistics
    """
    unit: SourceUnit
    whitelist: WhitelistSnapshot = DISABLED_WHITELIST
    suppressions: SuppressionManager = field(default_factory=SuppressionManager)
    stats: Dict[str, Any] = field(default_factory=dict)


class Checker(ABC):
    """
    Abstract base class for all checkers.

    Subclass Contract
    ─────────────────
      - Override ``name``, ``description``, ``error_ids``
      - Implement ``collect_evidence()`` and ``diagnose()``
      - Optionally override ``configure()`` for custom setup
    """

    name: ClassVar[str] = "base-checker"
    short_name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    error_ids: ClassVar[FrozenSet[str]] = frozenset()
    default_severity: ClassVar[DiagnosticSeverity] = DiagnosticSeverity.WARNING
    enabled_by_default: ClassVar[bool] = True

    def __init__(self) -> None:
        self._diagnostics: List[Diagnostic] = []

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def configure(self, ctx: CheckerContext) -> None:
        """Called before evidence collection.  Default does nothing."""
        pass

    @abstractmethod
    def collect_evidence(self, ctx: CheckerContext) -> None:
        """Walk the unit and store intermediate results."""
        ...

    @abstractmethod
    def diagnose(self, ctx: CheckerContext) -> None:
        """Correlate evidence into Diagnostic objects."""
        ...

    def report(self, ctx: CheckerContext) -> List[Diagnostic]:
        """Return final diagnostics, filtered by suppressions."""
        return ctx.suppressions.filter_diagnostics(self._diagnostics)

    def _emit(
        self,
        error_id: str,
        message: str,
        location: SourceLocation,
        severity: Optional[DiagnosticSeverity] = None,
        confidence: Confidence = Confidence.MEDIUM,
        extra: str = "",
        fixes: Tuple[AddUndefFix, ...] = (),
        evidence: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Helper to create and store a diagnostic."""
        self._diagnostics.append(Diagnostic(
            error_id=error_id,
            message=message,
            severity=severity or self.default_severity,
            location=location,
            confidence=confidence,
            checker_name=self.name,
            extra=extra,
            fixes=fixes,
            evidence=evidence or {},
        ))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — CHECKER REGISTRY
# ═════════════════════════════════════════════════════════════════════════

class CheckerRegistry:
    """
    Registry of available checkers with discovery and filtering.

    Usage
    -----
    >>> registry = CheckerRegistry()
    >>> registry.register(MacroDefineUndefChecker)
    >>> checkers = registry.get_enabled()
    """

    def __init__(self) -> None:
        self._checkers: Dict[str, Type[Checker]] = {}
        self._disabled: Set[str] = set()

    def register(self, checker_cls: Type[Checker]) -> None:
        """Register a checker class; disabled up front unless enabled by default."""
        self._checkers[checker_cls.name] = checker_cls
        if not checker_cls.enabled_by_default:
            self._disabled.add(checker_cls.name)

    def disable(self, name: str) -> None:
        self._disabled.add(name)

    def enable(self, name: str) -> None:
        self._disabled.discard(name)

    def get_all(self) -> List[Type[Checker]]:
        return list(self._checkers.values())

    def get_enabled(self) -> List[Type[Checker]]:
        return [
            cls for name, cls in self._checkers.items()
            if name not in self._disabled
        ]

    def get_by_name(self, name: str) -> Optional[Type[Checker]]:
        """Look a checker up by ``name`` or ``short_name``."""
        cls = self._checkers.get(name)
        if cls is not None:
            return cls
        for candidate in self._checkers.values():
            if candidate.short_name and candidate.short_name == name:
                return candidate
        return None

    def filter_by_error_id(self, error_id: str) -> List[Type[Checker]]:
        return [
            cls for cls in self._checkers.values()
            if error_id in cls.error_ids
        ]

    @property
    def names(self) -> List[str]:
        return sorted(self._checkers.keys())


# ═════════════════════════════════════════════════════════════════════════
#  PART 5 — LOCATION HELPERS
# ═════════════════════════════════════════════════════════════════════════

def _tok_file(tok: Any) -> str:
    return getattr(tok, "file", "") or ""


def _tok_line(tok: Any) -> int:
    return getattr(tok, "linenr", 0) or 0


def _tok_col(tok: Any) -> int:
    return getattr(tok, "column", 0) or 0


def node_location(node: Any, file: str = "") -> SourceLocation:
    """Resolve a tree node to a 1-based source location.

    Parsimonious nodes carry an offset into ``full_text``; cppcheck
    directives carry ``file``/``linenr``/``column`` attributes.
    """
    full_text = getattr(node, "full_text", None)
    start = getattr(node, "start", None)
    if isinstance(full_text, str) and isinstance(start, int):
        line = full_text.count("\n", 0, start) + 1
        column = start - full_text.rfind("\n", 0, start)
        return SourceLocation(file=file, line=line, column=column)
    return SourceLocation(
        file=_tok_file(node) or file, line=_tok_line(node), column=_tok_col(node)
    )


# ═════════════════════════════════════════════════════════════════════════
#  PART 6 — CHECKERS
# ═════════════════════════════════════════════════════════════════════════

class MacroDefineUndefChecker(Checker):
    """
    Reports macros that are ``#define``d but never ``#undef``d in the same
    file.

    Whitelisted names (when the whitelist is enabled) are skipped.  Each
    diagnostic carries an :class:`AddUndefFix` that appends the missing
    ``#undef`` to the end of the file.
    """

    name = "macro-define-undef"
    short_name = "MacroDefineUndef"
    description = "Macro defined with #define but never #undef'd"
    error_ids = frozenset({"macroDefineWithoutUndef"})
    default_severity = DiagnosticSeverity.STYLE
    enabled_by_default = True

    def __init__(self) -> None:
        super().__init__()
        self._whitelist: WhitelistSnapshot = DISABLED_WHITELIST
        self._records: List[DirectiveRecord] = []

    @classmethod
    def display_name(cls) -> str:
        return message("inspection.name")

    @classmethod
    def group_display_name(cls) -> str:
        return message("inspection.group")

    def configure(self, ctx: CheckerContext) -> None:
        self._whitelist = ctx.whitelist

    def collect_evidence(self, ctx: CheckerContext) -> None:
        self._records = collect_directives(ctx.unit.tree)
        ctx.stats[f"{self.name}_directives"] = len(self._records)

    def diagnose(self, ctx: CheckerContext) -> None:
        for finding in analyze(self._records, self._whitelist):
            fix = AddUndefFix(finding.macro_name)
            self._emit(
                error_id="macroDefineWithoutUndef",
                message=message("inspection.problem.description", finding.macro_name),
                location=node_location(finding.location, ctx.unit.path),
                confidence=Confidence.HIGH,
                extra=fix.name,
                fixes=(fix,),
                evidence={"macro": finding.macro_name},
            )


# ═════════════════════════════════════════════════════════════════════════
#  PART 7 — CHECKER RUNNER
# ═════════════════════════════════════════════════════════════════════════

# Default registry with all built-in checkers
_DEFAULT_REGISTRY = CheckerRegistry()
_DEFAULT_REGISTRY.register(MacroDefineUndefChecker)


def default_registry() -> CheckerRegistry:
    return _DEFAULT_REGISTRY


@dataclass
class CheckerRunResults:
    """
    Aggregate results from running a suite of checkers.

    Attributes
    ----------
    diagnostics            : All diagnostics from all checkers
    diagnostics_by_checker : Diagnostics grouped by checker name
    stats                  : Timing and counting statistics
    checker_names          : Names of checkers that were run
    files                  : Paths of the units that were checked
    """
    diagnostics: List[Diagnostic] = field(default_factory=list)
    diagnostics_by_checker: Dict[str, List[Diagnostic]] = field(
        default_factory=lambda: defaultdict(list)
    )
    stats: Dict[str, Any] = field(default_factory=dict)
    checker_names: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.by_severity(DiagnosticSeverity.ERROR))

    @property
    def warning_count(self) -> int:
        return len(self.by_severity(DiagnosticSeverity.WARNING))

    @property
    def style_count(self) -> int:
        return len(self.by_severity(DiagnosticSeverity.STYLE))

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_severity(self, severity: DiagnosticSeverity) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == severity]

    def by_file(self, file: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.location.file == file]

    def fixable(self) -> Dict[str, List[str]]:
        """Macro names to append per file, in report order."""
        plan: Dict[str, List[str]] = {}
        for diag in self.diagnostics:
            for fix in diag.fixes:
                plan.setdefault(diag.location.file, []).append(fix.macro_name)
        return plan

    def merge(self, partial: CheckerRunResults) -> None:
        """Fold another result set into this one, accumulating timings."""
        self.diagnostics.extend(partial.diagnostics)
        for name, diags in partial.diagnostics_by_checker.items():
            self.diagnostics_by_checker[name].extend(diags)
        for key, val in partial.stats.items():
            if key in self.stats:
                self.stats[key] += val
            else:
                self.stats[key] = val
        for name in partial.checker_names:
            if name not in self.checker_names:
                self.checker_names.append(name)
        self.files.extend(partial.files)

    def to_json_lines(self) -> str:
        """Format all diagnostics as cppcheck JSON addon output."""
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        """Format all diagnostics in GCC-style."""
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Checker run complete: {self.total_count} diagnostics "
            f"in {len(self.files)} file(s) "
            f"({self.error_count} errors, {self.warning_count} warnings, "
            f"{self.style_count} style)",
        ]
        for name in self.checker_names:
            count = len(self.diagnostics_by_checker.get(name, []))
            elapsed = self.stats.get(f"{name}_elapsed_ms", 0)
            lines.append(f"  {name}: {count} findings ({elapsed:.1f}ms)")
        return "\n".join(lines)


class CheckerRunner:
    """
    Runs a suite of checkers against source units.

    Usage
    -----
    >>> runner = CheckerRunner(whitelist=config.snapshot())
    >>> results = runner.run(SourceUnit.from_file("main.c"))
    >>> print(results.summary())

    Parameters for constructor
    ─────────────────────────
    registry    : CheckerRegistry — source of checker classes
    whitelist   : WhitelistSnapshot — read-only whitelist view
    suppressions: SuppressionManager — pre-loaded suppression rules
    """

    def __init__(
        self,
        registry: Optional[CheckerRegistry] = None,
        whitelist: WhitelistSnapshot = DISABLED_WHITELIST,
        suppressions: Optional[SuppressionManager] = None,
    ) -> None:
        self.registry = registry or _DEFAULT_REGISTRY
        self.whitelist = whitelist
        self.suppressions = suppressions or SuppressionManager()

    def _select(self, checkers: Optional[Sequence[str]]) -> List[Type[Checker]]:
        if checkers is None:
            return self.registry.get_enabled()
        selected: List[Type[Checker]] = []
        for name in checkers:
            cls = self.registry.get_by_name(name)
            if cls is None:
                logger.warning("Unknown checker '%s' ignored", name)
                continue
            selected.append(cls)
        return selected

    def run(
        self,
        unit: SourceUnit,
        checkers: Optional[Sequence[str]] = None,
    ) -> CheckerRunResults:
        """
        Run checkers against a single unit.

        Parameters
        ----------
        unit     : SourceUnit
        checkers : list of checker names to run (None = all enabled)
        """
        results = CheckerRunResults(files=[unit.path])
        ctx = CheckerContext(
            unit=unit,
            whitelist=self.whitelist,
            suppressions=self.suppressions,
        )

        for cls in self._select(checkers):
            checker = cls()
            checker_name = cls.name
            results.checker_names.append(checker_name)

            t0 = time.monotonic()
            try:
                checker.configure(ctx)
                checker.collect_evidence(ctx)
                checker.diagnose(ctx)
                diags = checker.report(ctx)
            except Exception as exc:
                # Graceful degradation: report the failure, don't crash
                logger.debug("Checker %s failed on %s", checker_name, unit.path,
                             exc_info=True)
                diags = [Diagnostic(
                    error_id="checkerInternalError",
                    message=f"Checker '{checker_name}' failed: {exc}",
                    severity=DiagnosticSeverity.INFORMATION,
                    location=SourceLocation(file=unit.path),
                    checker_name=checker_name,
                )]
            elapsed_ms = (time.monotonic() - t0) * 1000.0

            results.diagnostics.extend(diags)
            results.diagnostics_by_checker[checker_name] = list(diags)
            results.stats[f"{checker_name}_elapsed_ms"] = elapsed_ms
        results.stats.update(ctx.stats)

        return results

    def run_all(
        self,
        units: Iterable[SourceUnit],
        checkers: Optional[Sequence[str]] = None,
    ) -> CheckerRunResults:
        """Run checkers over several units and combine the results."""
        combined = CheckerRunResults()
        for unit in units:
            combined.merge(self.run(unit, checkers=checkers))
        return combined

    def run_all_configurations(
        self,
        data: Any,
        checkers: Optional[Sequence[str]] = None,
    ) -> CheckerRunResults:
        """
        Run checkers across all configurations in a CppcheckData dump.

        Every configuration repeats the file's directives, so identical
        diagnostics from different configurations are reported once.
        """
        combined = CheckerRunResults()
        seen: Set[Tuple[str, SourceLocation, str]] = set()
        for cfg in getattr(data, "configurations", []):
            partial = self.run_all(units_from_configuration(cfg), checkers=checkers)
            fresh: List[Diagnostic] = []
            for diag in partial.diagnostics:
                key = (diag.error_id, diag.location, diag.message)
                if key in seen:
                    continue
                seen.add(key)
                fresh.append(diag)
            partial.diagnostics = fresh
            for name, diags in list(partial.diagnostics_by_checker.items()):
                partial.diagnostics_by_checker[name] = [d for d in diags if d in fresh]
            partial.files = [f for f in partial.files if f not in combined.files]
            combined.merge(partial)
        return combined


# ═════════════════════════════════════════════════════════════════════════
#  PART 8 — CONVENIENCE ENTRY POINT FOR CPPCHECK ADDONS
# ═════════════════════════════════════════════════════════════════════════

def load_dump(dump_file: Union[str, Path]) -> Any:
    """Parse a ``cppcheck --dump`` file with cppcheck's ``cppcheckdata``.

    Raises ``ImportError`` when cppcheck's addon directory is not on the
    Python path.
    """
    import cppcheckdata  # type: ignore[import-untyped]

    return cppcheckdata.parsedump(str(dump_file))


def run_addon(
    dump_file: str,
    whitelist: WhitelistSnapshot = DISABLED_WHITELIST,
    checkers: Optional[Sequence[str]] = None,
    output: str = "json",
    suppress: Optional[Sequence[str]] = None,
) -> int:
    """
    Run the checker suite as a cppcheck addon entry point.

    Parameters
    ----------
    dump_file : Path to the .dump file from ``cppcheck --dump``
    whitelist : Whitelist snapshot to honour
    checkers  : Checker names to run (None = all)
    output    : "json" for cppcheck protocol, "gcc" for GCC-style
    suppress  : Error IDs to globally suppress

    Returns
    -------
    Exit code (0 = nothing reported, 1 = diagnostics emitted, 2 = setup failure)
    """
    try:
        data = load_dump(dump_file)
    except ImportError:
        sys.stderr.write("ERROR: cppcheckdata module not found\n")
        return 2

    sm = SuppressionManager()
    for eid in suppress or ():
        sm.add_global_suppression(eid)

    runner = CheckerRunner(whitelist=whitelist, suppressions=sm)
    results = runner.run_all_configurations(data, checkers=checkers)

    if output == "json":
        for diag in results.diagnostics:
            sys.stdout.write(diag.to_json_str() + "\n")
    elif output == "gcc":
        for diag in results.diagnostics:
            sys.stdout.write(diag.to_gcc_format() + "\n")
    else:
        sys.stdout.write(results.summary() + "\n")

    return 1 if results.total_count > 0 else 0


# ═════════════════════════════════════════════════════════════════════════
#  PART 9 — MODULE MAIN (addon entry point)
# ═════════════════════════════════════════════════════════════════════════

def _main() -> None:
    """CLI entry point for ``python -m macrocheck.checkers``.

    cppcheck invokes addons as ``<addon> --cli <file.dump>``; ``--cli``
    forces JSON output.
    """
    import argparse

    from macrocheck.config import MacroCheckConfig
    from macrocheck.errors import MacroCheckError

    parser = argparse.ArgumentParser(
        description="macrocheck cppcheck addon",
        prog="macrocheck.checkers",
    )
    parser.add_argument("dump_file", help="Path to .dump file")
    parser.add_argument(
        "--config", default=None,
        help="Whitelist file (default: MacroCheck.json in the current directory)",
    )
    parser.add_argument(
        "--output", choices=["json", "gcc", "summary"],
        default="gcc", help="Output format",
    )
    parser.add_argument("--cli", action="store_true", help="cppcheck addon mode")
    parser.add_argument(
        "--suppress", nargs="*", default=None,
        help="Error IDs to suppress",
    )

    args = parser.parse_args()
    config_path = args.config or MacroCheckConfig.default_path()
    try:
        config = MacroCheckConfig.load(config_path)
    except MacroCheckError as exc:
        sys.stderr.write(exc.to_gcc_format() + "\n")
        sys.exit(2)

    exit_code = run_addon(
        dump_file=args.dump_file,
        whitelist=config.snapshot(),
        output="json" if args.cli else args.output,
        suppress=args.suppress,
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    _main()


# ═════════════════════════════════════════════════════════════════════════
#  PART 10 — PUBLIC API
# ═════════════════════════════════════════════════════════════════════════

__all__ = [
    # Diagnostic model
    "Diagnostic",
    "DiagnosticSeverity",
    "Confidence",
    "SourceLocation",
    # Suppression
    "SuppressionManager",
    # Checker framework
    "SourceUnit",
    "units_from_configuration",
    "Checker",
    "CheckerContext",
    "CheckerRegistry",
    "node_location",
    # Checkers
    "MacroDefineUndefChecker",
    # Runner
    "default_registry",
    "CheckerRunner",
    "CheckerRunResults",
    # Entry point
    "load_dump",
    "run_addon",
]
