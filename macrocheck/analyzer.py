"""
macrocheck/analyzer.py — define/undef pairing analysis.

Given the directive records of one file and a whitelist snapshot, report
every macro that is defined but never undefined anywhere in that file.

Whitelist membership is an exact, case-sensitive string match against the
enabled names as stored, even though the store itself de-duplicates names
case-insensitively.  A whitelist entry ``FOO`` therefore does not cover a
``#define foo``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Set

from macrocheck.collector import DirectiveKind, DirectiveRecord, collect_directives


@dataclass(frozen=True)
class WhitelistSnapshot:
    """Read-only view of the whitelist taken before a run."""
    enable_whitelist: bool = False
    enabled_names: FrozenSet[str] = field(default_factory=frozenset)

    def exempts(self, name: str) -> bool:
        return self.enable_whitelist and name in self.enabled_names


DISABLED_WHITELIST = WhitelistSnapshot()


@dataclass(frozen=True)
class Finding:
    """A macro defined without a matching ``#undef``.

    ``location`` is the node of the define that was kept for the name
    (the last one in the file).
    """
    location: Any
    macro_name: str


def analyze(
    records: Iterable[DirectiveRecord],
    whitelist: WhitelistSnapshot = DISABLED_WHITELIST,
) -> List[Finding]:
    """Pair defines with undefs and return the unmatched, non-exempt defines.

    Position does not matter: an ``#undef`` before the ``#define`` still
    counts as a match.  When a name is defined more than once, the last
    define's location is reported.  Callers must not rely on the order of
    the returned findings.
    """
    defines: Dict[str, Any] = {}
    undefs: Set[str] = set()

    for record in records:
        if record.kind is DirectiveKind.DEFINE:
            defines[record.macro_name] = record.location
        elif record.kind is DirectiveKind.UNDEF:
            undefs.add(record.macro_name)

    findings: List[Finding] = []
    for name, location in defines.items():
        if whitelist.exempts(name):
            continue
        if name not in undefs:
            findings.append(Finding(location=location, macro_name=name))
    return findings


def analyze_file(
    root: Any,
    whitelist: WhitelistSnapshot = DISABLED_WHITELIST,
) -> List[Finding]:
    """Collect the directives under *root* and analyze them in one call."""
    return analyze(collect_directives(root), whitelist)


__all__ = [
    "WhitelistSnapshot",
    "DISABLED_WHITELIST",
    "Finding",
    "analyze",
    "analyze_file",
]
