"""
macrocheck/reporter.py
══════════════════════

Rust-style colourful diagnostic reporter.

Output formats
──────────────
  • Terminal : colourful Rust-style rendering (when the stream is a TTY)
  • Plain    : classic cppcheck one-liners otherwise

Every diagnostic also ends with the cppcheck one-liner:
    [filename:line]: (severity) message [errorId]

Usage
─────
    from macrocheck.reporter import Reporter

    with Reporter() as rep:
        for diag in results.diagnostics:
            rep.report(diag)
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TextIO, Union

from termcolor import colored, cprint

from macrocheck.checkers import Diagnostic, DiagnosticSeverity

_SEVERITY_COLOURS: Dict[DiagnosticSeverity, str] = {
    DiagnosticSeverity.ERROR: "red",
    DiagnosticSeverity.WARNING: "yellow",
    DiagnosticSeverity.STYLE: "cyan",
    DiagnosticSeverity.PERFORMANCE: "magenta",
    DiagnosticSeverity.PORTABILITY: "blue",
    DiagnosticSeverity.INFORMATION: "white",
}


def cppcheck_line(diag: Diagnostic) -> str:
    """Classic one-liner: ``[file:line]: (severity) message [id]``."""
    loc = diag.location
    return f"[{loc.file}:{loc.line}]: ({diag.severity.value}) {diag.message} [{diag.error_id}]"


@dataclass
class ReporterStats:
    """Aggregate counts per severity."""
    error: int = 0
    warning: int = 0
    style: int = 0
    performance: int = 0
    portability: int = 0
    information: int = 0

    def record(self, severity: DiagnosticSeverity) -> None:
        """Increment the counter that corresponds to *severity*."""
        attr = severity.value
        setattr(self, attr, getattr(self, attr) + 1)

    @property
    def total(self) -> int:
        return (
            self.error
            + self.warning
            + self.style
            + self.performance
            + self.portability
            + self.information
        )

    def summary_line(self) -> str:
        parts: List[str] = []
        if self.error:
            parts.append(f"{self.error} error{'s' if self.error != 1 else ''}")
        if self.warning:
            parts.append(f"{self.warning} warning{'s' if self.warning != 1 else ''}")
        if self.style:
            parts.append(f"{self.style} style")
        if self.performance:
            parts.append(f"{self.performance} performance")
        if self.portability:
            parts.append(f"{self.portability} portability")
        if self.information:
            parts.append(f"{self.information} info")
        if not parts:
            return "no diagnostics emitted"
        return "; ".join(parts) + f" ({self.total} total)"


# ═════════════════════════════════════════════════════════════════════════
#  TERMINAL RENDERER  (Rust-style colourful output)
# ═════════════════════════════════════════════════════════════════════════

class _TerminalRenderer:
    """Render diagnostics to a terminal with colours."""

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        self._stream = stream
        self._source_cache: Dict[str, List[str]] = {}

    def render(self, diag: Diagnostic) -> None:
        colour = _SEVERITY_COLOURS[diag.severity]
        lines: List[str] = []

        # ── header: severity[errorId]: message ───────────────────────
        sev_str = colored(
            f"{diag.severity.value}[{diag.error_id}]", colour, attrs=["bold"]
        )
        lines.append(f"{sev_str}: {colored(diag.message, 'white', attrs=['bold'])}")

        # ── primary location ─────────────────────────────────────────
        loc = diag.location
        if loc.file:
            arrow = colored("-->", "blue", attrs=["bold"])
            lines.append(f"  {arrow} {loc}")

        # ── source line with a caret under the directive ─────────────
        src_text = self._source_line(loc.file, loc.line)
        if src_text is not None:
            gutter = str(loc.line)
            pipe = colored("|", "blue", attrs=["bold"])
            lines.append(f" {colored(gutter, 'blue', attrs=['bold'])} {pipe} {src_text}")
            pad = " " * (loc.column - 1) if loc.column > 0 else ""
            width = max(len(src_text.strip()), 1)
            marker = colored("^" * width, colour, attrs=["bold"])
            lines.append(f" {' ' * len(gutter)} {pipe} {pad}{marker}")

        # ── fixes ────────────────────────────────────────────────────
        for fix in diag.fixes:
            prefix = colored("help", "green", attrs=["bold"])
            lines.append(f"  = {prefix}: {fix.name}")

        # ── cppcheck compat line ─────────────────────────────────────
        lines.append(colored(cppcheck_line(diag), attrs=["dark"]))

        lines.append("")  # blank separator
        self._stream.write("\n".join(lines) + "\n")
        self._stream.flush()

    def _source_line(self, filepath: str, line: int) -> Optional[str]:
        """Return source line *line* of *filepath*, or ``None`` if unavailable."""
        if not filepath or line <= 0:
            return None
        source = self._source_cache.get(filepath)
        if source is None:
            try:
                with open(filepath, "r", errors="replace") as fh:
                    source = fh.read().splitlines()
            except OSError:
                source = []
            self._source_cache[filepath] = source
        if line > len(source):
            return None
        return source[line - 1]


# ═════════════════════════════════════════════════════════════════════════
#  PLAIN RENDERER  (for log files / non-TTY)
# ═════════════════════════════════════════════════════════════════════════

class _PlainRenderer:
    """Non-coloured renderer — one cppcheck-compatible line per diagnostic."""

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        self._stream = stream

    def render(self, diag: Diagnostic) -> None:
        self._stream.write(cppcheck_line(diag) + "\n")
        for fix in diag.fixes:
            self._stream.write(f"  help: {fix.name}\n")
        self._stream.flush()


class Reporter:
    """
    Central diagnostic dispatcher.

    Use as a context manager::

        with Reporter() as rep:
            rep.report(diag)
        # finish() is called automatically
    """

    def __init__(
        self,
        stream: TextIO = sys.stderr,
        colour: Optional[bool] = None,
    ) -> None:
        self.stats = ReporterStats()
        self._stream = stream

        use_colour = colour if colour is not None else hasattr(stream, "isatty") and stream.isatty()
        if use_colour:
            self._renderer: Union[_TerminalRenderer, _PlainRenderer] = _TerminalRenderer(stream)
        else:
            self._renderer = _PlainRenderer(stream)

    def __enter__(self) -> Reporter:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.finish()

    def report(self, diag: Diagnostic) -> None:
        """Render *diag* and count it."""
        self.stats.record(diag.severity)
        self._renderer.render(diag)

    def finish(self) -> ReporterStats:
        """Print the summary line and return the final stats."""
        summary = self.stats.summary_line()
        if isinstance(self._renderer, _TerminalRenderer):
            if self.stats.error:
                cprint(f"  ╰─ {summary}", "red", attrs=["bold"], file=self._stream)
            elif self.stats.total:
                cprint(f"  ╰─ {summary}", "yellow", attrs=["bold"], file=self._stream)
            else:
                cprint(f"  ╰─ {summary}", "green", attrs=["bold"], file=self._stream)
        else:
            print(f"  {summary}", file=self._stream)
        return self.stats


__all__ = [
    "cppcheck_line",
    "ReporterStats",
    "Reporter",
]
