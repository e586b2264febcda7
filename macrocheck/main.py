"""macrocheck/main.py — CLI entry-point for macrocheck.

Usage examples
--------------
    # Check a source tree for macros that are never #undef'd
    python -m macrocheck check src/

    # Check a cppcheck dump (cppcheck's addon directory must be importable)
    python -m macrocheck check build/main.c.dump --output json

    # Append the missing #undef lines, then run clang-format on each file
    python -m macrocheck check src/ --fix --format-command "clang-format -i"

    # Manage the project whitelist (MacroCheck.json)
    python -m macrocheck whitelist list
    python -m macrocheck whitelist add MY_FEATURE_FLAG
    python -m macrocheck whitelist off

Exit codes
----------
    0   No findings (or every finding was fixed); whitelist edit applied.
    1   Findings reported; whitelist edit rejected.
    2   Infrastructure failure (missing path, unreadable source,
        bad config, no cppcheckdata).
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, TextIO

from macrocheck import __version__
from macrocheck.checkers import (
    CheckerRunner,
    CheckerRunResults,
    Diagnostic,
    SourceUnit,
    SuppressionManager,
    load_dump,
)
from macrocheck.config import MacroCheckConfig, WhitelistState
from macrocheck.errors import MacroCheckError, SourceParseError
from macrocheck.fixes import Reformatter, apply_fixes, command_reformatter
from macrocheck.messages import message
from macrocheck.reporter import Reporter
from macrocheck.settings import ENABLED_COLUMN, NAME_COLUMN, MacroCheckConfigurable

_log = logging.getLogger("macrocheck")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_FINDINGS: int = 1
EXIT_INFRA: int = 2

SOURCE_EXTENSIONS: Sequence[str] = (
    ".c", ".h", ".cc", ".cpp", ".cxx", ".hpp", ".hh", ".hxx", ".inl",
)
DUMP_EXTENSION = ".dump"


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``macrocheck`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("macrocheck")
    root.setLevel(level)
    root.handlers[:] = [handler]


def _config_path(args: argparse.Namespace) -> Path:
    return Path(args.config) if args.config else MacroCheckConfig.default_path()


def _normalise_extensions(raw: Sequence[str]) -> List[str]:
    return [ext if ext.startswith(".") else f".{ext}" for ext in raw]


def _expand_paths(raw_paths: Sequence[str], extensions: Sequence[str]) -> List[Path]:
    """Resolve the ``check`` operands into a list of files.

    Directories are walked recursively for files whose suffix is one of
    *extensions* (or ``.dump``); plain files are taken as given.  A
    missing operand aborts with :data:`EXIT_INFRA`.
    """
    wanted = {ext.lower() for ext in extensions} | {DUMP_EXTENSION}
    files: List[Path] = []
    for raw in raw_paths:
        p = Path(raw).expanduser()
        if not p.exists():
            _log.error("path not found: %s", p)
            raise SystemExit(EXIT_INFRA)
        if p.is_dir():
            found = sorted(
                f for f in p.rglob("*")
                if f.is_file() and f.suffix.lower() in wanted
            )
            _log.debug("%d candidate file(s) under %s", len(found), p)
            files.extend(found)
        else:
            files.append(p)
    return files


def _emit_results(results: CheckerRunResults, fmt: str, stream: TextIO) -> None:
    """Write the diagnostics of *results* to *stream* in the chosen format."""
    if fmt == "pretty":
        with Reporter(stream=stream) as rep:
            for diag in results.diagnostics:
                rep.report(diag)
        return
    if fmt == "json":
        text = results.to_json_lines()
    elif fmt == "gcc":
        text = results.to_gcc_format()
    else:
        text = results.summary()
    if text:
        stream.write(text + "\n")


def _apply_all_fixes(
    results: CheckerRunResults, reformat: Optional[Reformatter]
) -> List[Diagnostic]:
    """Apply every fix in *results*; return the diagnostics left unfixed."""
    fixed: Dict[str, bool] = {}
    for file, names in results.fixable().items():
        fixed[file] = apply_fixes(file, names, reformat=reformat)
    remaining = [
        d for d in results.diagnostics
        if not (d.fixes and fixed.get(d.location.file, False))
    ]
    _log.info(
        "Fixed %d file(s); %d diagnostic(s) left",
        sum(1 for ok in fixed.values() if ok), len(remaining),
    )
    return remaining


# ===========================================================================
# Sub-command implementations
# ===========================================================================

# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------

def cmd_check(args: argparse.Namespace) -> int:
    """Check source files and cppcheck dumps for unmatched ``#define``s."""
    config = MacroCheckConfig.load(_config_path(args))

    suppressions = SuppressionManager()
    for eid in args.suppress or ():
        suppressions.add_global_suppression(eid)

    runner = CheckerRunner(whitelist=config.snapshot(), suppressions=suppressions)
    results = CheckerRunResults()
    unreadable: List[Path] = []

    for path in _expand_paths(args.paths, _normalise_extensions(args.extensions)):
        if path.suffix.lower() == DUMP_EXTENSION:
            try:
                data = load_dump(path)
            except ImportError:
                _log.error(
                    "cppcheckdata module not found; add cppcheck's addon "
                    "directory to PYTHONPATH to read %s", path,
                )
                return EXIT_INFRA
            results.merge(runner.run_all_configurations(data))
            continue
        try:
            unit = SourceUnit.from_file(path)
        except SourceParseError as exc:
            _log.error("%s", exc)
            unreadable.append(path)
            continue
        results.merge(runner.run(unit))

    _log.info("Checked %d file(s)", len(results.files))
    _emit_results(results, args.output, sys.stdout)

    remaining = results.diagnostics
    if args.fix:
        reformat = command_reformatter(args.format_command) if args.format_command else None
        remaining = _apply_all_fixes(results, reformat)

    if unreadable:
        _log.error("%d file(s) could not be checked", len(unreadable))
        return EXIT_INFRA
    return EXIT_FINDINGS if remaining else EXIT_OK


# ---------------------------------------------------------------------------
# whitelist
# ---------------------------------------------------------------------------

def cmd_whitelist_list(args: argparse.Namespace) -> int:
    """Print the whitelist as a two-column table."""
    settings = MacroCheckConfigurable(MacroCheckConfig.load(_config_path(args)))
    table = settings.table
    state = "on" if settings.enable_whitelist else "off"
    sys.stdout.write(f"{message('config.whitelist.enable')}: {state}\n")

    if table.row_count == 0:
        sys.stdout.write(table.empty_text() + "\n")
        return EXIT_OK

    name_header = table.column_name(NAME_COLUMN)
    names = [table.get_value_at(row, NAME_COLUMN) for row in range(table.row_count)]
    width = max(len(name_header), *(len(n) for n in names))
    sys.stdout.write(f"{name_header:<{width}}  {table.column_name(ENABLED_COLUMN)}\n")
    for row, name in enumerate(names):
        mark = "[x]" if table.get_value_at(row, ENABLED_COLUMN) else "[ ]"
        sys.stdout.write(f"{name:<{width}}  {mark}\n")
    return EXIT_OK


def _edit_whitelist(
    args: argparse.Namespace,
    edit: Callable[[MacroCheckConfig], bool],
    done: str,
) -> int:
    """Load the store, run *edit*, and save when it reports a change."""
    path = _config_path(args)
    config = MacroCheckConfig.load(path)
    if not edit(config):
        _log.error("whitelist unchanged: %s", done)
        return EXIT_FINDINGS
    config.save(path)
    _log.info("%s (%s)", done, path)
    return EXIT_OK


def cmd_whitelist_add(args: argparse.Namespace) -> int:
    return _edit_whitelist(
        args,
        lambda c: c.add_macro(args.name, enabled=not args.disabled),
        f"add '{args.name}'",
    )


def cmd_whitelist_remove(args: argparse.Namespace) -> int:
    return _edit_whitelist(
        args, lambda c: c.remove_macro(args.name), f"remove '{args.name}'"
    )


def cmd_whitelist_rename(args: argparse.Namespace) -> int:
    return _edit_whitelist(
        args,
        lambda c: c.rename_macro(args.old, args.new),
        f"rename '{args.old}' to '{args.new}'",
    )


def cmd_whitelist_enable(args: argparse.Namespace) -> int:
    return _edit_whitelist(
        args, lambda c: c.set_macro_enabled(args.name, True), f"enable '{args.name}'"
    )


def cmd_whitelist_disable(args: argparse.Namespace) -> int:
    return _edit_whitelist(
        args, lambda c: c.set_macro_enabled(args.name, False), f"disable '{args.name}'"
    )


def _switch(enabled: bool) -> Callable[[MacroCheckConfig], bool]:
    def _apply(config: MacroCheckConfig) -> bool:
        settings = MacroCheckConfigurable(config)
        settings.enable_whitelist = enabled
        if settings.is_modified():
            settings.apply()
        return True
    return _apply


def cmd_whitelist_on(args: argparse.Namespace) -> int:
    return _edit_whitelist(args, _switch(True), "whitelist on")


def cmd_whitelist_off(args: argparse.Namespace) -> int:
    return _edit_whitelist(args, _switch(False), "whitelist off")


def cmd_whitelist_reset(args: argparse.Namespace) -> int:
    def _reset(config: MacroCheckConfig) -> bool:
        config.load_state(WhitelistState())
        return True
    return _edit_whitelist(args, _reset, "whitelist reset to defaults")


# ===========================================================================
# Argument parser construction
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser with all sub-commands."""
    parser = argparse.ArgumentParser(
        prog="macrocheck",
        description="Find C/C++ macros that are #define'd but never #undef'd.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              macrocheck check src/ include/
              macrocheck check build/main.c.dump --output json
              macrocheck check src/ --fix --format-command "clang-format -i"
              macrocheck whitelist add MY_FEATURE_FLAG
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    def _add_config_arg(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--config",
            default=None,
            metavar="FILE",
            help="Whitelist file (default: ./MacroCheck.json).",
        )

    # --- check -------------------------------------------------------------
    p_check = subparsers.add_parser(
        "check",
        help="Report macros that are never #undef'd.",
        description=(
            "Scan C/C++ sources (directories are walked recursively) or "
            "cppcheck .dump files and report every #define whose macro is "
            "never #undef'd in the same file."
        ),
    )
    p_check.add_argument(
        "paths",
        nargs="+",
        metavar="PATH",
        help="Source files, directories or .dump files.",
    )
    _add_config_arg(p_check)
    p_check.add_argument(
        "-f", "--output",
        choices=["json", "gcc", "pretty", "summary"],
        default="gcc",
        help="Output format (default: gcc).",
    )
    p_check.add_argument(
        "--suppress",
        nargs="*",
        default=None,
        metavar="ID",
        help="Error IDs to suppress.",
    )
    p_check.add_argument(
        "--extensions",
        nargs="+",
        default=list(SOURCE_EXTENSIONS),
        metavar="EXT",
        help="File suffixes picked up when walking directories.",
    )
    g_fix = p_check.add_argument_group("fixing")
    g_fix.add_argument(
        "--fix",
        action="store_true",
        help="Append the missing #undef lines to each reported file.",
    )
    g_fix.add_argument(
        "--format-command",
        default=None,
        metavar="CMD",
        help='Formatter run on each fixed file, e.g. "clang-format -i".',
    )
    p_check.set_defaults(func=cmd_check)

    # --- whitelist ---------------------------------------------------------
    p_wl = subparsers.add_parser(
        "whitelist",
        help="Show or edit the macro whitelist.",
        description="Show or edit the project's MacroCheck.json whitelist.",
    )
    wl_sub = p_wl.add_subparsers(
        dest="action",
        title="actions",
        metavar="<action>",
    )

    p_list = wl_sub.add_parser("list", help="Print the whitelist.")
    _add_config_arg(p_list)
    p_list.set_defaults(func=cmd_whitelist_list)

    p_add = wl_sub.add_parser("add", help="Add a macro name.")
    p_add.add_argument("name", metavar="NAME")
    p_add.add_argument(
        "--disabled",
        action="store_true",
        help="Add the entry unchecked.",
    )
    _add_config_arg(p_add)
    p_add.set_defaults(func=cmd_whitelist_add)

    p_remove = wl_sub.add_parser("remove", help="Remove a macro name.")
    p_remove.add_argument("name", metavar="NAME")
    _add_config_arg(p_remove)
    p_remove.set_defaults(func=cmd_whitelist_remove)

    p_rename = wl_sub.add_parser("rename", help="Rename a macro entry.")
    p_rename.add_argument("old", metavar="OLD")
    p_rename.add_argument("new", metavar="NEW")
    _add_config_arg(p_rename)
    p_rename.set_defaults(func=cmd_whitelist_rename)

    p_enable = wl_sub.add_parser("enable", help="Check a macro entry.")
    p_enable.add_argument("name", metavar="NAME")
    _add_config_arg(p_enable)
    p_enable.set_defaults(func=cmd_whitelist_enable)

    p_disable = wl_sub.add_parser("disable", help="Uncheck a macro entry.")
    p_disable.add_argument("name", metavar="NAME")
    _add_config_arg(p_disable)
    p_disable.set_defaults(func=cmd_whitelist_disable)

    p_on = wl_sub.add_parser("on", help="Honour the whitelist.")
    _add_config_arg(p_on)
    p_on.set_defaults(func=cmd_whitelist_on)

    p_off = wl_sub.add_parser("off", help="Ignore the whitelist.")
    _add_config_arg(p_off)
    p_off.set_defaults(func=cmd_whitelist_off)

    p_reset = wl_sub.add_parser("reset", help="Restore the default whitelist.")
    _add_config_arg(p_reset)
    p_reset.set_defaults(func=cmd_whitelist_reset)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the macrocheck CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    # No subcommand (or whitelist without an action) → print help.
    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except MacroCheckError as exc:
        sys.stderr.write(exc.to_gcc_format() + "\n")
        return EXIT_INFRA
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())
