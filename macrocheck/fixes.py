"""
macrocheck/fixes.py — the "add missing #undef" fix.

A fix is planned as a plain :class:`TextEdit` (append at end of file) and
applied with one write per file.  Bytes that are not valid UTF-8 are
carried through unchanged.  Applying never raises: a file that is
missing or unreadable makes the fix a silent no-op, and a failing
formatter is only logged.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Union

from macrocheck.messages import message

logger = logging.getLogger(__name__)

Reformatter = Callable[[Path], None]


@dataclass(frozen=True)
class TextEdit:
    """Insert ``text`` at character ``offset``."""
    offset: int
    text: str

    def apply(self, content: str) -> str:
        return content[:self.offset] + self.text + content[self.offset:]


def plan_append_undef(content: str, macro_name: str) -> TextEdit:
    """Plan the append of ``#undef <macro_name>`` as the file's last line.

    When *content* is non-empty and lacks a trailing newline, one is
    inserted first so the directive starts its own line.
    """
    lead = "\n" if content and not content.endswith("\n") else ""
    return TextEdit(offset=len(content), text=f"{lead}#undef {macro_name}\n")


@dataclass(frozen=True)
class AddUndefFix:
    """The fix offered with every unmatched-define diagnostic."""
    macro_name: str

    @property
    def name(self) -> str:
        return message("inspection.quickfix.name", self.macro_name)

    @property
    def family_name(self) -> str:
        return message("inspection.quickfix.family")

    def plan(self, content: str) -> TextEdit:
        return plan_append_undef(content, self.macro_name)


def _write_replace(path: Path, content: str) -> None:
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="") as fh:
            fh.write(content)
        shutil.copymode(str(path), tmp)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def apply_fixes(
    path: Union[str, Path],
    macro_names: Iterable[str],
    reformat: Optional[Reformatter] = None,
) -> bool:
    """Append ``#undef`` lines for *macro_names* to *path* in a single write.

    Names are applied in the given order; repeats are collapsed.  Returns
    ``True`` when the file was rewritten.
    """
    p = Path(path)
    names: List[str] = list(dict.fromkeys(macro_names))
    if not names:
        return False

    try:
        with open(p, "r", encoding="utf-8", errors="surrogateescape", newline="") as fh:
            content = fh.read()
    except OSError as exc:
        logger.debug("Fix skipped, %s is not available: %s", p, exc)
        return False

    for name in names:
        content = AddUndefFix(name).plan(content).apply(content)

    try:
        _write_replace(p, content)
    except OSError as exc:
        logger.debug("Fix skipped, %s could not be written: %s", p, exc)
        return False
    logger.info("Added %d #undef line(s) to %s", len(names), p)

    if reformat is not None:
        try:
            reformat(p)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("Reformatting %s failed: %s", p, exc)
    return True


def command_reformatter(command: Union[str, Sequence[str]]) -> Reformatter:
    """Build a reformat hook running ``<command> <path>``.

    >>> fmt = command_reformatter("clang-format -i")
    """
    argv = shlex.split(command) if isinstance(command, str) else list(command)
    if not argv:
        raise ValueError("empty formatter command")

    def _reformat(path: Path) -> None:
        proc = subprocess.run(
            argv + [str(path)],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            universal_newlines=True,
        )
        if proc.returncode != 0:
            raise subprocess.CalledProcessError(
                proc.returncode, proc.args, proc.stdout, proc.stderr
            )
        logger.debug("Reformatted %s with %s", path, argv[0])

    return _reformat


__all__ = [
    "TextEdit",
    "plan_append_undef",
    "AddUndefFix",
    "apply_fixes",
    "command_reformatter",
    "Reformatter",
]
