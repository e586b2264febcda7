# macrocheck/errors.py
"""
Error types for the macrocheck tool-suite.

Error Hierarchy
───────────────
  MacroCheckError (base)
  ├── ConfigError        - whitelist file unreadable / malformed
  └── SourceParseError   - a source file could not be turned into a tree

Error Codes
───────────
Each error carries a stable code ``MCHK-NNNN``:
  - 0001-0999: configuration errors
  - 1000-1999: source / parse errors
  - 9000-9999: internal errors

Analysis itself never raises: malformed directives are skipped and a
failing checker is turned into an information diagnostic by the runner.
These exceptions only cover the edges (files in, files out).
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class ErrorCode:
    """A structured ``PREFIX-NNNN`` error code."""

    __slots__ = ("prefix", "number", "title")

    def __init__(self, prefix: str, number: int, title: str) -> None:
        self.prefix = prefix
        self.number = number
        self.title = title

    @property
    def code(self) -> str:
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.title!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ErrorCode):
            return NotImplemented
        return self.code == other.code

    def __hash__(self) -> int:
        return hash(self.code)


class ErrorCodes:
    """Predefined error codes."""

    CONFIG_UNREADABLE = ErrorCode("MCHK", 1, "configuration file unreadable")
    CONFIG_MALFORMED = ErrorCode("MCHK", 2, "configuration file malformed")
    CONFIG_UNWRITABLE = ErrorCode("MCHK", 3, "configuration file unwritable")

    SOURCE_UNREADABLE = ErrorCode("MCHK", 1000, "source file unreadable")
    SOURCE_PARSE_FAILED = ErrorCode("MCHK", 1001, "source file could not be parsed")

    INTERNAL_ERROR = ErrorCode("MCHK", 9000, "internal error")


class MacroCheckError(Exception):
    """
    Base exception for all macrocheck errors.

    Carries an :class:`ErrorCode`, the offending path (if any) and an
    optional hint for the user.
    """

    default_code: ErrorCode = ErrorCodes.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        path: Optional[Union[str, Path]] = None,
        hint: str = "",
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.path = str(path) if path is not None else ""
        self.hint = hint
        self.cause = cause

    def to_gcc_format(self) -> str:
        """Format as ``path: error: message [CODE]``."""
        prefix = f"{self.path}: " if self.path else ""
        text = f"{prefix}error: {self.message} [{self.code}]"
        if self.hint:
            text += f"\n  hint: {self.hint}"
        return text

    def __str__(self) -> str:
        return self.to_gcc_format()


class ConfigError(MacroCheckError):
    """The whitelist configuration could not be read, parsed or written."""

    default_code = ErrorCodes.CONFIG_MALFORMED


class SourceParseError(MacroCheckError):
    """A source file could not be read or split into a lexical tree."""

    default_code = ErrorCodes.SOURCE_PARSE_FAILED


__all__ = [
    "ErrorCode",
    "ErrorCodes",
    "MacroCheckError",
    "ConfigError",
    "SourceParseError",
]
