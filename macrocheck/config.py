"""
macrocheck/config.py — project-scoped whitelist store.

The whitelist lists macro names that are exempt from the define/undef
check.  Names are unique under case-insensitive comparison; every mutation
(load, bulk set, single add / rename) enforces that, keeping the first
occurrence and dropping later ones with a log line.

Persisted as ``MacroCheck.json`` in the project directory::

    {
      "enableWhitelist": true,
      "macros": [
        {"name": "DEBUG", "enabled": true},
        {"name": "NDEBUG", "enabled": false}
      ]
    }
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple, Union

from macrocheck.analyzer import WhitelistSnapshot
from macrocheck.errors import ConfigError, ErrorCodes

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "MacroCheck.json"

DEFAULT_WHITELIST: Tuple[str, ...] = (
    "DEBUG",
    "NDEBUG",
    "_DEBUG",
    "__cplusplus",
    "__FILE__",
    "__LINE__",
    "__DATE__",
    "__TIME__",
    "__STDC__",
    "__STDC_VERSION__",
)


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — STATE
# ═══════════════════════════════════════════════════════════════════

@dataclass
class MacroEntry:
    """A whitelisted macro; two entries are equal when their names match
    case-insensitively."""
    name: str = ""
    enabled: bool = True

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, MacroEntry):
            return NotImplemented
        return self.name.lower() == other.name.lower()

    def __hash__(self) -> int:
        return hash(self.name.lower())


def _default_macros() -> List[MacroEntry]:
    return [MacroEntry(name, True) for name in DEFAULT_WHITELIST]


@dataclass
class WhitelistState:
    whitelist_macros: List[MacroEntry] = field(default_factory=_default_macros)
    enable_whitelist: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enableWhitelist": self.enable_whitelist,
            "macros": [
                {"name": e.name, "enabled": e.enabled}
                for e in self.whitelist_macros
            ],
        }

    @classmethod
    def from_dict(
        cls, raw: Any, source: Optional[Union[str, Path]] = None
    ) -> WhitelistState:
        """Build a state from the persisted record shape.

        Missing fields take their defaults; wrongly typed ones raise
        :class:`ConfigError`.  No de-duplication happens here.
        """
        if not isinstance(raw, dict):
            raise ConfigError(
                "top-level value must be an object",
                code=ErrorCodes.CONFIG_MALFORMED, path=source,
            )
        state = cls()

        if "enableWhitelist" in raw:
            flag = raw["enableWhitelist"]
            if not isinstance(flag, bool):
                raise ConfigError(
                    "'enableWhitelist' must be true or false",
                    code=ErrorCodes.CONFIG_MALFORMED, path=source,
                )
            state.enable_whitelist = flag

        if "macros" in raw:
            macros = raw["macros"]
            if not isinstance(macros, list):
                raise ConfigError(
                    "'macros' must be a list",
                    code=ErrorCodes.CONFIG_MALFORMED, path=source,
                )
            entries: List[MacroEntry] = []
            for idx, item in enumerate(macros):
                if not isinstance(item, dict) or not isinstance(item.get("name"), str):
                    raise ConfigError(
                        f"macros[{idx}] must be an object with a string 'name'",
                        code=ErrorCodes.CONFIG_MALFORMED, path=source,
                    )
                enabled = item.get("enabled", True)
                if not isinstance(enabled, bool):
                    raise ConfigError(
                        f"macros[{idx}].enabled must be true or false",
                        code=ErrorCodes.CONFIG_MALFORMED, path=source,
                    )
                entries.append(MacroEntry(item["name"], enabled))
            state.whitelist_macros = entries
        return state


def _dedupe(pairs: Iterable[Tuple[str, bool]]) -> List[MacroEntry]:
    """Trim names, drop blanks, keep the first entry per lower-cased name."""
    unique: List[MacroEntry] = []
    seen: Set[str] = set()
    for name, enabled in pairs:
        normalized = name.strip()
        if not normalized:
            logger.debug("Blank macro name skipped")
            continue
        key = normalized.lower()
        if key in seen:
            logger.warning("Duplicate macro name found: '%s', skipped.", normalized)
            continue
        seen.add(key)
        unique.append(MacroEntry(normalized, enabled))
    return unique


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — STORE
# ═══════════════════════════════════════════════════════════════════

class MacroCheckConfig:
    """
    Whitelist store for one project.

    Usage
    -----
    >>> config = MacroCheckConfig.load("MacroCheck.json")
    >>> config.add_macro("MY_FLAG")
    True
    >>> config.snapshot().enabled_names >= {"MY_FLAG"}
    True
    >>> config.save("MacroCheck.json")
    """

    def __init__(self, state: Optional[WhitelistState] = None) -> None:
        self._state = WhitelistState()
        if state is not None:
            self.load_state(state)

    # ── state in / out ───────────────────────────────────────────────

    def get_state(self) -> WhitelistState:
        return self._state

    def load_state(self, state: WhitelistState) -> None:
        """Replace the current state, de-duplicating the macro list."""
        macros = _dedupe((e.name, e.enabled) for e in state.whitelist_macros)
        self._state = WhitelistState(
            whitelist_macros=macros,
            enable_whitelist=state.enable_whitelist,
        )

    # ── whole-list access ────────────────────────────────────────────

    def get_enabled_macros(self) -> Set[str]:
        """Names of enabled entries, exactly as stored."""
        return {e.name for e in self._state.whitelist_macros if e.enabled}

    def get_all_macros(self) -> List[Tuple[str, bool]]:
        return [(e.name, e.enabled) for e in self._state.whitelist_macros]

    def set_all_macros(self, macros: Iterable[Tuple[str, bool]]) -> None:
        self._state.whitelist_macros = _dedupe(macros)

    def is_enable_whitelist(self) -> bool:
        return self._state.enable_whitelist

    def set_enable_whitelist(self, enabled: bool) -> None:
        self._state.enable_whitelist = enabled

    def snapshot(self) -> WhitelistSnapshot:
        return WhitelistSnapshot(
            enable_whitelist=self._state.enable_whitelist,
            enabled_names=frozenset(self.get_enabled_macros()),
        )

    # ── single-entry edits ───────────────────────────────────────────

    def _find(self, name: str) -> Optional[MacroEntry]:
        key = name.strip().lower()
        for entry in self._state.whitelist_macros:
            if entry.name.lower() == key:
                return entry
        return None

    def add_macro(self, name: str, enabled: bool = True) -> bool:
        """Append *name*; ``False`` if blank or already present (any case)."""
        normalized = name.strip()
        if not normalized:
            return False
        if self._find(normalized) is not None:
            logger.warning("Duplicate macro name found: '%s', skipped.", normalized)
            return False
        self._state.whitelist_macros.append(MacroEntry(normalized, enabled))
        return True

    def rename_macro(self, old: str, new: str) -> bool:
        """Rename *old* to *new*; rejected if *new* collides with another entry."""
        entry = self._find(old)
        normalized = new.strip()
        if entry is None or not normalized:
            return False
        clash = self._find(normalized)
        if clash is not None and clash is not entry:
            logger.warning("Duplicate macro name found: '%s', skipped.", normalized)
            return False
        entry.name = normalized
        return True

    def remove_macro(self, name: str) -> bool:
        entry = self._find(name)
        if entry is None:
            return False
        self._state.whitelist_macros = [
            e for e in self._state.whitelist_macros if e is not entry
        ]
        return True

    def set_macro_enabled(self, name: str, enabled: bool) -> bool:
        entry = self._find(name)
        if entry is None:
            return False
        entry.enabled = enabled
        return True

    # ── persistence ──────────────────────────────────────────────────

    @staticmethod
    def default_path(directory: Union[str, Path] = ".") -> Path:
        return Path(directory) / CONFIG_FILE_NAME

    @classmethod
    def for_project(cls, directory: Union[str, Path] = ".") -> MacroCheckConfig:
        return cls.load(cls.default_path(directory))

    @classmethod
    def load(cls, path: Union[str, Path]) -> MacroCheckConfig:
        """Load the store from *path*; defaults when the file does not exist."""
        p = Path(path)
        if not p.exists():
            logger.debug("No whitelist file at %s, using defaults", p)
            return cls()
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(
                f"cannot read whitelist file: {exc.strerror or exc}",
                code=ErrorCodes.CONFIG_UNREADABLE, path=p, cause=exc,
            ) from exc
        except UnicodeDecodeError as exc:
            raise ConfigError(
                f"whitelist file is not valid UTF-8 (byte {exc.start})",
                code=ErrorCodes.CONFIG_MALFORMED, path=p, cause=exc,
                hint="re-save the file as UTF-8 or run 'macrocheck whitelist reset'",
            ) from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(
                f"invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}",
                code=ErrorCodes.CONFIG_MALFORMED, path=p, cause=exc,
                hint="fix the file by hand or run 'macrocheck whitelist reset'",
            ) from exc
        config = cls(WhitelistState.from_dict(raw, source=p))
        logger.info(
            "Loaded %d whitelist entries from %s",
            len(config.get_state().whitelist_macros), p,
        )
        return config

    def save(self, path: Union[str, Path]) -> None:
        """Write the store to *path* in one replace-in-place write."""
        p = Path(path)
        payload = json.dumps(self._state.to_dict(), indent=2, ensure_ascii=False) + "\n"
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".macrocheck-", dir=str(p.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp, p)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as exc:
            raise ConfigError(
                f"cannot write whitelist file: {exc.strerror or exc}",
                code=ErrorCodes.CONFIG_UNWRITABLE, path=p, cause=exc,
            ) from exc
        logger.debug("Saved whitelist to %s", p)


__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_WHITELIST",
    "MacroEntry",
    "WhitelistState",
    "MacroCheckConfig",
]
