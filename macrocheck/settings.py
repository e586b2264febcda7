"""
macrocheck/settings.py — headless settings model for the whitelist.

:class:`WhitelistTableModel` holds the editable (name, enabled) rows and
enforces the editing rules; :class:`MacroCheckConfigurable` moves rows
between the model and a :class:`~macrocheck.config.MacroCheckConfig`
(reset / is_modified / apply).  Front ends (the ``whitelist`` CLI
sub-commands, or any GUI) drive these two classes.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

from macrocheck.config import MacroCheckConfig
from macrocheck.messages import message

NAME_COLUMN = 0
ENABLED_COLUMN = 1
NEW_MACRO_NAME = "NEW_MACRO"


class WhitelistTableModel:
    """Two-column table: macro name, enabled flag."""

    def __init__(self) -> None:
        self._macros: List[Tuple[str, bool]] = []

    # ── table shape ──────────────────────────────────────────────────

    @property
    def row_count(self) -> int:
        return len(self._macros)

    @property
    def column_count(self) -> int:
        return 2

    def column_name(self, column: int) -> str:
        if column == NAME_COLUMN:
            return message("config.whitelist.tableColumnName")
        if column == ENABLED_COLUMN:
            return message("config.whitelist.tableColumnEnabled")
        raise IndexError(column)

    @staticmethod
    def column_class(column: int) -> type:
        if column == NAME_COLUMN:
            return str
        if column == ENABLED_COLUMN:
            return bool
        return object

    @staticmethod
    def is_cell_editable(row: int, column: int) -> bool:
        return True

    @staticmethod
    def empty_text() -> str:
        return message("config.whitelist.tableEmptyText")

    # ── cell access ──────────────────────────────────────────────────

    def get_value_at(self, row: int, column: int) -> Any:
        name, enabled = self._macros[row]
        if column == NAME_COLUMN:
            return name
        if column == ENABLED_COLUMN:
            return enabled
        return ""

    def set_value_at(self, value: Any, row: int, column: int) -> None:
        """Edit a cell.

        A blank name deletes the row; a name that collides with another
        row (case-insensitively) is rejected and the row stays unchanged.
        Rows out of range are ignored.
        """
        if row < 0 or row >= len(self._macros):
            return
        name, enabled = self._macros[row]

        if column == NAME_COLUMN:
            new_name = str(value).strip() if value is not None else ""
            if not new_name:
                self.remove_macro(row)
                return
            if self._collides(new_name, skip_row=row):
                return
            self._macros[row] = (new_name, enabled)
        elif column == ENABLED_COLUMN:
            self._macros[row] = (name, value if isinstance(value, bool) else False)

    def _collides(self, name: str, skip_row: Optional[int] = None) -> bool:
        key = name.lower()
        return any(
            idx != skip_row and existing.lower() == key
            for idx, (existing, _) in enumerate(self._macros)
        )

    # ── rows ─────────────────────────────────────────────────────────

    def add_macro(self, name: str = NEW_MACRO_NAME, enabled: bool = True) -> int:
        """Append a row and return its index."""
        self._macros.append((name, enabled))
        return len(self._macros) - 1

    def remove_macro(self, row: int) -> None:
        if 0 <= row < len(self._macros):
            del self._macros[row]

    def get_enabled_macros(self) -> List[str]:
        return [name for name, enabled in self._macros if enabled]

    def get_all_macros(self) -> List[Tuple[str, bool]]:
        return list(self._macros)

    def set_macros(self, macros: Sequence[Tuple[str, bool]]) -> None:
        self._macros = [(n, e) for n, e in macros if n.strip()]


class MacroCheckConfigurable:
    """Binds a :class:`WhitelistTableModel` to a project's store."""

    def __init__(self, config: MacroCheckConfig) -> None:
        self.config = config
        self.table = WhitelistTableModel()
        self.enable_whitelist = config.is_enable_whitelist()
        self.reset()

    @staticmethod
    def display_name() -> str:
        return message("config.display.name")

    def is_modified(self) -> bool:
        if self.enable_whitelist != self.config.is_enable_whitelist():
            return True
        return set(self.table.get_all_macros()) != set(self.config.get_all_macros())

    def reset(self) -> None:
        self.enable_whitelist = self.config.is_enable_whitelist()
        self.table.set_macros(self.config.get_all_macros())

    def apply(self) -> None:
        self.config.set_enable_whitelist(self.enable_whitelist)
        self.config.set_all_macros(self.table.get_all_macros())


__all__ = [
    "NAME_COLUMN",
    "ENABLED_COLUMN",
    "NEW_MACRO_NAME",
    "WhitelistTableModel",
    "MacroCheckConfigurable",
]
