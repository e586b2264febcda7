"""
macrocheck/messages.py — localised message bundle.

Templates use ``{0}``-style positional placeholders.  English is the
fallback bundle; a key missing from the active locale resolves from it.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"

_BUNDLES: Dict[str, Dict[str, str]] = {
    "en": {
        "inspection.name": "Macro defined without matching #undef",
        "inspection.group": "Preprocessor",
        "inspection.problem.description":
            "Macro '{0}' is defined but never undefined with #undef",
        "inspection.quickfix.name": "Add '#undef {0}' at the end of the file",
        "inspection.quickfix.family": "Add missing #undef",
        "config.display.name": "Macro Check",
        "config.whitelist.enable": "Enable whitelist",
        "config.whitelist.label": "Macros exempt from the #undef check:",
        "config.whitelist.tableEmptyText": "No whitelisted macros",
        "config.whitelist.tableColumnName": "Macro",
        "config.whitelist.tableColumnEnabled": "Enabled",
    },
    "zh_CN": {
        "inspection.name": "宏定义缺少对应的 #undef",
        "inspection.group": "预处理器",
        "inspection.problem.description": "宏 '{0}' 已定义但没有对应的 #undef",
        "inspection.quickfix.name": "在文件末尾添加 '#undef {0}'",
        "inspection.quickfix.family": "添加缺失的 #undef",
        "config.display.name": "宏检查",
        "config.whitelist.enable": "启用白名单",
        "config.whitelist.label": "不检查 #undef 的宏：",
        "config.whitelist.tableEmptyText": "白名单为空",
        "config.whitelist.tableColumnName": "宏名称",
        "config.whitelist.tableColumnEnabled": "启用",
    },
}

_active_locale: Optional[str] = None


def _normalize_locale(raw: str) -> str:
    """``zh_CN.UTF-8`` → ``zh_CN``; ``zh`` → ``zh_CN``; unknown → ``en``."""
    name = raw.split(".", 1)[0].split("@", 1)[0].replace("-", "_")
    if name in _BUNDLES:
        return name
    language = name.split("_", 1)[0]
    for known in _BUNDLES:
        if known.split("_", 1)[0] == language:
            return known
    return DEFAULT_LOCALE


def get_locale() -> str:
    """Return the active locale, resolving it from the environment once."""
    global _active_locale
    if _active_locale is None:
        raw = os.environ.get("MACROCHECK_LOCALE") or os.environ.get("LANG") or ""
        _active_locale = _normalize_locale(raw) if raw else DEFAULT_LOCALE
        logger.debug("Message locale resolved to %s", _active_locale)
    return _active_locale


def set_locale(locale: Optional[str]) -> str:
    """Force a locale (``None`` re-reads the environment on next use)."""
    global _active_locale
    _active_locale = _normalize_locale(locale) if locale else None
    return get_locale()


def _lookup(key: str) -> Optional[str]:
    template = _BUNDLES[get_locale()].get(key)
    if template is None:
        template = _BUNDLES[DEFAULT_LOCALE].get(key)
    return template


def message(key: str, *params: Any) -> str:
    """Return the localised string for *key*, formatted with *params*.

    Raises ``KeyError`` for keys no bundle defines.
    """
    template = _lookup(key)
    if template is None:
        raise KeyError(key)
    return template.format(*params)


def message_or_default(key: str, default: str, *params: Any) -> str:
    """Like :func:`message`, but fall back to *default* for unknown keys."""
    template = _lookup(key)
    if template is None:
        template = default
    return template.format(*params)


__all__ = [
    "DEFAULT_LOCALE",
    "get_locale",
    "set_locale",
    "message",
    "message_or_default",
]
