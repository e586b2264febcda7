"""
macrocheck/collector.py — directive collector.

Walks a file's tree and extracts every ``#define`` / ``#undef`` directive
together with the macro name it refers to.

The tokenizer is literal: the node text must start with the
exact prefix ``#define`` or ``#undef``, it is split on runs of whitespace
and the second piece is the macro name.  For ``#define`` the name is cut
at the first ``(`` so function-like macros report their bare name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, List, Optional, Tuple

DEFINE_PREFIX = "#define"
UNDEF_PREFIX = "#undef"

# ASCII whitespace only
_WHITESPACE_RE = re.compile(r"\s+", re.ASCII)


class DirectiveKind(Enum):
    DEFINE = "define"
    UNDEF = "undef"


@dataclass(frozen=True)
class DirectiveRecord:
    """One ``#define`` or ``#undef`` seen during a single collection pass.

    ``location`` is an opaque handle: the tree node the directive was
    read from.
    """
    kind: DirectiveKind
    macro_name: str
    location: Any


def _split_directive(text: str) -> List[str]:
    parts = _WHITESPACE_RE.split(text)
    while parts and not parts[-1]:
        parts.pop()
    return parts


def extract_macro_name(text: str) -> Optional[Tuple[DirectiveKind, str]]:
    """Classify *text* and pull out the macro name it refers to.

    Returns ``None`` for text that is not a define/undef directive, and for
    directives with no name token (those are skipped, not reported).

    >>> extract_macro_name("#define MAX(a, b) ((a) > (b) ? (a) : (b))")
    (<DirectiveKind.DEFINE: 'define'>, 'MAX')
    >>> extract_macro_name("#undef MAX")
    (<DirectiveKind.UNDEF: 'undef'>, 'MAX')
    >>> extract_macro_name("#define") is None
    True
    """
    if text.startswith(DEFINE_PREFIX):
        kind = DirectiveKind.DEFINE
    elif text.startswith(UNDEF_PREFIX):
        kind = DirectiveKind.UNDEF
    else:
        return None

    parts = _split_directive(text)
    if len(parts) < 2:
        return None

    name = parts[1].strip()
    if kind is DirectiveKind.DEFINE and "(" in name:
        name = name.split("(", 1)[0]
    if not name:
        return None
    return kind, name


def _node_text(node: Any) -> str:
    text = getattr(node, "text", None)
    if text is None:
        text = getattr(node, "str", "")
    return text or ""


def _node_children(node: Any) -> List[Any]:
    return list(getattr(node, "children", None) or [])


def iter_descendants(root: Any) -> Iterator[Any]:
    """Pre-order, depth-first walk over the descendants of *root*.

    *root* itself is not yielded.  Uses an explicit stack so very long
    files never hit the interpreter recursion limit.
    """
    stack = list(reversed(_node_children(root)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(_node_children(node)))


def collect_directives(root: Any) -> List[DirectiveRecord]:
    """Return the define/undef records under *root*, in visit order.

    A node's own text is inspected before its children are visited, and
    children are always visited, whether or not the node produced a record.
    """
    records: List[DirectiveRecord] = []
    for node in iter_descendants(root):
        extracted = extract_macro_name(_node_text(node))
        if extracted is None:
            continue
        kind, name = extracted
        records.append(DirectiveRecord(kind=kind, macro_name=name, location=node))
    return records


__all__ = [
    "DEFINE_PREFIX",
    "UNDEF_PREFIX",
    "DirectiveKind",
    "DirectiveRecord",
    "extract_macro_name",
    "iter_descendants",
    "collect_directives",
]
