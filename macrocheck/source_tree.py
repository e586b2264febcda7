"""
macrocheck/source_tree.py
═════════════════════════

Builds the trees the directive collector walks.

Two sources are supported:

* **C/C++ source text** — split into lexical chunks by a Parsimonious PEG
  grammar.  Directives, comments and string literals become separate
  nodes, so a ``#define`` inside a comment or a string is never mistaken
  for a directive.  The grammar is total: every input parses.
* **cppcheck dump configurations** — ``cfg.directives`` grouped by file,
  one :class:`DumpFileNode` per file.

Both kinds of node expose ``children``; source nodes expose ``text`` and
cppcheck directives expose ``str``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from macrocheck.errors import ErrorCodes, SourceParseError

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — LEXICAL GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

C_SOURCE_GRAMMAR = Grammar(r'''
    source          = chunk*
    chunk           = whitespace / comment / directive / literal / code / stray

    whitespace      = ~r"\s+"

    comment         = block_comment / line_comment
    block_comment   = ~r"/\*.*?(?:\*/|\Z)"s
    line_comment    = ~r"//(?:\\\r?\n|[^\n])*"

    # A directive runs to the end of the line, backslash continuations
    # included, and stops where a block comment opens
    directive       = ~r"#(?:\\\r?\n|/(?!\*)|[^\n/])*"

    literal         = string_literal / char_literal
    string_literal  = ~r'"(?:\\.|[^"\\\n])*"?'
    char_literal    = ~r"'(?:\\.|[^'\\\n])*'?"

    code            = ~r"[^\s#/\"']+"
    stray           = "/"
''')


@dataclass
class SourceTree:
    """Root of one source file: its lexical chunks, in file order.

    Each child is the Parsimonious leaf node of one chunk (whitespace,
    comment, directive, literal or code), so it keeps ``start`` and
    ``full_text`` for location lookups.
    """
    text: str
    children: List[Node] = field(default_factory=list)
    path: str = ""


class _ChunkTreeBuilder(NodeVisitor):
    """Collapses ``source → chunk → comment/literal → leaf`` to ``source → leaf``."""

    def visit_source(self, node: Node, visited_children: List[Node]) -> SourceTree:
        return SourceTree(text=node.full_text, children=list(visited_children))

    def visit_chunk(self, node: Node, visited_children: List[Node]) -> Node:
        return visited_children[0]

    visit_comment = visit_chunk
    visit_literal = visit_chunk

    def generic_visit(self, node: Node, visited_children: List[Any]) -> Node:
        return node


def parse_source(text: str, path: Union[str, Path, None] = None) -> SourceTree:
    """Parse C/C++ *text* into a flat tree of lexical chunks.

    Raises
    ------
    SourceParseError
        If Parsimonious rejects the input.
    """
    try:
        node = C_SOURCE_GRAMMAR.parse(text)
    except ParseError as exc:
        raise SourceParseError(
            f"could not split source into lexical chunks: {exc}",
            code=ErrorCodes.SOURCE_PARSE_FAILED,
            path=path,
            cause=exc,
        ) from exc
    tree = _ChunkTreeBuilder().visit(node)
    tree.path = str(path) if path is not None else ""
    return tree


def read_source_tree(path: Union[str, Path]) -> SourceTree:
    """Read *path* and return its lexical tree."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise SourceParseError(
            f"cannot read source file: {exc.strerror or exc}",
            code=ErrorCodes.SOURCE_UNREADABLE,
            path=p,
            cause=exc,
        ) from exc
    logger.debug("Parsing %s (%d bytes)", p, len(text))
    return parse_source(text, path=p)


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — CPPCHECK DUMP ADAPTER
# ═══════════════════════════════════════════════════════════════════

@dataclass
class DumpFileNode:
    """Root of one file's directives taken from a cppcheck configuration."""
    file: str
    children: List[Any] = field(default_factory=list)
    text: str = ""


def dump_file_trees(cfg: Any) -> List[DumpFileNode]:
    """Group ``cfg.directives`` by file, keeping first-seen file order.

    Directives from headers pulled in by ``#include`` land in their own
    tree, so each file is analysed on its own.
    """
    roots: Dict[str, DumpFileNode] = {}
    for directive in getattr(cfg, "directives", None) or []:
        file = getattr(directive, "file", "") or ""
        root = roots.get(file)
        if root is None:
            root = roots[file] = DumpFileNode(file=file)
        root.children.append(directive)
    return list(roots.values())


__all__ = [
    "C_SOURCE_GRAMMAR",
    "SourceTree",
    "parse_source",
    "read_source_tree",
    "DumpFileNode",
    "dump_file_trees",
]
