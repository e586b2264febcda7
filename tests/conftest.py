# tests/conftest.py
"""
Shared fixtures and lightweight stand-ins for cppcheck dump objects.

``cppcheckdata`` ships with cppcheck rather than on PyPI, so the tests
model only the attributes macrocheck reads: ``Directive.str/file/linenr/
column``, ``Configuration.directives`` and ``CppcheckData.configurations``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List

import pytest

from macrocheck.messages import set_locale


@dataclass
class MockNode:
    """Generic tree node: ``text`` plus ``children``."""
    text: str = ""
    children: List[Any] = field(default_factory=list)


@dataclass
class MockDirective:
    """Mirrors ``cppcheckdata.Directive``."""
    str: str
    file: str = "main.c"
    linenr: int = 1
    column: int = 1


@dataclass
class MockConfiguration:
    name: str = ""
    directives: List[MockDirective] = field(default_factory=list)


@dataclass
class MockDump:
    configurations: List[MockConfiguration] = field(default_factory=list)


def tree_of(*texts: str) -> MockNode:
    """A root whose children are leaves with the given texts."""
    return MockNode(text="", children=[MockNode(text=t) for t in texts])


@pytest.fixture(autouse=True)
def english_messages():
    """Pin messages to English so assertions do not depend on $LANG."""
    set_locale("en")
    yield
    set_locale(None)


@pytest.fixture
def write_source(tmp_path):
    """Write a C file under tmp_path and return its path."""
    def _write(name: str, content: str):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8", newline="")
        return path
    return _write


@pytest.fixture(autouse=True)
def reset_cli_logging():
    """Drop the stderr handler ``main()`` installs so it never outlives a test."""
    yield
    logging.getLogger("macrocheck").handlers.clear()
