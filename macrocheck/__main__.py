"""
macrocheck/__main__.py
======================

Allows ``python -m macrocheck <command> ...``; see :mod:`macrocheck.main`.
"""

from macrocheck.main import main

if __name__ == "__main__":
    raise SystemExit(main())
