"""Tree-walking interpreter for the Lox scripting language."""

from __future__ import annotations

from typing import TextIO

__version__ = "0.1.0"


def run(source: str, out: TextIO | None = None) -> None:
    """Scan, parse, resolve and execute Lox source in a fresh session."""
    from lox.session import Session

    Session(out=out).run(source)
