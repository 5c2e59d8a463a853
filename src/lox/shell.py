"""Interactive mode for the lox interpreter. Uses cmd as backend."""

from __future__ import annotations

import cmd
import sys

from lox import __version__
from lox.errors import LoxError
from lox.session import Session


class Shell(cmd.Cmd):
    """Lox read-eval-print loop."""

    intro = f"Lox {__version__} :: type 'exit' or press Ctrl-D to quit."
    prompt = "> "

    def __init__(self, session: Session, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.session = session

    def default(self, line: str) -> None:
        """Run one line of Lox source; issues are reported and the loop continues."""
        try:
            self.session.run(line)
        except LoxError as exc:
            print(exc.format("<stdin>"), file=sys.stderr)

    def emptyline(self) -> bool:
        """Do not repeat the previous line."""
        return False

    def do_exit(self, arg: str) -> bool:
        """Exit the interpreter."""
        return True

    def do_EOF(self, arg: str) -> bool:
        """Exit the interpreter."""
        print()
        return True
