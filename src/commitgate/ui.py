from __future__ import annotations

import os
from dataclasses import dataclass, field

from rich.console import Console
from rich.text import Text

from commitgate.exec import ExecResult

HEADER_MARKER = "==>"
STEP_MARKER = "-->"
BLOCKED_LINE = "Commit blocked - see errors above."

console = Console(highlight=False)


def plain_enabled() -> bool:
    return os.getenv("COMMITGATE_PLAIN", "0") == "1"


def _style(style: str) -> str:
    return "" if plain_enabled() else style


@dataclass
class Reporter:
    """Writes the hook's user-facing lines.

    Headers start with ``==>``, sub-step results with ``-->``. On a block the
    final line is always :data:`BLOCKED_LINE`.
    """

    console: Console = field(default_factory=lambda: console)

    def _line(self, text: str, style: str = "") -> None:
        self.console.print(Text(text, style=_style(style)), soft_wrap=True)

    def header(self, message: str) -> None:
        self._line(f"{HEADER_MARKER} {message}", "bold bright_cyan")

    def step(self, message: str) -> None:
        self._line(f"{STEP_MARKER} {message}", "green")

    def warn(self, message: str) -> None:
        self._line(f"{STEP_MARKER} WARNING: {message}", "bold yellow")

    def tool_output(self, result: ExecResult) -> None:
        for stream in (result.stdout, result.stderr):
            text = stream.rstrip()
            if text:
                self.console.print(Text(text), soft_wrap=True)

    def blocked(self, reason: str) -> None:
        self._line(f"{STEP_MARKER} {reason}", "bold bright_red")
        self._line(BLOCKED_LINE, "bold bright_white on red")
