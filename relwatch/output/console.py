"""Line-oriented report output.

Report code writes through ``ConsoleProtocol`` and never prints directly.
``RichConsole`` renders to the terminal, ``BufferedConsole`` holds one
repository's report until it can be flushed in one piece, and
``MockConsole`` captures output in tests.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "BufferedConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()  # diagnostics that are not problems
    BOLD = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


_LEVEL_PREFIX = {
    Style.SUCCESS: "OK ",
    Style.ERROR: "error: ",
    Style.WARNING: "warning: ",
    Style.INFO: "info: ",
}

_RICH_STYLE = {
    Style.SUCCESS: "green",
    Style.ERROR: "bold red",
    Style.WARNING: "yellow",
    Style.INFO: "cyan",
    Style.DIM: "dim",
    Style.BOLD: "bold",
    Style.HEADER: "bold blue",
}


class ConsoleProtocol(Protocol):
    """Append-only output channel, one message per line."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...


class _LevelMethods:
    """``success``/``error``/``warning``/``info`` expressed through ``print``."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        raise NotImplementedError

    def _level(self, style: Style, message: str) -> None:
        self.print(_LEVEL_PREFIX[style] + message, style)

    def success(self, message: str) -> None:
        self._level(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._level(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._level(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._level(Style.INFO, message)


class RichConsole(_LevelMethods):
    """Terminal console backed by Rich.

    Markup and highlighting are off: commit subjects routinely contain
    square brackets and numbers that must come out verbatim.
    """

    def __init__(self, *, stderr: bool = False) -> None:
        from rich.console import Console

        self._console = Console(stderr=stderr, highlight=False)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._console.print(message, style=_RICH_STYLE.get(style), markup=False)

    def header(self, message: str) -> None:
        self.newline()
        self.print(message, Style.HEADER)

    def newline(self) -> None:
        self._console.print()


@dataclass
class OutputRecord:
    """One recorded line."""

    message: str
    style: Style


@dataclass
class BufferedConsole(_LevelMethods):
    """Records output and replays it into another console.

    Each repository pipeline writes into its own buffer. ``flush_to`` holds
    a lock shared by every buffer so two reports never interleave.
    """

    outputs: list[OutputRecord] = field(default_factory=list)

    _flush_lock = threading.Lock()

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def header(self, message: str) -> None:
        self.print(message, Style.HEADER)

    def newline(self) -> None:
        self.print("")

    def flush_to(self, target: ConsoleProtocol) -> None:
        """Replay every recorded line into ``target`` and clear the buffer."""
        with BufferedConsole._flush_lock:
            for record in self.outputs:
                match record:
                    case OutputRecord(style=Style.HEADER):
                        target.header(record.message)
                    case OutputRecord(message="", style=Style.DEFAULT):
                        target.newline()
                    case _:
                        target.print(record.message, record.style)
            self.outputs.clear()


@dataclass
class MockConsole(BufferedConsole):
    """Captures output for assertions in tests."""

    def clear(self) -> None:
        self.outputs.clear()

    def lines(self, style: Style | None = None) -> list[str]:
        """Recorded messages, optionally only those written with ``style``."""
        return [r.message for r in self.outputs if style is None or r.style is style]

    @property
    def messages(self) -> list[str]:
        return self.lines()

    @property
    def text(self) -> str:
        return "\n".join(self.lines())

    def count(self, style: Style) -> int:
        return len(self.lines(style))

    def has_error(self) -> bool:
        return self.count(Style.ERROR) > 0

    def has_warning(self) -> bool:
        return self.count(Style.WARNING) > 0

    def find(self, substring: str) -> list[OutputRecord]:
        """Records whose message contains ``substring``."""
        return [r for r in self.outputs if substring in r.message]
