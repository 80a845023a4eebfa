"""Output abstraction layer."""

from .console import (
    BufferedConsole,
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)

__all__ = [
    "BufferedConsole",
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
]
