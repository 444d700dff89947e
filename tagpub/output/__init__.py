"""Output abstraction layer."""

from .console import (
    MASK,
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)

__all__ = [
    "MASK",
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
]
