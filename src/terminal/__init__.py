"""Terminal input handling for interactive review."""

from terminal.raw import (
    Color,
    NullTerminal,
    Palette,
    RawTerminal,
    TerminalDriver,
    choose_palette,
)

__all__ = [
    "Color",
    "NullTerminal",
    "Palette",
    "RawTerminal",
    "TerminalDriver",
    "choose_palette",
]
