"""Raw-mode terminal input and ANSI styling for the review prompt.

Provides:
- single keypress reads without waiting for Enter
- a minimal line editor where Escape or Ctrl-C cancels the input
- colour palettes that collapse to empty strings when colour is off
"""

from __future__ import annotations

import codecs
import os
import select
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from types import TracebackType
    from typing import TextIO

ESCAPE = "\x1b"
CTRL_C = "\x03"
_BACKSPACES = ("\x7f", "\x08")
_ENTER = ("\r", "\n")
_SEQUENCE_TIMEOUT = 0.1


class Color:
    """ANSI color codes."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"


@dataclass(frozen=True)
class Palette:
    reset: str = ""
    bold: str = ""
    dim: str = ""
    red: str = ""
    green: str = ""
    yellow: str = ""
    cyan: str = ""

    @classmethod
    def ansi(cls) -> Palette:
        return cls(
            reset=Color.RESET,
            bold=Color.BOLD,
            dim=Color.DIM,
            red=Color.RED,
            green=Color.GREEN,
            yellow=Color.YELLOW,
            cyan=Color.CYAN,
        )

    @classmethod
    def plain(cls) -> Palette:
        return cls()


def choose_palette(stream: TextIO, *, color: bool | None = None) -> Palette:
    """Pick a palette: explicit setting first, then NO_COLOR, then isatty."""
    if color is None:
        color = "NO_COLOR" not in os.environ and stream.isatty()
    return Palette.ansi() if color else Palette.plain()


class TerminalDriver(Protocol):
    def read_key(self) -> str:
        """Block for one keypress."""
        ...

    def read_line(self, prompt: str = "") -> str | None:
        """Read a line; None means the user cancelled."""
        ...


class RawTerminal:
    """Terminal handler for raw-mode input on a POSIX tty.

    Use as a context manager; the original terminal attributes are restored
    on exit even when the body raises.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None):
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._fd = self._stdin.fileno()
        self._saved: list | None = None
        self._pushback: list[str] = []
        self._decoder = codecs.getincrementaldecoder("utf8")(errors="replace")

    @property
    def is_tty(self) -> bool:
        return os.isatty(self._fd)

    def __enter__(self) -> RawTerminal:
        if self.is_tty:
            import termios

            self._saved = termios.tcgetattr(self._fd)
            raw = termios.tcgetattr(self._fd)
            raw[3] &= ~(termios.ICANON | termios.ECHO | termios.ISIG)
            raw[6][termios.VMIN] = 1
            raw[6][termios.VTIME] = 0
            termios.tcsetattr(self._fd, termios.TCSAFLUSH, raw)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.restore()

    def restore(self) -> None:
        if self._saved is not None:
            import termios

            termios.tcsetattr(self._fd, termios.TCSAFLUSH, self._saved)
            self._saved = None

    def _read_char(self) -> str:
        if self._pushback:
            return self._pushback.pop()
        while True:
            data = os.read(self._fd, 1)
            if not data:
                msg = "end of terminal input"
                raise EOFError(msg)
            char = self._decoder.decode(data)
            if char:
                return char

    def _read_pending(self) -> str | None:
        """Return the next character if one arrives within the timeout."""
        if not self._pushback:
            ready, _, _ = select.select([self._fd], [], [], _SEQUENCE_TIMEOUT)
            if not ready:
                return None
        try:
            return self._read_char()
        except EOFError:
            return None

    def _read_escape_sequence(self) -> str:
        """Consume the CSI or SS3 sequence that may follow an ESC byte.

        Arrow and function keys arrive as ``ESC [ ... final`` or ``ESC O x``.
        When nothing follows within the timeout, the ESC was a lone keypress.
        """
        introducer = self._read_pending()
        if introducer is None:
            return ESCAPE
        if introducer == "O":
            return ESCAPE + introducer + (self._read_pending() or "")
        if introducer != "[":
            self._pushback.append(introducer)
            return ESCAPE

        sequence = [ESCAPE, introducer]
        while True:
            char = self._read_pending()
            if char is None:
                break
            if not " " <= char <= "~":
                self._pushback.append(char)
                break
            sequence.append(char)
            # parameter and intermediate bytes sit in 0x20-0x3F
            if char >= "@":
                break
        return "".join(sequence)

    def read_key(self) -> str:
        """Read a single keypress without requiring Enter.

        Escape sequences such as arrow keys come back as one string.
        """
        char = self._read_char()
        if char == ESCAPE:
            return self._read_escape_sequence()
        return char

    def _echo(self, text: str) -> None:
        self._stdout.write(text)
        self._stdout.flush()

    def read_line(self, prompt: str = "") -> str | None:
        """Read a line of text; Escape or Ctrl-C cancels and returns None."""
        self._echo(prompt)
        buffer: list[str] = []
        while True:
            char = self.read_key()
            if len(char) > 1:
                continue
            if char in _ENTER:
                self._echo("\n")
                return "".join(buffer)
            if char in (ESCAPE, CTRL_C):
                self._echo("\n")
                return None
            if char in _BACKSPACES:
                if buffer:
                    buffer.pop()
                    self._echo("\b \b")
                continue
            if char.isprintable():
                buffer.append(char)
                self._echo(char)


class NullTerminal:
    """Terminal for unattended runs; every read behaves as end of input."""

    def read_key(self) -> str:
        msg = "no interactive input available"
        raise EOFError(msg)

    def read_line(self, prompt: str = "") -> str | None:
        msg = "no interactive input available"
        raise EOFError(msg)


__all__ = [
    "CTRL_C",
    "ESCAPE",
    "Color",
    "NullTerminal",
    "Palette",
    "RawTerminal",
    "TerminalDriver",
    "choose_palette",
]
