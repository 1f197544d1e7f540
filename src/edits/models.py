"""Core records shared by the edit model, the review session and the applier."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

LAST = "last"


@dataclass(frozen=True)
class ArgSpan:
    """Half-open byte interval ``[start, end)`` of one argument's text."""

    start: int
    end: int


@dataclass(frozen=True)
class CallSite:
    """Structural facts about one call expression.

    All offsets are absolute byte offsets into the exact source buffer the
    site was extracted from. ``raw`` holds ``source[start_offset:rparen_offset + 1]``
    so the site can be rendered and inspected without the full buffer.
    """

    file_path: str
    line: int
    column: int
    start_offset: int
    lparen_offset: int
    rparen_offset: int
    arg_spans: tuple[ArgSpan, ...]
    trailing_comma_offset: int | None
    raw: bytes
    fn_name: str

    @property
    def has_trailing_comma(self) -> bool:
        return self.trailing_comma_offset is not None

    @property
    def arg_count(self) -> int:
        return len(self.arg_spans)

    @property
    def text(self) -> str:
        return self.raw.decode("utf8", errors="replace")

    @property
    def callee_text(self) -> str:
        return self.slice(self.start_offset, self.lparen_offset).decode(
            "utf8", errors="replace"
        )

    def slice(self, start: int, end: int) -> bytes:
        """Return source bytes ``[start, end)`` using absolute offsets."""
        if start < self.start_offset or end > self.rparen_offset + 1 or start > end:
            msg = (
                f"range [{start}, {end}) is outside call "
                f"[{self.start_offset}, {self.rparen_offset + 1})"
            )
            raise ValueError(msg)
        return self.raw[start - self.start_offset : end - self.start_offset]

    def arg_text(self, index: int) -> str:
        span = self.arg_spans[index]
        return self.slice(span.start, span.end).decode("utf8", errors="replace")

    def location(self) -> str:
        return f"{self.file_path}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Position:
    """Argument position: an explicit zero-based index or the ``last`` sentinel."""

    index: int | None = None

    def __post_init__(self) -> None:
        if self.index is not None and self.index < 0:
            msg = f"position index must be >= 0, got {self.index}"
            raise ValueError(msg)

    @classmethod
    def last(cls) -> Position:
        return cls(None)

    @classmethod
    def at(cls, index: int) -> Position:
        return cls(index)

    @classmethod
    def parse(cls, text: str) -> Position:
        """Parse ``"last"`` or a non-negative decimal index."""
        value = text.strip()
        if value == LAST:
            return cls.last()
        if not value.isdigit():
            msg = f"invalid position {text!r}: expected a non-negative integer or 'last'"
            raise ValueError(msg)
        return cls.at(int(value))

    @property
    def is_last(self) -> bool:
        return self.index is None

    def resolve(self, arg_count: int) -> int:
        """Resolve for insertion; ``last`` appends after the final argument."""
        if self.index is None:
            return arg_count
        return self.index

    def resolve_for_removal(self, arg_count: int) -> int | None:
        """Resolve for removal; ``None`` when there is nothing to remove."""
        if arg_count == 0:
            return None
        if self.index is None:
            return arg_count - 1
        if self.index >= arg_count:
            return None
        return self.index

    def __str__(self) -> str:
        return LAST if self.index is None else str(self.index)


class Mode(str, Enum):
    """Which edit algorithm applies for the whole run."""

    ADD = "add"
    REMOVE = "remove"


class UserAction(str, Enum):
    """Outcome of reviewing one call site."""

    ACCEPT = "accept"
    EDIT = "edit"
    SKIP = "skip"
    ACCEPT_ALL = "accept_all"
    QUIT = "quit"

    @classmethod
    def from_key(cls, key: str) -> UserAction | None:
        return _KEY_ACTIONS.get(key)


_KEY_ACTIONS: dict[str, UserAction] = {
    "a": UserAction.ACCEPT,
    "e": UserAction.EDIT,
    "s": UserAction.SKIP,
    "A": UserAction.ACCEPT_ALL,
    "q": UserAction.QUIT,
    "\x03": UserAction.QUIT,
}


@dataclass(frozen=True)
class Edit:
    """Replace source bytes ``[start, end)`` with ``replacement``."""

    start: int
    end: int
    replacement: str = ""

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            msg = f"invalid edit range [{self.start}, {self.end})"
            raise ValueError(msg)

    @property
    def is_deletion(self) -> bool:
        return not self.replacement

    def overlaps(self, other: Edit) -> bool:
        """True when the two edits cannot be applied independently.

        Edits sharing a start offset are treated as overlapping because their
        relative order would be ambiguous.
        """
        if self.start == other.start:
            return True
        return self.start < other.end and other.start < self.end


@dataclass
class Stats:
    files_scanned: int = 0
    files_with_matches: int = 0
    files_modified: int = 0
    call_sites_found: int = 0
    call_sites_modified: int = 0
    call_sites_skipped: int = 0
    files_with_errors: int = 0


__all__ = [
    "LAST",
    "ArgSpan",
    "CallSite",
    "Edit",
    "Mode",
    "Position",
    "Stats",
    "UserAction",
]
