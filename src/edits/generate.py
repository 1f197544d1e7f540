"""Edit model: compute the minimal byte edit that adds or removes one argument.

Both operations are pure. They read the call site (and, for removal, the
source buffer the site was extracted from) and return a new ``Edit``; the
buffer itself is never modified.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from edits.models import Edit, Mode

if TYPE_CHECKING:
    from edits.models import CallSite, Position

logger = logging.getLogger(__name__)

_WHITESPACE = frozenset(b" \t\r\n\f")
_COMMA = ord(",")
_SEPARATOR = ", "


def _skip_whitespace(source: bytes, index: int, limit: int) -> int:
    while index < limit and source[index] in _WHITESPACE:
        index += 1
    return index


def _layout_separator(site: CallSite) -> str:
    """Whitespace to place before an argument appended after a trailing comma.

    Copies the line break and indentation in front of the current last
    argument for multi-line calls; single-line calls get one space.
    """
    last = site.arg_spans[-1]
    prefix = site.slice(site.lparen_offset + 1, last.start)
    run_start = len(prefix)
    while run_start > 0 and prefix[run_start - 1] in _WHITESPACE:
        run_start -= 1
    run = prefix[run_start:]

    newline = run.rfind(b"\n")
    if newline < 0:
        return " "
    if newline > 0 and run[newline - 1] == ord("\r"):
        newline -= 1
    return run[newline:].decode("utf8")


def generate_add_edit(site: CallSite, position: Position, value: str) -> Edit:
    """Insert ``value`` as a new positional argument.

    ``foo()`` becomes ``foo(value)``; an insertion before an existing argument
    adds ``"value, "`` at its start; an append adds ``", value"`` after the
    last argument, or ``"<layout>value,"`` after an existing trailing comma.
    """
    arg_count = site.arg_count
    index = position.resolve(arg_count)

    if arg_count == 0:
        insert_at = site.lparen_offset + 1
        return Edit(start=insert_at, end=insert_at, replacement=value)

    if index < arg_count:
        insert_at = site.arg_spans[index].start
        return Edit(start=insert_at, end=insert_at, replacement=f"{value}{_SEPARATOR}")

    if site.trailing_comma_offset is not None:
        insert_at = site.trailing_comma_offset + 1
        separator = _layout_separator(site)
        return Edit(start=insert_at, end=insert_at, replacement=f"{separator}{value},")

    insert_at = site.arg_spans[-1].end
    return Edit(start=insert_at, end=insert_at, replacement=f"{_SEPARATOR}{value}")


def _remove_after_comment(site: CallSite, source: bytes, index: int) -> Edit:
    """Delete a later argument whose preceding gap holds a comment.

    The comment stays on its line. The target's own line goes instead, up to
    and including the comma after the target.
    """
    target = site.arg_spans[index]
    start = source.rfind(b"\n", site.arg_spans[index - 1].end, target.start) + 1

    if index + 1 < site.arg_count:
        comma = source.find(b",", target.end, site.arg_spans[index + 1].start)
    else:
        comma = site.trailing_comma_offset
    end = target.end if comma is None or comma < 0 else comma + 1
    line_end = end
    while line_end < site.rparen_offset and source[line_end] in b" \t\r":
        line_end += 1
    if line_end < site.rparen_offset and source[line_end] == ord("\n"):
        end = line_end + 1
    return Edit(start=start, end=end)


def generate_remove_edit(
    site: CallSite, source: bytes, position: Position
) -> Edit | None:
    """Delete one argument together with exactly one separator.

    Returns None when the call has no argument at ``position``. The first
    argument of a multi-argument call eats the comma and whitespace that
    follow it; any later argument eats the comma that precedes it, unless a comment
    sits in between.
    """
    index = position.resolve_for_removal(site.arg_count)
    if index is None:
        return None

    target = site.arg_spans[index]

    if site.arg_count == 1:
        end = target.end
        if site.trailing_comma_offset is not None:
            end = site.trailing_comma_offset + 1
        return Edit(start=target.start, end=end)

    if index == 0:
        following = site.arg_spans[1]
        end = _skip_whitespace(source, target.end, following.start)
        if end < following.start and source[end] == _COMMA:
            end = _skip_whitespace(source, end + 1, following.start)
        return Edit(start=target.start, end=end)

    previous = site.arg_spans[index - 1]
    if b"#" in source[previous.end : target.start]:
        return _remove_after_comment(site, source, index)

    comma = source.find(b",", previous.end, target.start)
    if comma < 0:
        logger.debug(
            "No separator before argument %d at %s", index, site.location()
        )
        comma = target.start
    return Edit(start=comma, end=target.end)


def generate_edit(
    site: CallSite,
    source: bytes,
    mode: Mode,
    position: Position,
    value: str | None,
) -> Edit | None:
    """Dispatch to the add or remove algorithm for ``mode``."""
    if mode is Mode.ADD:
        if value is None:
            msg = "add mode requires a value"
            raise ValueError(msg)
        return generate_add_edit(site, position, value)
    return generate_remove_edit(site, source, position)


__all__ = ["generate_add_edit", "generate_edit", "generate_remove_edit"]
