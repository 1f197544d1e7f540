"""Human-readable preview of a call after its pending edit.

The preview is rebuilt from the original argument texts, joined with the
canonical ``", "`` separator. It never touches byte offsets, but it follows
the same insertion point and trailing-comma policy as ``edits.generate``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from edits.models import Mode

if TYPE_CHECKING:
    from edits.models import CallSite, Position


def _added_args(site: CallSite, position: Position, marked_value: str) -> list[str]:
    args = [site.arg_text(i) for i in range(site.arg_count)]
    index = min(position.resolve(site.arg_count), site.arg_count)
    args.insert(index, marked_value)
    return args


def _remaining_args(site: CallSite, position: Position) -> list[str]:
    skip = position.resolve_for_removal(site.arg_count)
    return [site.arg_text(i) for i in range(site.arg_count) if i != skip]


def render_proposed_call(
    site: CallSite,
    mode: Mode,
    position: Position,
    value: str | None = None,
    *,
    highlight_start: str = "",
    highlight_end: str = "",
) -> str:
    """Render ``callee(args...)`` as it would read after the edit.

    ``highlight_start``/``highlight_end`` are opaque decoration (for example
    ANSI colour codes) wrapped around the inserted value.
    """
    if mode is Mode.ADD:
        if value is None:
            msg = "add mode requires a value"
            raise ValueError(msg)
        marked = f"{highlight_start}{value}{highlight_end}"
        args = _added_args(site, position, marked)
    else:
        args = _remaining_args(site, position)

    body = ", ".join(args)
    if site.has_trailing_comma and args:
        body += ","
    return f"{site.callee_text}({body})"


__all__ = ["render_proposed_call"]
