"""Batch applier: rewrite one file from its accumulated, disjoint edits."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from edits.models import Edit

logger = logging.getLogger(__name__)


class OverlappingEditsError(ValueError):
    """Raised when a batch holds edits that overlap or share a start offset."""


def _sorted_descending(edits: Sequence[Edit], size: int) -> list[Edit]:
    ordered = sorted(edits, key=lambda edit: edit.start, reverse=True)
    for higher, lower in zip(ordered, ordered[1:]):
        if lower.start == higher.start or lower.end > higher.start:
            msg = (
                f"edits [{lower.start}, {lower.end}) and "
                f"[{higher.start}, {higher.end}) overlap"
            )
            raise OverlappingEditsError(msg)
    if ordered and ordered[0].end > size:
        msg = f"edit end {ordered[0].end} is past the end of a {size}-byte buffer"
        raise OverlappingEditsError(msg)
    return ordered


def splice_edits(source: bytes, edits: Sequence[Edit]) -> bytes:
    """Return ``source`` with every edit applied.

    Edits are walked from the highest start offset down, so offsets of edits
    not yet applied still refer to the untouched prefix. Pieces are collected
    and joined once instead of rebuilding the buffer per edit.
    """
    ordered = _sorted_descending(edits, len(source))

    pieces: list[bytes] = []
    tail = len(source)
    for edit in ordered:
        pieces.append(source[edit.end : tail])
        pieces.append(edit.replacement.encode("utf8"))
        tail = edit.start
    pieces.append(source[:tail])
    pieces.reverse()
    return b"".join(pieces)


def _write_replacing(path: Path, content: bytes) -> None:
    """Write ``content`` to a sibling temp file, then move it over ``path``."""
    mode = path.stat().st_mode
    fd, temp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        temp_path.chmod(mode)
        temp_path.replace(path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


def apply_edits(path: Path, edits: Sequence[Edit]) -> bool:
    """Apply ``edits`` to the file at ``path``.

    Returns False without touching the file when the batch is empty.

    Raises:
        OverlappingEditsError: If the batch is not pairwise disjoint.
        OSError: If the file cannot be read or written.
    """
    if not edits:
        return False

    source = path.read_bytes()
    updated = splice_edits(source, edits)
    _write_replacing(path, updated)
    logger.debug("Applied %d edit(s) to %s", len(edits), path)
    return True


__all__ = ["OverlappingEditsError", "apply_edits", "splice_edits"]
