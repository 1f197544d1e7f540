"""Edit model, preview renderer and batch applier for argument refactoring."""

from edits.apply import OverlappingEditsError, apply_edits, splice_edits
from edits.generate import generate_add_edit, generate_edit, generate_remove_edit
from edits.models import ArgSpan, CallSite, Edit, Mode, Position, Stats, UserAction
from edits.preview import render_proposed_call

__all__ = [
    "ArgSpan",
    "CallSite",
    "Edit",
    "Mode",
    "OverlappingEditsError",
    "Position",
    "Stats",
    "UserAction",
    "apply_edits",
    "generate_add_edit",
    "generate_edit",
    "generate_remove_edit",
    "render_proposed_call",
    "splice_edits",
]
