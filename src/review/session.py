"""Interactive per-call-site review that batches edits per file."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from edits.apply import apply_edits
from edits.generate import generate_edit
from edits.models import Mode, Stats, UserAction
from edits.preview import render_proposed_call
from parse.treesitter_calls import ExtractionError, extract_call_sites, read_source
from terminal.raw import Palette

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path
    from typing import TextIO

    from edits.models import CallSite, Edit
    from settings.config import RunConfig
    from terminal.raw import TerminalDriver

logger = logging.getLogger(__name__)


def count_call_sites(files: Iterable[Path], fn_name: str) -> tuple[int, int]:
    """Return ``(call_sites, files_with_matches)`` without reviewing anything.

    Unreadable or unparseable files are ignored here; the review pass
    reports them.
    """
    total_sites = 0
    matched_files = 0
    for path in files:
        try:
            result = extract_call_sites(read_source(path), str(path), fn_name)
        except (OSError, ExtractionError):
            continue
        if result.call_sites:
            total_sites += len(result.call_sites)
            matched_files += 1
    return total_sites, matched_files


class ReviewSession:
    """Drive the accept/edit/skip/all/quit loop over every matching call site.

    One session covers one run: a fixed mode, position and default value.
    Edits for a file are collected in a local batch and written when the
    file is finished, or immediately when the user quits mid-file.
    """

    def __init__(
        self,
        config: RunConfig,
        terminal: TerminalDriver,
        *,
        out: TextIO | None = None,
        palette: Palette | None = None,
        accept_all: bool = False,
    ) -> None:
        self.config = config
        self.terminal = terminal
        self.out = out or sys.stdout
        self.palette = palette or Palette.plain()
        self.accept_all = accept_all
        self.stats = Stats()

    def _write(self, text: str) -> None:
        self.out.write(text)
        self.out.flush()

    def _warn(self, message: str) -> None:
        p = self.palette
        self._write(f"{p.yellow}Warning:{p.reset} {message}\n")

    def run(self, files: Iterable[Path]) -> Stats:
        """Review every file in order and return the run statistics."""
        for path in files:
            self.stats.files_scanned += 1

            try:
                source = read_source(path)
            except OSError as exc:
                self._warn(f"Could not read {path}: {exc}")
                self.stats.files_with_errors += 1
                continue

            try:
                result = extract_call_sites(source, str(path), self.config.fn_name)
            except ExtractionError as exc:
                self._warn(f"Parse error in {path}: {exc}")
                self.stats.files_with_errors += 1
                continue

            if not result.call_sites:
                continue

            if result.has_errors:
                self._warn(f"{path} has parse errors, results may be incomplete")

            self.stats.files_with_matches += 1
            self.stats.call_sites_found += len(result.call_sites)

            if not self.review_file(path, source, result.call_sites):
                break

        self.print_stats()
        return self.stats

    def review_file(self, path: Path, source: bytes, sites: Sequence[CallSite]) -> bool:
        """Resolve each site in source order, then apply the file's batch.

        Returns False when the user quit; the edits decided so far are still
        applied before returning.
        """
        batch: list[Edit] = []
        finished = True
        for site in sites:
            if not self._resolve_site(site, source, batch):
                finished = False
                break

        if apply_edits(path, batch):
            self.stats.files_modified += 1
        return finished

    def _resolve_site(self, site: CallSite, source: bytes, batch: list[Edit]) -> bool:
        while True:
            self._show_site(site)
            action = UserAction.ACCEPT if self.accept_all else self._prompt()

            if action is UserAction.QUIT:
                return False

            if action is UserAction.SKIP:
                self.stats.call_sites_skipped += 1
                self._write("Skipped\n")
                return True

            if action is UserAction.ACCEPT_ALL:
                self.accept_all = True

            value = self.config.default_value
            if action is UserAction.EDIT:
                try:
                    value = self.terminal.read_line("Enter value: ")
                except EOFError:
                    return False
                if value is None or not value.strip():
                    continue
                value = value.strip()

            self._record(site, source, value, batch)
            return True

    def _prompt(self) -> UserAction:
        p = self.palette
        choices = [f"[{p.green}a{p.reset}]ccept"]
        if self.config.mode is Mode.ADD:
            choices.append(f"[{p.cyan}e{p.reset}]dit")
        choices.extend(
            [
                f"[{p.yellow}s{p.reset}]kip",
                f"[{p.green}A{p.reset}]ll",
                f"[{p.red}q{p.reset}]uit",
            ]
        )
        self._write("\n" + "  ".join(choices) + ": ")

        while True:
            try:
                key = self.terminal.read_key()
            except EOFError:
                self._write("\n")
                return UserAction.QUIT
            action = UserAction.from_key(key)
            if action is None:
                continue
            if action is UserAction.EDIT and self.config.mode is not Mode.ADD:
                continue
            self._write(f"{key if key.isprintable() else ''}\n")
            return action

    def _show_site(self, site: CallSite) -> None:
        p = self.palette
        proposed = render_proposed_call(
            site,
            self.config.mode,
            self.config.position,
            self.config.default_value,
            highlight_start=p.green,
            highlight_end=p.reset,
        )
        self._write(
            f"\n{p.cyan}{site.file_path}{p.reset}:{site.line}:{site.column}\n"
            f"\nCurrent:  {p.dim}{site.text}{p.reset}\n"
            f"Proposed: {proposed}\n"
        )

    def _record(
        self, site: CallSite, source: bytes, value: str | None, batch: list[Edit]
    ) -> None:
        edit = generate_edit(
            site, source, self.config.mode, self.config.position, value
        )
        if edit is None:
            self._write("Nothing to remove\n")
            return

        if any(edit.overlaps(pending) for pending in batch):
            logger.debug("Edit %r at %s overlaps the batch", edit, site.location())
            self._warn(f"{site.location()} overlaps an accepted edit, skipped")
            self.stats.call_sites_skipped += 1
            return

        batch.append(edit)
        self.stats.call_sites_modified += 1
        logger.debug("Queued %r for %s", edit, site.location())
        p = self.palette
        self._write(f"{p.green}Updated{p.reset}\n")

    def print_stats(self) -> None:
        p = self.palette
        s = self.stats
        self._write(
            f"\n{p.bold}Done.{p.reset} Modified {s.files_modified} file(s), "
            f"updated {s.call_sites_modified} call site(s), "
            f"skipped {s.call_sites_skipped}.\n"
        )
        if s.files_with_errors > 0:
            self._warn(f"{s.files_with_errors} file(s) had errors and were skipped.")


__all__ = ["ReviewSession", "count_call_sites"]
