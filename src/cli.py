"""Command-line interface for argshift."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from edits.apply import OverlappingEditsError
from edits.models import Mode, Position
from review.session import ReviewSession, count_call_sites
from scan.files import find_python_files
from settings.config import ConfigError, RunConfig, load_config
from terminal.raw import NullTerminal, RawTerminal, choose_palette

_EXAMPLES = """\
modes:
  add:    --fn NAME --arg VALUE --pos N|last
  remove: --fn NAME --remove N|last

examples:
  argshift --fn connect --arg timeout --pos last --dir ./src
  argshift --fn render --arg request --pos 0
  argshift --fn fetch --remove 1 --dir ./lib
"""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="argshift",
        description=(
            "Add or remove one positional argument at every call site of a "
            "Python function, reviewing each change interactively."
        ),
        epilog=_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--fn",
        dest="fn_name",
        required=True,
        metavar="NAME",
        help="Name (or dotted path) of the function whose calls are edited",
    )
    mode_group = parser.add_mutually_exclusive_group(required=True)
    mode_group.add_argument(
        "--arg",
        dest="value",
        metavar="VALUE",
        help="Default value of the new argument (add mode)",
    )
    mode_group.add_argument(
        "--remove",
        metavar="N|last",
        help="Remove the argument at this position (remove mode)",
    )
    parser.add_argument(
        "--pos",
        metavar="N|last",
        help="Position of the new argument, 0-indexed or 'last' (add mode)",
    )
    parser.add_argument(
        "--dir",
        dest="directory",
        default=".",
        help="Directory to scan (default: .)",
    )
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Accept every call site without prompting",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colours",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log debug details to stderr",
    )
    return parser


def _parse_position(
    parser: argparse.ArgumentParser, text: str, option: str
) -> Position:
    try:
        return Position.parse(text)
    except ValueError as exc:
        parser.error(f"{option}: {exc}")
    raise AssertionError


def _build_run_config(
    parser: argparse.ArgumentParser, args: argparse.Namespace
) -> RunConfig:
    if args.value is not None:
        if args.pos is None:
            parser.error("--pos is required with --arg")
        mode = Mode.ADD
        position = _parse_position(parser, args.pos, "--pos")
    else:
        if args.pos is not None:
            parser.error("--pos cannot be combined with --remove")
        mode = Mode.REMOVE
        position = _parse_position(parser, args.remove, "--remove")

    try:
        return RunConfig(
            fn_name=args.fn_name,
            mode=mode,
            position=position,
            default_value=args.value,
            directory=Path(args.directory).expanduser(),
        )
    except ValidationError as exc:
        messages = "; ".join(error["msg"] for error in exc.errors())
        parser.error(messages)
    raise AssertionError


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _review(
    run_config: RunConfig,
    files: list[Path],
    *,
    unattended: bool,
    color: bool | None,
) -> int:
    palette = choose_palette(sys.stdout, color=color)

    if unattended:
        session = ReviewSession(
            run_config, NullTerminal(), palette=palette, accept_all=True
        )
        try:
            session.run(files)
        except (OSError, OverlappingEditsError) as exc:
            sys.stderr.write(f"Error during refactoring: {exc}\n")
            return 1
        return 0

    if not sys.stdin.isatty():
        sys.stderr.write(
            "Error: stdin is not a terminal. "
            "This tool requires interactive input (or --yes).\n"
        )
        return 1

    try:
        with RawTerminal() as terminal:
            session = ReviewSession(run_config, terminal, palette=palette)
            session.run(files)
    except (OSError, OverlappingEditsError) as exc:
        sys.stderr.write(f"Error during refactoring: {exc}\n")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    run_config = _build_run_config(parser, args)
    directory = run_config.directory

    try:
        project = load_config(directory)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    try:
        files = list(
            find_python_files(
                directory,
                include_patterns=project.include,
                exclude_patterns=project.exclude,
                nested_gitignore=project.nested_gitignore,
                skip_dirs=project.skip_dirs,
            )
        )
    except NotADirectoryError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    sys.stdout.write(f"\nScanning {directory} ...\n")
    if not files:
        sys.stdout.write(f"No .py files found in {directory}\n")
        return 0

    total_sites, matched_files = count_call_sites(files, run_config.fn_name)
    if total_sites == 0:
        sys.stdout.write(f"No call sites for '{run_config.fn_name}' found.\n")
        return 0

    sys.stdout.write(
        f"Found {total_sites} call site(s) in {matched_files} file(s).\n"
    )

    return _review(
        run_config,
        files,
        unattended=args.yes,
        color=False if args.no_color else project.color,
    )


if __name__ == "__main__":
    raise SystemExit(main())
