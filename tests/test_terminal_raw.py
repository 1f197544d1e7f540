from __future__ import annotations

import io
import os
from typing import TYPE_CHECKING

import pytest

from edits.models import Mode, Position
from review.session import ReviewSession
from settings.config import RunConfig
from terminal.raw import ESCAPE, RawTerminal

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    PipeTerminal = Callable[..., tuple[RawTerminal, io.StringIO]]


@pytest.fixture
def pipe_terminal() -> Iterator[PipeTerminal]:
    """Build a RawTerminal reading from a pipe pre-filled with ``data``.

    With ``close=True`` the write end is closed so reads past the data hit end
    of input; otherwise they time out like an idle keyboard.
    """
    opened: list[object] = []

    def _make(data: bytes, *, close: bool = True) -> tuple[RawTerminal, io.StringIO]:
        read_fd, write_fd = os.pipe()
        os.write(write_fd, data)
        stdin = os.fdopen(read_fd, "rb", buffering=0)
        opened.append(stdin)
        if close:
            os.close(write_fd)
        else:
            opened.append(write_fd)
        out = io.StringIO()
        return RawTerminal(stdin=stdin, stdout=out), out

    yield _make

    for item in opened:
        if isinstance(item, int):
            os.close(item)
        else:
            item.close()


def test_read_line_returns_text_on_enter(pipe_terminal: PipeTerminal) -> None:
    terminal, out = pipe_terminal(b"abc\r")

    assert terminal.read_line("Enter value: ") == "abc"
    assert out.getvalue() == "Enter value: abc\n"


def test_read_line_accepts_newline_as_enter(pipe_terminal: PipeTerminal) -> None:
    terminal, _ = pipe_terminal(b"x\n")

    assert terminal.read_line() == "x"


def test_read_line_backspace_removes_last_character(
    pipe_terminal: PipeTerminal,
) -> None:
    terminal, out = pipe_terminal(b"abx\x7fc\r")

    assert terminal.read_line() == "abc"
    assert "\b \b" in out.getvalue()


def test_backspace_on_empty_buffer_is_ignored(pipe_terminal: PipeTerminal) -> None:
    terminal, out = pipe_terminal(b"\x08\x08ok\r")

    assert terminal.read_line() == "ok"
    assert "\b" not in out.getvalue()


def test_read_line_ctrl_c_cancels(pipe_terminal: PipeTerminal) -> None:
    terminal, _ = pipe_terminal(b"ab\x03")

    assert terminal.read_line() is None


def test_read_line_lone_escape_cancels(pipe_terminal: PipeTerminal) -> None:
    terminal, _ = pipe_terminal(b"ab\x1b", close=False)

    assert terminal.read_line() is None


def test_escape_followed_by_a_letter_cancels_and_keeps_the_letter(
    pipe_terminal: PipeTerminal,
) -> None:
    terminal, _ = pipe_terminal(b"ab\x1bq")

    assert terminal.read_line() is None
    assert terminal.read_key() == "q"


@pytest.mark.parametrize(
    "sequence",
    [b"\x1b[A", b"\x1b[D", b"\x1bOC", b"\x1b[1;5D", b"\x1b[3~"],
)
def test_read_line_ignores_cursor_and_function_keys(
    pipe_terminal: PipeTerminal, sequence: bytes
) -> None:
    terminal, out = pipe_terminal(b"a" + sequence + b"b\r")

    assert terminal.read_line() == "ab"
    assert ESCAPE not in out.getvalue()


def test_read_line_decodes_multibyte_utf8(pipe_terminal: PipeTerminal) -> None:
    terminal, out = pipe_terminal("héllo→".encode() + b"\r")

    assert terminal.read_line() == "héllo→"
    assert "héllo→" in out.getvalue()


def test_read_line_raises_at_end_of_input(pipe_terminal: PipeTerminal) -> None:
    terminal, _ = pipe_terminal(b"abc")

    with pytest.raises(EOFError):
        terminal.read_line()


def test_read_key_returns_single_keys(pipe_terminal: PipeTerminal) -> None:
    terminal, _ = pipe_terminal("aAé".encode())

    assert [terminal.read_key() for _ in range(3)] == ["a", "A", "é"]
    with pytest.raises(EOFError):
        terminal.read_key()


def test_read_key_returns_arrow_key_as_one_sequence(
    pipe_terminal: PipeTerminal,
) -> None:
    terminal, _ = pipe_terminal(b"\x1b[As")

    assert terminal.read_key() == "\x1b[A"
    assert terminal.read_key() == "s"


def test_read_key_lone_escape(pipe_terminal: PipeTerminal) -> None:
    terminal, _ = pipe_terminal(b"\x1b", close=False)

    assert terminal.read_key() == ESCAPE


def test_escape_at_end_of_input_is_a_lone_escape(pipe_terminal: PipeTerminal) -> None:
    terminal, _ = pipe_terminal(b"\x1b")

    assert terminal.read_key() == ESCAPE
    with pytest.raises(EOFError):
        terminal.read_key()


def test_context_manager_is_a_no_op_off_a_tty(pipe_terminal: PipeTerminal) -> None:
    terminal, _ = pipe_terminal(b"k")

    assert not terminal.is_tty
    with terminal as entered:
        assert entered.read_key() == "k"


def _add_config(root: Path) -> RunConfig:
    return RunConfig(
        fn_name="foo",
        mode=Mode.ADD,
        position=Position.last(),
        default_value="x",
        directory=root,
    )


@pytest.mark.parametrize(
    "keys",
    [
        pytest.param(b"e\x1b[A\x1bsss", id="arrow-while-editing"),
        pytest.param(b"\x1b[Asss", id="arrow-at-prompt"),
        pytest.param(b"\x1bOAsss", id="ss3-arrow-at-prompt"),
    ],
)
def test_arrow_keys_never_choose_a_review_action(
    tmp_path: Path, pipe_terminal: PipeTerminal, keys: bytes
) -> None:
    path = tmp_path / "mod.py"
    path.write_text("foo(a)\nfoo(b)\nfoo(c)\n", encoding="utf-8")
    terminal, _ = pipe_terminal(keys)
    session = ReviewSession(_add_config(tmp_path), terminal, out=io.StringIO())

    stats = session.run([path])

    assert path.read_text(encoding="utf-8") == "foo(a)\nfoo(b)\nfoo(c)\n"
    assert not session.accept_all
    assert stats.call_sites_skipped == 3
    assert stats.call_sites_modified == 0
