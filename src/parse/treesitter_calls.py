"""Tree-sitter based call-site extraction for Python files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tree_sitter import Language, Node, Parser
from tree_sitter_python import language as get_python_language

from edits.models import ArgSpan, CallSite

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_PARSER: Parser | None = None


class ExtractionError(Exception):
    """Raised when a source buffer cannot be turned into call-site records."""


@dataclass(frozen=True)
class ExtractionResult:
    call_sites: list[CallSite] = field(default_factory=list)
    has_errors: bool = False


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with Python language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_python_language())
        _PARSER = Parser(lang)

    return _PARSER


def _decode_node_text(source_bytes: bytes, node: Node) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf8", errors="ignore")


def _normalize_callee_expr(source_bytes: bytes, callee_node: Node | None) -> str:
    if callee_node is None:
        return "<complex_expr>"

    if callee_node.type == "identifier":
        return _decode_node_text(source_bytes, callee_node).strip()

    if callee_node.type == "attribute":
        object_node = callee_node.child_by_field_name("object")
        attribute_node = callee_node.child_by_field_name("attribute")

        normalized_object = _normalize_callee_expr(source_bytes, object_node)
        if attribute_node is None or attribute_node.type != "identifier":
            return "<attribute>"

        attr_name = _decode_node_text(source_bytes, attribute_node).strip()
        if normalized_object.startswith("<") and normalized_object.endswith(">"):
            return f"<attribute>.{attr_name}"
        return f"{normalized_object}.{attr_name}".strip()

    return f"<{callee_node.type}>"


def _callee_matches(source_bytes: bytes, callee_node: Node | None, fn_name: str) -> bool:
    """Match ``fn_name`` against a callee.

    A plain name matches ``fn_name(...)`` and ``anything.fn_name(...)``; a
    dotted name must equal the whole dotted callee expression.
    """
    if callee_node is None:
        return False

    if "." in fn_name:
        return _normalize_callee_expr(source_bytes, callee_node) == fn_name

    if callee_node.type == "identifier":
        return _decode_node_text(source_bytes, callee_node) == fn_name

    if callee_node.type == "attribute":
        attribute_node = callee_node.child_by_field_name("attribute")
        return (
            attribute_node is not None
            and _decode_node_text(source_bytes, attribute_node) == fn_name
        )

    return False


def _build_call_site(
    node: Node,
    arguments: Node,
    *,
    source_bytes: bytes,
    file_path: str,
    fn_name: str,
) -> CallSite:
    tokens = [child for child in arguments.children if child.type != "comment"]
    lparen = tokens[0]
    rparen = tokens[-1]

    arg_spans = tuple(
        ArgSpan(start=child.start_byte, end=child.end_byte)
        for child in tokens[1:-1]
        if child.is_named
    )

    trailing_comma_offset: int | None = None
    if arg_spans and len(tokens) >= 3 and tokens[-2].type == ",":
        trailing_comma_offset = tokens[-2].start_byte

    return CallSite(
        file_path=file_path,
        line=lparen.start_point[0] + 1,
        column=lparen.start_point[1] + 1,
        start_offset=node.start_byte,
        lparen_offset=lparen.start_byte,
        rparen_offset=rparen.start_byte,
        arg_spans=arg_spans,
        trailing_comma_offset=trailing_comma_offset,
        raw=source_bytes[node.start_byte : rparen.end_byte],
        fn_name=fn_name,
    )


def _traverse_calls(
    node: Node,
    *,
    source_bytes: bytes,
    file_path: str,
    fn_name: str,
    out_sites: list[CallSite],
) -> None:
    if node.type == "call":
        callee_node = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if _callee_matches(source_bytes, callee_node, fn_name):
            if arguments is None or arguments.type != "argument_list":
                logger.debug(
                    "Skipping call without an argument list at %s:%d",
                    file_path,
                    node.start_point[0] + 1,
                )
            elif arguments.has_error or arguments.children[-1].is_missing:
                logger.debug(
                    "Skipping malformed call at %s:%d",
                    file_path,
                    node.start_point[0] + 1,
                )
            else:
                out_sites.append(
                    _build_call_site(
                        node,
                        arguments,
                        source_bytes=source_bytes,
                        file_path=file_path,
                        fn_name=_normalize_callee_expr(source_bytes, callee_node),
                    )
                )

    for child in node.children:
        _traverse_calls(
            child,
            source_bytes=source_bytes,
            file_path=file_path,
            fn_name=fn_name,
            out_sites=out_sites,
        )


def _check_decodable(source_bytes: bytes, file_path: str) -> None:
    if b"\x00" in source_bytes:
        msg = f"{file_path} looks like a binary file"
        raise ExtractionError(msg)
    try:
        source_bytes.decode("utf8")
    except UnicodeDecodeError as exc:
        msg = f"{file_path} is not valid UTF-8: {exc.reason} at byte {exc.start}"
        raise ExtractionError(msg) from exc


def extract_call_sites(
    source_bytes: bytes, file_path: str, fn_name: str
) -> ExtractionResult:
    """Extract every call of ``fn_name`` from a Python source buffer.

    Call sites are returned in source order. Offsets in each record are
    byte offsets into ``source_bytes``; line and column are 1-based and
    point at the opening parenthesis.

    Raises:
        ExtractionError: If the buffer is binary or not valid UTF-8.
    """
    _check_decodable(source_bytes, file_path)

    parser = _get_parser()
    tree = parser.parse(source_bytes)
    root_node = tree.root_node

    sites: list[CallSite] = []
    _traverse_calls(
        root_node,
        source_bytes=source_bytes,
        file_path=file_path,
        fn_name=fn_name,
        out_sites=sites,
    )
    logger.debug("Found %d call(s) to %s in %s", len(sites), fn_name, file_path)
    return ExtractionResult(call_sites=sites, has_errors=root_node.has_error)


def read_source(path: Path) -> bytes:
    """Read the exact bytes of a source file."""
    return path.read_bytes()


__all__ = [
    "ExtractionError",
    "ExtractionResult",
    "extract_call_sites",
    "read_source",
]
