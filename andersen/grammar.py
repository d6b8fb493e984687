"""
grammar.py — Statement Front-End (Parsimonious PEG)
===================================================

Turns program text into a list of :class:`~andersen.statements.Constraint`.

Accepted forms, whitespace-insensitive between tokens, ``;`` optional,
any number of statements per line::

    p = &a        # base
    p = q         # copy
    p = *q        # load
    *p = q        # store

Usage::

    from andersen.grammar import parse_statements

    constraints = parse_statements("p = &a; q = p\\n*q = p")

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import bisect
import logging
from pathlib import Path
from typing import List, Union

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

from .errors import SourceSpan, StatementSyntaxError
from .statements import Constraint, classify

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# 1. Grammar
# ---------------------------------------------------------------------------

# The grammar accepts any marker pair; the visitor rejects ``*p = &a``
# and ``*p = *q`` with a precise message.
STATEMENT_GRAMMAR = Grammar(r'''
    program         = _ entry*
    entry           = statement _ terminator?
    terminator      = ";" _

    statement       = target _ "=" _ source
    target          = deref_marker? _ identifier
    source          = source_marker? _ identifier

    deref_marker    = "*"
    source_marker   = "&" / "*"

    identifier      = ~r"[^\s=&*;#]+"

    _               = (whitespace / comment)*
    whitespace      = ~r"\s+"
    comment         = ~r"#[^\n]*"
''')


# ---------------------------------------------------------------------------
# 2. Parse tree → constraints
# ---------------------------------------------------------------------------

class _SourceIndex:
    """Maps string offsets to 1-based (line, column) pairs."""

    def __init__(self, text: str) -> None:
        self.text = text
        self._line_starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                self._line_starts.append(i + 1)

    def position(self, offset: int) -> tuple:
        line_idx = bisect.bisect_right(self._line_starts, offset) - 1
        return line_idx + 1, offset - self._line_starts[line_idx] + 1

    def line_text(self, line: int) -> str:
        start = self._line_starts[line - 1]
        end = self.text.find("\n", start)
        if end < 0:
            end = len(self.text)
        return self.text[start:end].rstrip("\r")


class StatementBuilder(NodeVisitor):
    """Transforms a Parsimonious parse tree into constraints."""

    unwrapped_exceptions = (StatementSyntaxError,)

    def __init__(self, source: _SourceIndex, filename: str = "") -> None:
        self._source = source
        self._filename = filename

    def generic_visit(self, node, visited_children):
        return visited_children or node

    def visit_program(self, node, visited_children):
        _, entries = visited_children
        if not isinstance(entries, list):
            return []
        return [c for c in entries if isinstance(c, Constraint)]

    def visit_entry(self, node, visited_children):
        return visited_children[0]

    def visit_statement(self, node, visited_children):
        (left_marker, left), _, _, _, (right_marker, right) = visited_children
        line, column = self._source.position(node.start)
        return classify(
            left,
            right,
            left_marker=left_marker,
            right_marker=right_marker,
            span=SourceSpan(file=self._filename, line=line, column=column),
            source_line=self._source.line_text(line),
        )

    def visit_target(self, node, visited_children):
        return node.children[0].text, visited_children[2]

    def visit_source(self, node, visited_children):
        return node.children[0].text, visited_children[2]

    def visit_identifier(self, node, visited_children):
        return node.text


# ---------------------------------------------------------------------------
# 3. Entry points
# ---------------------------------------------------------------------------

def _blame_offset(text: str, pos: int) -> int:
    """
    Offset of the statement to report for a parse failure at *pos*.

    A statement may span lines, so ``r =`` followed by a line starting
    with an identifier swallows that identifier and parsing stops on the
    next line.  When the last statement read ends on the line of the
    failure but began on an earlier one, it is reported instead.
    """
    try:
        prefix = STATEMENT_GRAMMAR.parse(text[:pos])
    except ParseError:
        return pos
    entries = prefix.children[1].children
    if not entries:
        return pos
    statement = entries[-1].children[0]
    if "\n" in statement.text and "\n" not in text[statement.end:pos]:
        return statement.start
    return pos


def parse_statements(text: str, filename: str = "") -> List[Constraint]:
    """
    Parse *text* into constraints, in source order.

    Raises
    ------
    StatementSyntaxError
        At the first statement that matches none of the four forms.
        Nothing after it is examined.
    """
    source = _SourceIndex(text)
    try:
        tree = STATEMENT_GRAMMAR.parse(text)
    except ParseError as exc:
        pos = _blame_offset(text, max(exc.pos, 0))
        line, column = source.position(pos)
        offending = source.line_text(line)
        bad = offending[column - 1:].strip() or text[pos:pos + 20].strip()
        raise StatementSyntaxError(
            f"malformed statement '{bad}'" if bad else "unexpected end of input",
            span=SourceSpan(file=filename, line=line, column=column),
            text=bad,
            source_line=offending,
        ) from None

    constraints = StatementBuilder(source, filename).visit(tree)
    logger.debug("Parsed %d statement(s) from %s", len(constraints), filename or "<string>")
    return constraints


def parse_file(path: Union[str, Path]) -> List[Constraint]:
    """Read a UTF-8 program file and parse it."""
    p = Path(path)
    return parse_statements(p.read_text(encoding="utf-8"), filename=str(path))
