"""
statements.py — Statement Model
===============================

The four constraint-generating pointer statements and the entities they
range over:

  - Base:    ``p = &a``  →  pts(p) ⊇ {obj(a)}
  - Simple:  ``p = q``   →  pts(p) ⊇ pts(q)
  - Load:    ``p = *q``  →  ∀o ∈ pts(q): pts(p) ⊇ pts(o)
  - Store:   ``*p = q``  →  ∀o ∈ pts(p): pts(o) ⊇ pts(q)

Load and Store are the *complex* kinds: their effect depends on the
points-to set of the dereferenced (pivot) variable.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from .errors import SourceSpan, StatementSyntaxError


class ConstraintKind(enum.Enum):
    """Classification of pointer statements."""
    BASE   = "base"      # p = &a
    SIMPLE = "simple"    # p = q
    LOAD   = "load"      # p = *q
    STORE  = "store"     # *p = q


@dataclass(frozen=True)
class Constraint:
    """
    One pointer statement, created once while reading the program.

    ``left`` and ``right`` are the identifiers as written; the ``*`` and
    ``&`` markers are folded into ``kind``.
    """

    kind: ConstraintKind
    left: str
    right: str
    line: int = 0
    column: int = 0

    @property
    def pivot(self) -> Optional[str]:
        """The dereferenced variable of a complex constraint, else ``None``."""
        if self.kind is ConstraintKind.LOAD:
            return self.right
        if self.kind is ConstraintKind.STORE:
            return self.left
        return None

    def __str__(self) -> str:
        if self.kind is ConstraintKind.BASE:
            return f"{self.left} = &{self.right}"
        if self.kind is ConstraintKind.LOAD:
            return f"{self.left} = *{self.right}"
        if self.kind is ConstraintKind.STORE:
            return f"*{self.left} = {self.right}"
        return f"{self.left} = {self.right}"


@dataclass(frozen=True)
class Variable:
    """A named abstract storage location with a dense integer id."""

    id: int
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class AbstractObject:
    """The storage named by a variable, as created by ``p = &a``."""

    var_id: int
    name: str

    def __str__(self) -> str:
        return self.name

    def __lt__(self, other: "AbstractObject") -> bool:
        return (self.name, self.var_id) < (other.name, other.var_id)


def classify(
    left: str,
    right: str,
    left_marker: str = "",
    right_marker: str = "",
    span: Optional[SourceSpan] = None,
    source_line: str = "",
) -> Constraint:
    """
    Classify a split statement into one of the four constraint kinds.

    ``left_marker`` is ``"*"`` or empty; ``right_marker`` is ``"&"``,
    ``"*"`` or empty.  Any other combination (``*p = &a``, ``*p = *q``)
    is not a statement of the language.
    """
    span = span or SourceSpan()

    kind: Optional[ConstraintKind] = None
    if not left_marker:
        if right_marker == "&":
            kind = ConstraintKind.BASE
        elif right_marker == "*":
            kind = ConstraintKind.LOAD
        elif not right_marker:
            kind = ConstraintKind.SIMPLE
    elif left_marker == "*" and not right_marker:
        kind = ConstraintKind.STORE

    if kind is None:
        written = f"{left_marker}{left} = {right_marker}{right}"
        raise StatementSyntaxError(
            f"unsupported statement '{written}'",
            span=span,
            text=written,
            source_line=source_line,
        )

    return Constraint(kind=kind, left=left, right=right, line=span.line, column=span.column)
