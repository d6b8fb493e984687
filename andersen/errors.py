"""
errors.py — Error Types and Diagnostics for the Points-To Analyzer
==================================================================

Error hierarchy::

    AndersenError (base)
    ├── StatementSyntaxError   - input matches none of the statement forms
    └── SolverInvariantError   - the fixpoint loop broke one of its own bounds

Error codes follow the pattern ``PTA-NNNN``:

  - 1000-1999: syntax errors (front-end)
  - 2000-2999: semantic notes (informational only)
  - 9000-9999: internal solver errors

Example::

    from andersen.errors import StatementSyntaxError, SourceSpan

    try:
        parse_statements(text, filename="prog.txt")
    except StatementSyntaxError as exc:
        print(exc.to_gcc_format())
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# 1. Phases and codes
# ---------------------------------------------------------------------------

@unique
class ErrorPhase(Enum):
    """Pipeline phase in which an error was detected."""
    PARSE = "parse"
    BUILD = "build"
    SOLVE = "solve"


class ErrorCode:
    """
    Structured ``PTA-NNNN`` error code.

    Codes compare equal to their string form, so tests and callers can
    write ``exc.code == "PTA-1001"``.
    """

    __slots__ = ("prefix", "number", "phase", "summary")

    def __init__(self, number: int, phase: ErrorPhase, summary: str, prefix: str = "PTA") -> None:
        self.prefix = prefix
        self.number = number
        self.phase = phase
        self.summary = summary

    @property
    def code(self) -> str:
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.phase.name})"

    def __hash__(self) -> int:
        return hash((self.prefix, self.number))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.prefix == other.prefix and self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class ErrorCodes:
    """Predefined error codes."""

    SYNTAX_ERROR = ErrorCode(1001, ErrorPhase.PARSE, "statement matches no production")
    # Never raised: undefined names are implicit declarations.
    UNDEFINED_REFERENCE = ErrorCode(2001, ErrorPhase.BUILD, "name used before any definition")
    ITERATION_BOUND_EXCEEDED = ErrorCode(9001, ErrorPhase.SOLVE, "worklist exceeded its iteration bound")
    FIXPOINT_VIOLATED = ErrorCode(9002, ErrorPhase.SOLVE, "final state violates a constraint")


# ---------------------------------------------------------------------------
# 2. Source spans
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceSpan:
    """A position in an input file.  Lines and columns are 1-based; 0 means unknown."""

    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if not self.file and self.line == 0:
            return "<unknown location>"

        parts = []
        if self.file:
            parts.append(self.file)
        if self.line > 0:
            parts.append(str(self.line))
            if self.column > 0:
                parts.append(str(self.column))

        return ":".join(parts)


# ---------------------------------------------------------------------------
# 3. Exceptions
# ---------------------------------------------------------------------------

class AndersenError(Exception):
    """
    Base exception for all analyzer errors.

    Carries a structured code and location so that the CLI can print a
    GCC-style diagnostic or a JSON record.
    """

    default_code: ErrorCode = ErrorCodes.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        span: Optional[SourceSpan] = None,
        hint: str = "",
        source_line: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.span = span or SourceSpan()
        self.hint = hint
        self.source_line = source_line

    @property
    def severity(self) -> str:
        return "error"

    def to_gcc_format(self) -> str:
        """Format as ``file:line:col: error: message [PTA-NNNN]`` plus context lines."""
        lines = [f"{self.span}: {self.severity}: {self.message} [{self.code}]"]

        if self.source_line:
            lines.append(f"    {self.source_line}")
            if self.span.column > 0:
                lines.append(f"    {' ' * (self.span.column - 1)}^")

        if self.hint:
            lines.append(f"hint: {self.hint}")

        return "\n".join(lines)

    def to_json(self) -> Dict[str, Any]:
        return {
            "code": self.code.code,
            "message": self.message,
            "severity": self.severity,
            "phase": self.code.phase.value,
            "location": {
                "file": self.span.file,
                "line": self.span.line,
                "column": self.span.column,
            },
            "hint": self.hint,
        }

    def __str__(self) -> str:
        return self.to_gcc_format()


class StatementSyntaxError(AndersenError):
    """A statement matches none of the four productions.  Never recovered."""

    default_code = ErrorCodes.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        text: str = "",
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault(
            "hint",
            "expected one of: 'p = &a', 'p = q', 'p = *q', '*p = q'",
        )
        super().__init__(message, code=ErrorCodes.SYNTAX_ERROR, span=span, **kwargs)
        self.text = text


class SolverInvariantError(AndersenError):
    """
    The solver broke one of its own guarantees.

    Signals a bug in the solver, not a problem with the input program.
    """

    default_code = ErrorCodes.ITERATION_BOUND_EXCEEDED

    def __init__(self, message: str, code: Optional[ErrorCode] = None, **kwargs: Any) -> None:
        super().__init__(message, code=code or ErrorCodes.ITERATION_BOUND_EXCEEDED, **kwargs)

    @property
    def severity(self) -> str:
        return "internal error"
