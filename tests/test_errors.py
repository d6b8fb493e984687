# tests/test_errors.py
"""
Tests for error codes, spans and diagnostic formatting.
"""

from andersen.errors import (
    AndersenError, ErrorCodes, ErrorPhase, SolverInvariantError, SourceSpan,
    StatementSyntaxError,
)


class TestErrorCodes:

    def test_code_strings(self):
        assert ErrorCodes.SYNTAX_ERROR.code == "PTA-1001"
        assert ErrorCodes.UNDEFINED_REFERENCE.code == "PTA-2001"
        assert ErrorCodes.ITERATION_BOUND_EXCEEDED.code == "PTA-9001"
        assert ErrorCodes.FIXPOINT_VIOLATED.code == "PTA-9002"

    def test_equality(self):
        assert ErrorCodes.SYNTAX_ERROR == "PTA-1001"
        assert ErrorCodes.SYNTAX_ERROR != "PTA-9001"
        assert ErrorCodes.SYNTAX_ERROR != ErrorCodes.FIXPOINT_VIOLATED
        assert len({ErrorCodes.SYNTAX_ERROR, ErrorCodes.SYNTAX_ERROR}) == 1

    def test_phases(self):
        assert ErrorCodes.SYNTAX_ERROR.phase is ErrorPhase.PARSE
        assert ErrorCodes.FIXPOINT_VIOLATED.phase is ErrorPhase.SOLVE


class TestSourceSpan:

    def test_full(self):
        assert str(SourceSpan("prog.txt", 3, 7)) == "prog.txt:3:7"

    def test_without_file(self):
        assert str(SourceSpan(line=2, column=1)) == "2:1"

    def test_unknown(self):
        assert str(SourceSpan()) == "<unknown location>"


class TestDiagnostics:

    def test_syntax_error_gcc_format(self):
        exc = StatementSyntaxError(
            "malformed statement 'foo bar'",
            span=SourceSpan("prog.txt", 3, 1),
            source_line="foo bar",
        )
        lines = exc.to_gcc_format().splitlines()
        assert lines[0] == "prog.txt:3:1: error: malformed statement 'foo bar' [PTA-1001]"
        assert lines[1] == "    foo bar"
        assert lines[2] == "    ^"
        assert lines[3].startswith("hint: expected one of")

    def test_caret_follows_column(self):
        exc = StatementSyntaxError("x", span=SourceSpan("f", 1, 5), source_line="p = q;;")
        assert exc.to_gcc_format().splitlines()[2] == "        ^"

    def test_custom_hint(self):
        exc = StatementSyntaxError("x", hint="try again")
        assert exc.hint == "try again"

    def test_solver_error(self):
        exc = SolverInvariantError("stuck")
        assert exc.code == "PTA-9001"
        assert exc.severity == "internal error"
        assert str(exc) == "<unknown location>: internal error: stuck [PTA-9001]"
        assert isinstance(exc, AndersenError)

    def test_to_json(self):
        exc = SolverInvariantError(
            "violated", code=ErrorCodes.FIXPOINT_VIOLATED, span=SourceSpan(line=4, column=2),
        )
        assert exc.to_json() == {
            "code": "PTA-9002",
            "message": "violated",
            "severity": "internal error",
            "phase": "solve",
            "location": {"file": "", "line": 4, "column": 2},
            "hint": "",
        }
