#!/usr/bin/env python3
"""andersen/main.py — CLI entry-point for the points-to analyzer.

Usage examples
--------------
    # Analyse a program and write the points-to graph as DOT
    andersen program.txt pointsto.gv

    # Include copy edges (static and solver-derived) in the graph
    andersen program.txt pointsto.gv --constraints

    # JSON or plain-text output instead of DOT
    andersen program.txt pointsto.json --format json

    # Also render the DOT graph to SVG (needs the ``viz`` extra)
    andersen program.txt pointsto.gv --render svg      # → pointsto.svg

Exit codes
----------
    0   Success; the output file was written.
    1   The input program has a syntax error.  No output is written.
    2   Infrastructure failure (missing file, missing dependency, ...).
    3   Internal solver error.  No output is written.

The module doubles as ``python -m andersen`` via ``andersen/__main__.py``.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .analysis import PointsToAnalysis
from .errors import AndersenError, SolverInvariantError, StatementSyntaxError
from .export import WRITERS, render
from .solver import SolverConfig, WorklistStrategy

_log = logging.getLogger("andersen")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2
EXIT_INTERNAL: int = 3


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``andersen`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    root = logging.getLogger("andersen")
    root.setLevel(level)
    if not any(getattr(h, "_andersen_cli", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        handler._andersen_cli = True  # type: ignore[attr-defined]
        root.addHandler(handler)


def _resolve_path(raw: str, label: str = "file") -> Path:
    """Resolve *raw* to an absolute ``Path``, raising on missing files."""
    p = Path(raw).expanduser().resolve()
    if not p.is_file():
        _log.error("%s not found: %s", label, p)
        raise SystemExit(EXIT_INFRA)
    return p


def _import_graphviz():
    """Import ``graphviz`` with a friendly error on failure."""
    try:
        import graphviz
        return graphviz
    except ImportError:
        _log.error(
            "graphviz is not installed.  "
            "Install with: pip install 'andersen[viz]'"
        )
        raise SystemExit(EXIT_INFRA)


def _render_target(out: Path, fmt: str) -> Path:
    """Image path for ``--render``; never the output file itself."""
    image = out.with_suffix(f".{fmt}")
    if image == out:
        image = out.with_name(f"{out.name}.{fmt}")
    return image


def _non_negative_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {raw!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return value


def _write_output(dest: str, text: str) -> Path:
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


# ===========================================================================
# Command
# ===========================================================================

def run(args: argparse.Namespace) -> int:
    """Parse → build → solve → export, then write the output file.

    The output file is only touched after the whole analysis succeeded.
    """
    input_path = _resolve_path(args.input, "input program")
    if args.render:
        _import_graphviz()

    config = SolverConfig(
        strategy=WorklistStrategy(args.strategy),
        max_iterations=args.max_iterations,
    )

    t0 = time.monotonic()
    try:
        pta = PointsToAnalysis.from_file(input_path, config)
        result = pta.run()
    except StatementSyntaxError as exc:
        print(exc.to_gcc_format(), file=sys.stderr)
        return EXIT_ERROR
    except SolverInvariantError as exc:
        print(exc.to_gcc_format(), file=sys.stderr)
        return EXIT_INTERNAL
    except (OSError, UnicodeDecodeError) as exc:
        _log.error("Cannot read %s: %s", input_path, exc)
        return EXIT_INFRA

    _log.info("Analysed %d variable(s) in %.3fs (%d iterations)",
              len(pta.graph), time.monotonic() - t0, result.iterations)

    text = pta.format(args.format, include_constraints=args.constraints)
    try:
        out = _write_output(args.output, text)
    except OSError as exc:
        _log.error("Cannot write %s: %s", args.output, exc)
        return EXIT_INFRA
    _log.info("Wrote %s", out)

    if args.render:
        dot = text if args.format == "dot" else pta.to_dot(include_constraints=args.constraints)
        try:
            render(dot, _render_target(out, args.render), fmt=args.render)
        except Exception as exc:
            _log.error("Rendering failed: %s", exc)
            return EXIT_INFRA

    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="andersen",
        description="Andersen-style points-to analysis with graph output.",
    )
    parser.add_argument("input", help="program file of pointer statements")
    parser.add_argument("output", help="file to write the points-to graph to")
    parser.add_argument(
        "--format",
        choices=sorted(WRITERS),
        default="dot",
        help="output format (default: dot)",
    )
    parser.add_argument(
        "--constraints",
        action="store_true",
        help="also draw copy edges of the constraint graph",
    )
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in WorklistStrategy],
        default=WorklistStrategy.FIFO.value,
        help="worklist pop order; does not change the result (default: fifo)",
    )
    parser.add_argument(
        "--max-iterations",
        type=_non_negative_int,
        default=None,
        metavar="N",
        help="override the derived worklist iteration bound",
    )
    parser.add_argument(
        "--render",
        metavar="FMT",
        default=None,
        help="also render the graph with Graphviz (e.g. svg, png)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="increase log verbosity (-v info, -vv debug)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    try:
        return run(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA
    except AndersenError as exc:
        print(exc.to_gcc_format(), file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
