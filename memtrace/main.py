#!/usr/bin/env python3
"""memtrace/main.py — command-line driver for the trace parser.

Usage examples
--------------
    # Validate a trace and print a per-thread summary
    memtrace check litmus.trace

    # Normalise a trace to canonical text
    memtrace check litmus.trace --format text -o litmus.norm

    # Dump the parsed trace as JSON or as an S-expression
    memtrace check litmus.trace --format json
    python -m memtrace check litmus.trace --format sexp

Exit codes
----------
    0   The trace parsed and passed both sanity checks.
    1   The trace was rejected (grammar or invariant violation).
    2   Infrastructure failure (missing file, unreadable input, etc.).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import Optional, Sequence, TextIO

from memtrace import __version__
from memtrace.driver import parse_trace
from memtrace.dump import summarise, trace_to_dict, trace_to_sexp, trace_to_text
from memtrace.errors import TraceError

_log = logging.getLogger("memtrace")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``memtrace`` logger.

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

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("memtrace")
    root.setLevel(level)
    root.addHandler(handler)


def _open_output(dest: Optional[str]) -> TextIO:
    """Return a writable text stream.

    *dest* ``None`` or ``"-"`` → ``sys.stdout``; otherwise open the path
    for writing (creating parent directories as needed).
    """
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


# ===========================================================================
# Subcommands
# ===========================================================================

def cmd_check(args: argparse.Namespace) -> int:
    """Parse and validate a trace file, then write it in the chosen format."""
    if args.trace_file == "-":
        source = sys.stdin.read()
        name = "<stdin>"
    else:
        path = Path(args.trace_file).expanduser().resolve()
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            _log.error("cannot read trace file %s: %s", path, exc)
            return EXIT_INFRA
        name = str(path)

    try:
        trace = parse_trace(source)
    except TraceError as exc:
        sys.stderr.write(f"{name}: error [{exc.code}]: {exc}\n")
        return EXIT_ERROR

    _log.info("%s: %d thread(s) accepted", name, len(trace))

    out = _open_output(args.output)
    try:
        if args.format == "json":
            out.write(json.dumps(trace_to_dict(trace), indent=2) + "\n")
        elif args.format == "sexp":
            out.write(trace_to_sexp(trace) + "\n")
        elif args.format == "text":
            out.write(trace_to_text(trace))
        else:
            summary = summarise(trace)
            out.write(summary + "\n" if summary else "empty trace\n")
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


# ===========================================================================
# Argument parser construction
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="memtrace",
        description=(
            "memtrace: parse and validate concurrent memory-access traces."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              memtrace check litmus.trace
              memtrace check litmus.trace --format json -o litmus.json
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    p_check = subparsers.add_parser(
        "check",
        help="Parse and validate a trace file.",
        description=(
            "Parse a trace, assign instruction identifiers, run the "
            "sanity checks and write the result."
        ),
    )
    p_check.add_argument(
        "trace_file",
        metavar="TRACE",
        help='Trace file ("-" for stdin).',
    )
    p_check.add_argument(
        "-f", "--format",
        choices=["summary", "text", "json", "sexp"],
        default="summary",
        help="Output format (default: summary).",
    )
    p_check.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Output file ("-" or omit for stdout).',
    )
    p_check.set_defaults(func=cmd_check)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the memtrace CLI and return its exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except OSError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())
