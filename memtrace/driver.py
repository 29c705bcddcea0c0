"""memtrace/driver.py – Full parse pipeline.

``recognise`` → ``assign_ids`` → ``sanity_check`` → ``partition``.

The first error from any stage aborts the parse; a partial trace is
never returned.  :func:`parse_trace` raises it, :func:`try_parse_trace`
returns it inside a :class:`ParseOutcome`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from memtrace.assembler import assign_ids, partition
from memtrace.errors import TraceError
from memtrace.grammar import recognise
from memtrace.instructions import Instruction
from memtrace.sanity import sanity_check

logger = logging.getLogger(__name__)

__all__ = ["Trace", "ParseOutcome", "parse_trace", "try_parse_trace",
           "parse_trace_file"]

#: Thread id → that thread's instructions in program order.
Trace = Dict[int, List[Instruction]]


@dataclass(frozen=True)
class ParseOutcome:
    """Either a validated trace or the error that rejected it."""

    trace: Optional[Trace] = None
    error: Optional[TraceError] = None

    def __post_init__(self) -> None:
        if (self.trace is None) == (self.error is None):
            raise ValueError("exactly one of trace and error must be set")

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Trace:
        """Return the trace, or raise the error that rejected it."""
        if self.error is not None:
            raise self.error
        return self.trace


def parse_trace(text: str) -> Trace:
    """Parse and validate a complete trace.

    Returns
    -------
    dict
        Thread id (ascending) → ordered instructions of that thread.

    Raises
    ------
    GrammarError, AtomicAddressMismatch, InitialValueWritten, DuplicateStoreValue
        The first failure of any stage.
    """
    raw = recognise(text)
    assigned = sanity_check(assign_ids(raw))
    trace = partition(assigned)
    logger.debug("parsed trace: %d instruction(s) on %d thread(s)",
                 len(assigned), len(trace))
    return trace


def try_parse_trace(text: str) -> ParseOutcome:
    """Like :func:`parse_trace`, but return failures instead of raising."""
    try:
        return ParseOutcome(trace=parse_trace(text))
    except TraceError as exc:
        logger.debug("trace rejected: %s %s", exc.code, exc)
        return ParseOutcome(error=exc)


def parse_trace_file(path: Union[str, Path]) -> Trace:
    """Read a UTF-8 trace file and parse it with :func:`parse_trace`."""
    text = Path(path).read_text(encoding="utf-8")
    return parse_trace(text)
