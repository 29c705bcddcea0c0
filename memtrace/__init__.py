"""memtrace — parser for concurrent memory-access traces.

Turns the textual description of a multi-threaded load/store trace into
validated instruction records grouped by thread, ready for a
memory-consistency checker.

Submodules
----------
instructions
    ``Opcode``, ``Access``, ``RawInstruction`` and ``Instruction``
    records, plus text rendering.
grammar
    PEG grammar and recognizer: text → raw instructions.
assembler
    Identifier assignment and per-thread partitioning.
sanity
    Whole-trace invariants (no store of 0, no repeated store value).
driver
    ``parse_trace`` / ``try_parse_trace``: the whole pipeline.
dump
    Text, JSON and S-expression output.
main
    ``memtrace`` command-line entry point.

Usage
-----
::

    from memtrace import parse_trace

    trace = parse_trace(open("litmus.trace").read())
    for tid, instrs in trace.items():
        ...
"""

from __future__ import annotations

__version__: str = "0.1.0"

from memtrace.driver import ParseOutcome, Trace, parse_trace, try_parse_trace
from memtrace.errors import (
    AtomicAddressMismatch,
    DuplicateStoreValue,
    GrammarError,
    InitialValueWritten,
    SanityError,
    TraceError,
)
from memtrace.grammar import parse_instruction_group, recognise
from memtrace.instructions import Access, Instruction, Opcode, RawInstruction

__all__: list[str] = [
    "__version__",
    "parse_trace",
    "try_parse_trace",
    "parse_instruction_group",
    "recognise",
    "ParseOutcome",
    "Trace",
    "Opcode",
    "Access",
    "RawInstruction",
    "Instruction",
    "TraceError",
    "GrammarError",
    "AtomicAddressMismatch",
    "SanityError",
    "InitialValueWritten",
    "DuplicateStoreValue",
]
