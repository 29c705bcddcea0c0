"""memtrace/errors.py – Exception hierarchy for trace parsing.

Every failure in the pipeline is fatal: the first error raised by any
stage aborts the whole parse and no partial trace is produced.

Hierarchy
---------
::

    TraceError (base)
    ├── GrammarError           MTR-1000  input does not match the grammar
    ├── AtomicAddressMismatch  MTR-2000  atomic pair touches two addresses
    └── SanityError
        ├── InitialValueWritten   MTR-3000  a STORE writes the value 0
        └── DuplicateStoreValue   MTR-3001  an address is stored the same
                                            value twice

Each error carries a stable ``code`` so that callers (and the CLI) can
report it without matching on message text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from memtrace.instructions import Instruction

__all__ = [
    "TraceError",
    "GrammarError",
    "AtomicAddressMismatch",
    "SanityError",
    "InitialValueWritten",
    "DuplicateStoreValue",
]


class TraceError(Exception):
    """Base exception for all trace parsing errors."""

    code: str = "MTR-0000"


# ═══════════════════════════════════════════════════════════════════════
#  Recognition errors
# ═══════════════════════════════════════════════════════════════════════

def _line_col(text: str, position: int) -> tuple[int, int]:
    """Return the 1-based ``(line, column)`` of *position* in *text*."""
    line = text.count("\n", 0, position) + 1
    column = position - (text.rfind("\n", 0, position) + 1) + 1
    return line, column


class GrammarError(TraceError):
    """Raised when the input does not match the trace grammar.

    Attributes
    ----------
    position:
        0-based character offset into the input where matching failed.
    expected:
        Name of the grammar rule that could not be matched there.
    line, column:
        1-based location of *position*, for human-readable reports.
    """

    code = "MTR-1000"

    def __init__(self, position: int, expected: str, text: str = ""):
        self.position = position
        self.expected = expected
        self.text = text
        self.line, self.column = _line_col(text, position)
        message = (f"line {self.line}, column {self.column}: "
                   f"expected {expected}")
        if text:
            start = text.rfind("\n", 0, position) + 1
            end = text.find("\n", position)
            source_line = text[start:] if end < 0 else text[start:end]
            pointer = " " * (self.column - 1) + "^"
            message = f"{message}\n  {source_line}\n  {pointer}"
        super().__init__(message)


class AtomicAddressMismatch(TraceError):
    """Raised when the load and store of an atomic pair differ in address."""

    code = "MTR-2000"

    def __init__(self, thread: int, load_address: int, store_address: int,
                 position: int = -1):
        self.thread = thread
        self.load_address = load_address
        self.store_address = store_address
        self.position = position
        super().__init__(
            f"atomic load-store on thread {thread} reads v{load_address} "
            f"but writes v{store_address}"
        )


# ═══════════════════════════════════════════════════════════════════════
#  Sanity check errors
# ═══════════════════════════════════════════════════════════════════════

class SanityError(TraceError):
    """Base class for whole-trace invariant violations."""

    def __init__(self, message: str, instruction: "Instruction"):
        self.instruction = instruction
        super().__init__(message)


class InitialValueWritten(SanityError):
    """A STORE writes 0, the implicit initial value of every address."""

    code = "MTR-3000"

    def __init__(self, instruction: "Instruction"):
        super().__init__(
            f"instruction {instruction.id} on thread {instruction.thread} "
            f"stores the initial value 0 to v{instruction.address}",
            instruction,
        )


class DuplicateStoreValue(SanityError):
    """An address receives the same stored value more than once."""

    code = "MTR-3001"

    def __init__(self, instruction: "Instruction",
                 first: Optional["Instruction"] = None):
        self.first = first
        message = (f"value {instruction.value} is stored to "
                   f"v{instruction.address} more than once "
                   f"(instruction {instruction.id} on thread "
                   f"{instruction.thread}")
        if first is not None:
            message += f", first stored by instruction {first.id}"
        super().__init__(message + ")", instruction)
