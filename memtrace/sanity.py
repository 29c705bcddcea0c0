"""memtrace/sanity.py – Whole-trace invariants.

Two invariants must hold over the assembled trace before it is handed
to a consumer:

1. No STORE writes 0.  Every address implicitly starts at 0, and that
   value may only be observed by a LOAD.
2. No address is stored the same value twice.

Both checks are pure functions over the finished instruction sequence.
"""

from __future__ import annotations

import logging
from typing import Dict, Sequence, Tuple

from memtrace.errors import DuplicateStoreValue, InitialValueWritten
from memtrace.instructions import Instruction

logger = logging.getLogger(__name__)

__all__ = ["check_initial_values", "check_unique_stores", "sanity_check"]

#: Value every address holds before the first store.
INITIAL_VALUE = 0


def check_initial_values(instructions: Sequence[Instruction]) -> None:
    """Raise :class:`InitialValueWritten` for the first STORE of 0."""
    for instr in instructions:
        if instr.is_store() and instr.value == INITIAL_VALUE:
            raise InitialValueWritten(instr)


def check_unique_stores(instructions: Sequence[Instruction]) -> None:
    """Raise :class:`DuplicateStoreValue` for the first repeated (address, value) store."""
    seen: Dict[Tuple[int, int], Instruction] = {}
    for instr in instructions:
        if not instr.is_store():
            continue
        key = (instr.address, instr.value)
        first = seen.get(key)
        if first is not None:
            raise DuplicateStoreValue(instr, first)
        seen[key] = instr


def sanity_check(instructions: Sequence[Instruction]) -> Sequence[Instruction]:
    """Validate both invariants and return *instructions* unchanged."""
    check_initial_values(instructions)
    check_unique_stores(instructions)
    logger.debug("sanity checks passed for %d instruction(s)", len(instructions))
    return instructions
