"""memtrace/assembler.py – Identifier assignment and thread partitioning.

Identifiers are assigned left to right from a counter starting at 0.
The counter does not advance after an atomic LOAD, so the load shares
its identifier with the atomic STORE that follows it: an atomic
load-store pair is one logical operation under one identifier.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from memtrace.instructions import Instruction, Opcode, RawInstruction

logger = logging.getLogger(__name__)

__all__ = ["assign_ids", "partition", "assemble"]


def assign_ids(raw: Iterable[RawInstruction]) -> List[Instruction]:
    """Assign trace-wide identifiers to *raw*, preserving order."""
    assigned: List[Instruction] = []
    counter = 0
    for instr in raw:
        assigned.append(instr.with_id(counter))
        if not (instr.atomic and instr.opcode is Opcode.LOAD):
            counter += 1
    logger.debug("assigned %d identifier(s) to %d instruction(s)",
                 counter, len(assigned))
    return assigned


def partition(instructions: Iterable[Instruction]) -> Dict[int, List[Instruction]]:
    """Group *instructions* by thread id, in ascending thread order.

    Each thread's list keeps the relative order of *instructions*; only
    thread ids that occur get an entry.
    """
    threads: Dict[int, List[Instruction]] = {}
    for instr in instructions:
        threads.setdefault(instr.thread, []).append(instr)
    return {tid: threads[tid] for tid in sorted(threads)}


def assemble(raw: Sequence[RawInstruction]
             ) -> Tuple[List[Instruction], Dict[int, List[Instruction]]]:
    """Assign identifiers, then partition the result by thread."""
    assigned = assign_ids(raw)
    return assigned, partition(assigned)
