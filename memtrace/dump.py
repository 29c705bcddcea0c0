"""memtrace/dump.py – Serialising a parsed trace.

Three output forms, used by the ``memtrace check`` command:

* text – canonical trace text that parses back to the same trace
* dict – JSON-ready nested dictionaries
* sexp – an S-expression, ``(trace (thread 0 (store 0 1 1) ...) ...)``
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

import sexpdata
from sexpdata import Symbol

from memtrace.instructions import Instruction, Opcode, format_trace

__all__ = ["flatten", "trace_to_text", "trace_to_dict", "trace_to_sexp",
           "summarise"]


def flatten(trace: Mapping[int, Sequence[Instruction]]) -> List[Instruction]:
    """Return all instructions of *trace* ordered by identifier.

    Instructions that share an identifier (an atomic pair) keep their
    load-before-store order.
    """
    instrs = [i for thread in trace.values() for i in thread]
    return sorted(instrs, key=lambda i: (i.id, i.opcode is Opcode.STORE))


def trace_to_text(trace: Mapping[int, Sequence[Instruction]]) -> str:
    return format_trace(flatten(trace))


def trace_to_dict(trace: Mapping[int, Sequence[Instruction]]) -> Dict[str, Any]:
    return {
        "threads": {str(tid): [i.to_dict() for i in instrs]
                    for tid, instrs in trace.items()},
    }


def _instr_sexp(instr: Instruction) -> list:
    form: list = [Symbol(instr.opcode.value), instr.id]
    if instr.access is not None:
        form += [instr.access.address, instr.access.value]
    if instr.atomic:
        form.append(Symbol("atomic"))
    return form


def trace_to_sexp(trace: Mapping[int, Sequence[Instruction]]) -> str:
    forms: list = [Symbol("trace")]
    for tid, instrs in trace.items():
        forms.append([Symbol("thread"), tid] + [_instr_sexp(i) for i in instrs])
    return sexpdata.dumps(forms)


def summarise(trace: Mapping[int, Sequence[Instruction]]) -> str:
    """One line per thread: instruction count and operation mix."""
    lines = []
    for tid, instrs in trace.items():
        counts = {op: sum(1 for i in instrs if i.opcode is op) for op in Opcode}
        atomics = sum(1 for i in instrs if i.atomic) // 2
        lines.append(
            f"thread {tid}: {len(instrs)} instruction(s) "
            f"({counts[Opcode.LOAD]} load, {counts[Opcode.STORE]} store, "
            f"{counts[Opcode.SYNC]} sync, {atomics} atomic pair)"
        )
    return "\n".join(lines)
