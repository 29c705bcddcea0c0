"""memtrace/instructions.py – Instruction records of a memory-access trace.

Two record types model an instruction's lifetime:

* :class:`RawInstruction` – produced by the recognizer; has no identifier.
* :class:`Instruction` – produced by the assembler via
  :meth:`RawInstruction.with_id`; carries its trace-wide identifier.

LOAD and STORE carry an :class:`Access` payload (address + value); SYNC
carries none.  The payload shape is checked on construction, so a
record with a meaningless address cannot exist.

Both records are frozen dataclasses and are never mutated after
construction.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Sequence, Union

__all__ = [
    "Opcode",
    "Access",
    "RawInstruction",
    "Instruction",
    "format_group",
    "format_trace",
]


class Opcode(enum.Enum):
    """Kind of a trace instruction."""
    LOAD = "load"
    STORE = "store"
    SYNC = "sync"


@dataclass(frozen=True, slots=True)
class Access:
    """Payload of a LOAD (value observed) or STORE (value written)."""

    address: int
    value: int


def _check_shape(opcode: Opcode, access: Optional[Access], atomic: bool) -> None:
    if opcode is Opcode.SYNC:
        if access is not None:
            raise ValueError("sync instructions carry no address or value")
        if atomic:
            raise ValueError("sync instructions cannot be atomic")
    elif access is None:
        raise ValueError(f"{opcode.value} instructions need an address and value")


@dataclass(frozen=True, slots=True)
class RawInstruction:
    """An instruction as recognized, before identifier assignment."""

    thread: int
    opcode: Opcode
    access: Optional[Access] = None
    atomic: bool = False

    def __post_init__(self) -> None:
        _check_shape(self.opcode, self.access, self.atomic)

    @property
    def address(self) -> Optional[int]:
        return self.access.address if self.access is not None else None

    @property
    def value(self) -> Optional[int]:
        return self.access.value if self.access is not None else None

    def with_id(self, ident: int) -> "Instruction":
        """Return the assembled form of this instruction under *ident*."""
        return Instruction(id=ident, thread=self.thread, opcode=self.opcode,
                           access=self.access, atomic=self.atomic)


@dataclass(frozen=True, slots=True)
class Instruction:
    """An assembled instruction with its trace-wide identifier.

    The atomic LOAD of an atomic load-store pair shares its ``id`` with
    the STORE that follows it.
    """

    id: int
    thread: int
    opcode: Opcode
    access: Optional[Access] = None
    atomic: bool = False

    def __post_init__(self) -> None:
        _check_shape(self.opcode, self.access, self.atomic)

    @property
    def address(self) -> Optional[int]:
        return self.access.address if self.access is not None else None

    @property
    def value(self) -> Optional[int]:
        return self.access.value if self.access is not None else None

    def is_load(self) -> bool:
        return self.opcode is Opcode.LOAD

    def is_store(self) -> bool:
        return self.opcode is Opcode.STORE

    def is_sync(self) -> bool:
        return self.opcode is Opcode.SYNC

    def to_dict(self) -> dict:
        d: dict = {"id": self.id, "thread": self.thread,
                   "opcode": self.opcode.value}
        if self.access is not None:
            d["address"] = self.access.address
            d["value"] = self.access.value
        if self.atomic:
            d["atomic"] = True
        return d


AnyInstruction = Union[RawInstruction, Instruction]


# ═══════════════════════════════════════════════════════════════════════
#  Text rendering
# ═══════════════════════════════════════════════════════════════════════

_OPERATORS = {Opcode.LOAD: "==", Opcode.STORE: ":="}


def _format_access(instr: AnyInstruction) -> str:
    return f"v{instr.address} {_OPERATORS[instr.opcode]} {instr.value}"


def format_group(group: Sequence[AnyInstruction]) -> str:
    """Render the instructions of one source line back to trace text.

    *group* is either a single non-atomic instruction or an atomic
    ``[load, store]`` pair.  Addresses are always written as ``v<N>``.
    """
    if len(group) == 2:
        load, store = group
        if not (load.atomic and store.atomic and load.opcode is Opcode.LOAD
                and store.opcode is Opcode.STORE
                and load.thread == store.thread):
            raise ValueError("a two-instruction group must be an atomic load-store pair")
        return f"{load.thread}: {{{_format_access(load)}; {_format_access(store)}}}"
    if len(group) != 1:
        raise ValueError(f"cannot render a group of {len(group)} instructions")
    (instr,) = group
    if instr.atomic:
        raise ValueError("an atomic instruction must be rendered with its pair")
    if instr.opcode is Opcode.SYNC:
        return f"{instr.thread}: sync"
    return f"{instr.thread}: {_format_access(instr)}"


def format_trace(instructions: Sequence[AnyInstruction]) -> str:
    """Render a flat instruction sequence, one source line per group."""
    lines = []
    i = 0
    while i < len(instructions):
        if instructions[i].atomic and instructions[i].opcode is Opcode.LOAD:
            lines.append(format_group(instructions[i:i + 2]))
            i += 2
        else:
            lines.append(format_group(instructions[i:i + 1]))
            i += 1
    return "\n".join(lines) + ("\n" if lines else "")
