"""
grammar.py — Trace instruction recognizer
=========================================

Recognizes the textual trace language and produces
:class:`~memtrace.instructions.RawInstruction` records (no identifiers
yet; those are assigned by :mod:`memtrace.assembler`).

Usage::

    from memtrace.grammar import recognise, parse_instruction_group

    recognise("0: v1 := 1\\n0: sync\\n1: {v1 == 1; v1 := 2}\\n")
    parse_instruction_group("3: M[4] == 7")

Every line is ``<thread> : <body>`` where the body is a plain load
(``v0 == 1``), a plain store (``v0 := 1``), an atomic load-store pair
(``{v0 == 1; v0 := 2}``) or a ``sync`` barrier.  ``v<N>`` and ``M[<N>]``
name the same address ``N``.  Whitespace, including newlines, is free
between tokens.

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from parsimonious.exceptions import IncompleteParseError, ParseError
from parsimonious.expressions import Literal
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from memtrace.errors import AtomicAddressMismatch, GrammarError
from memtrace.instructions import Access, Opcode, RawInstruction

logger = logging.getLogger(__name__)

__all__ = [
    "TRACE_GRAMMAR",
    "InstructionBuilder",
    "recognise",
    "parse_instruction_group",
]


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

TRACE_GRAMMAR = Grammar(r'''
    trace           = instr* _

    instr           = _ thread_id _ ":" _ body _

    # Alternatives are told apart by their first character:
    # "{" atomic pair, "v"/"M" plain access, "s" sync.
    body            = atomic_pair / load_or_store / sync

    atomic_pair     = "{" _ atomic_load _ ";" _ atomic_store _ "}"
    atomic_load     = address _ "==" _ natural
    atomic_store    = address _ ":=" _ natural

    load_or_store   = address _ operator _ natural
    operator        = "==" / ":="

    sync            = "sync"

    address         = variable / cell
    variable        = "v" natural
    cell            = "M[" natural "]"

    thread_id       = ~"[0-9]+"
    natural         = ~"[0-9]+"
    _               = ~"[ \t\r\n]*"
''')

_INSTR = TRACE_GRAMMAR["instr"]
_BLANK = TRACE_GRAMMAR["_"]


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — PARSE TREE → INSTRUCTIONS
# ═══════════════════════════════════════════════════════════════════

# (opcode, payload, atomic) for one instruction of a body, before the
# thread id is attached.
_Part = Tuple[Opcode, Optional[Access], bool]


class InstructionBuilder(NodeVisitor):
    """Turns the parse tree of one ``instr`` into raw instructions."""

    grammar = TRACE_GRAMMAR
    unwrapped_exceptions = (AtomicAddressMismatch,)

    def generic_visit(self, node, visited_children):
        return visited_children or node

    def visit_trace(self, node, visited_children):
        instrs, _ = visited_children
        out: List[RawInstruction] = []
        if isinstance(instrs, list):
            for group in instrs:
                out.extend(group)
        return out

    def visit_instr(self, node, visited_children):
        _, thread, _, _, _, body, _ = visited_children
        if len(body) == 2:
            (_, load, _), (_, store, _) = body
            if load.address != store.address:
                raise AtomicAddressMismatch(thread, load.address,
                                            store.address,
                                            position=node.children[5].start)
        return [RawInstruction(thread=thread, opcode=opcode, access=access,
                               atomic=atomic)
                for opcode, access, atomic in body]

    def visit_body(self, node, visited_children):
        return visited_children[0]

    def visit_atomic_pair(self, node, visited_children) -> List[_Part]:
        _, _, load, _, _, _, store, _, _ = visited_children
        return [(Opcode.LOAD, load, True), (Opcode.STORE, store, True)]

    def visit_atomic_load(self, node, visited_children) -> Access:
        address, _, _, _, value = visited_children
        return Access(address, value)

    visit_atomic_store = visit_atomic_load

    def visit_load_or_store(self, node, visited_children) -> List[_Part]:
        address, _, opcode, _, value = visited_children
        return [(opcode, Access(address, value), False)]

    def visit_operator(self, node, visited_children) -> Opcode:
        return Opcode.LOAD if node.text == "==" else Opcode.STORE

    def visit_sync(self, node, visited_children) -> List[_Part]:
        return [(Opcode.SYNC, None, False)]

    def visit_address(self, node, visited_children) -> int:
        return visited_children[0]

    def visit_variable(self, node, visited_children) -> int:
        _, number = visited_children
        return number

    def visit_cell(self, node, visited_children) -> int:
        _, number, _ = visited_children
        return number

    def visit_thread_id(self, node, visited_children) -> int:
        return int(node.text)

    visit_natural = visit_thread_id


# ═══════════════════════════════════════════════════════════════════
#  PART 3 — PUBLIC API
# ═══════════════════════════════════════════════════════════════════

def _describe(expr) -> str:
    if expr is None:
        return "instruction"
    if expr.name:
        return expr.name
    if isinstance(expr, Literal):
        return repr(expr.literal)
    return expr.as_rule()


def _grammar_error(exc: ParseError, text: str) -> GrammarError:
    return GrammarError(max(exc.pos, 0), _describe(exc.expr), text)


def parse_instruction_group(fragment: str) -> List[RawInstruction]:
    """Parse exactly one instruction line into one or two raw instructions.

    Raises
    ------
    GrammarError
        If *fragment* is not a single well-formed instruction.
    AtomicAddressMismatch
        If it is an atomic pair whose load and store addresses differ.
    """
    try:
        node = _INSTR.parse(fragment)
    except IncompleteParseError as exc:
        raise GrammarError(exc.pos, "end of input", fragment) from None
    except ParseError as exc:
        raise _grammar_error(exc, fragment) from None
    return InstructionBuilder().visit(node)


def recognise(text: str) -> List[RawInstruction]:
    """Recognize a complete trace into a flat list of raw instructions.

    Instruction groups are matched and built one at a time from the
    cursor, so an atomic pair with mismatched addresses is reported even
    if a grammar error follows later in the input.

    Raises
    ------
    GrammarError
        On the first construct that does not match the grammar.
    AtomicAddressMismatch
        On the first atomic pair whose load and store addresses differ.
    """
    end = len(text)
    if _BLANK.match(text).end == end:
        return []

    builder = InstructionBuilder()
    instructions: List[RawInstruction] = []
    groups = 0
    pos = 0
    while pos < end:
        try:
            node: Node = _INSTR.match(text, pos)
        except ParseError as exc:
            raise _grammar_error(exc, text) from None
        instructions.extend(builder.visit(node))
        groups += 1
        pos = node.end

    logger.debug("recognised %d instruction(s) in %d group(s)",
                 len(instructions), groups)
    return instructions
