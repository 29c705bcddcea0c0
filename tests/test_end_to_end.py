# tests/test_end_to_end.py
"""
End-to-end tests: trace text → recognise → assemble → sanity check →
thread-partitioned trace.
"""

import pytest

from memtrace import (
    AtomicAddressMismatch,
    DuplicateStoreValue,
    GrammarError,
    InitialValueWritten,
    Opcode,
    TraceError,
    parse_trace,
    try_parse_trace,
)
from memtrace.driver import ParseOutcome, parse_trace_file
from tests.conftest import (
    ALIAS_TRACE, ATOMIC_TRACE, DUPLICATE_STORE_TRACE, INITIAL_STORE_TRACE,
    MISMATCHED_ATOMIC_TRACE, SB_TRACE,
)


class TestParseTrace:

    def test_store_buffering(self):
        trace = parse_trace(SB_TRACE)
        assert sorted(trace) == [0, 1]
        assert [i.id for i in trace[0]] == [0, 1, 2]
        assert [i.id for i in trace[1]] == [3, 4]
        assert [i.opcode for i in trace[0]] == [Opcode.STORE, Opcode.SYNC, Opcode.LOAD]
        assert (trace[0][0].address, trace[0][0].value) == (1, 1)
        assert (trace[1][0].address, trace[1][0].value) == (0, 1)

    def test_atomic_pairs(self):
        trace = parse_trace(ATOMIC_TRACE)
        load, store, plain = trace[0]
        assert load.id == store.id == 0
        assert load.atomic and store.atomic and not plain.atomic
        assert plain.id == 2
        assert [i.id for i in trace[1]] == [1, 1]

    def test_address_aliasing(self):
        trace = parse_trace(ALIAS_TRACE)
        assert trace[3][0].address == trace[1][0].address == 3
        assert trace[1][0].opcode is Opcode.LOAD

    def test_empty_trace(self):
        assert parse_trace("") == {}

    def test_initial_value_written(self):
        with pytest.raises(InitialValueWritten):
            parse_trace(INITIAL_STORE_TRACE)

    def test_duplicate_store_value(self):
        with pytest.raises(DuplicateStoreValue):
            parse_trace(DUPLICATE_STORE_TRACE)

    def test_mismatched_atomic_pair(self):
        with pytest.raises(AtomicAddressMismatch):
            parse_trace(MISMATCHED_ATOMIC_TRACE)

    def test_grammar_error(self):
        with pytest.raises(GrammarError):
            parse_trace("0: v0 := 1\n1 v0 == 1\n")

    def test_grammar_error_wins_over_sanity(self):
        # Recognition fails before any sanity check can run.
        with pytest.raises(GrammarError):
            parse_trace("0: v0 := 0\n0: nope")

    def test_file(self, trace_file):
        trace = parse_trace_file(trace_file(SB_TRACE))
        assert sum(len(v) for v in trace.values()) == 5


class TestTryParseTrace:

    def test_success(self):
        outcome = try_parse_trace(SB_TRACE)
        assert outcome.ok
        assert outcome.error is None
        assert outcome.unwrap() == parse_trace(SB_TRACE)

    @pytest.mark.parametrize("text, kind", [
        (INITIAL_STORE_TRACE, InitialValueWritten),
        (DUPLICATE_STORE_TRACE, DuplicateStoreValue),
        (MISMATCHED_ATOMIC_TRACE, AtomicAddressMismatch),
        ("0: v0 ?= 1", GrammarError),
    ])
    def test_failure(self, text, kind):
        outcome = try_parse_trace(text)
        assert not outcome.ok
        assert outcome.trace is None
        assert isinstance(outcome.error, kind)
        with pytest.raises(kind):
            outcome.unwrap()

    def test_outcome_needs_exactly_one_side(self):
        with pytest.raises(ValueError):
            ParseOutcome()
        with pytest.raises(ValueError):
            ParseOutcome(trace={}, error=TraceError("x"))
