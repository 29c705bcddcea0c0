# tests/test_assembler.py
"""
Tests for identifier assignment and thread partitioning.
"""

from memtrace.assembler import assemble, assign_ids, partition
from memtrace.grammar import recognise
from memtrace.instructions import Access, Instruction, Opcode, RawInstruction
from tests.conftest import ATOMIC_TRACE, SB_TRACE


def _raw(*specs):
    return [RawInstruction(*s) for s in specs]


class TestAssignIds:

    def test_empty(self):
        assert assign_ids([]) == []

    def test_plain_instructions_get_consecutive_ids(self):
        assigned = assign_ids(recognise(SB_TRACE))
        assert [i.id for i in assigned] == [0, 1, 2, 3, 4]

    def test_atomic_pair_shares_one_id(self):
        assigned = assign_ids(recognise("0: v0 := 1\n1: {v0 == 1; v0 := 2}\n0: sync"))
        assert [i.id for i in assigned] == [0, 1, 1, 2]
        load, store = assigned[1], assigned[2]
        assert load.atomic and store.atomic
        assert load.opcode is Opcode.LOAD and store.opcode is Opcode.STORE

    def test_consecutive_atomic_pairs(self):
        assigned = assign_ids(recognise(ATOMIC_TRACE))
        assert [i.id for i in assigned] == [0, 0, 1, 1, 2]

    def test_increment_rule(self):
        assigned = assign_ids(recognise(
            "0: {v0 == 0; v0 := 1}\n1: sync\n1: v1 := 3\n"
            "2: {v1 == 3; v1 := 4}\n2: v0 == 1\n"
        ))
        for prev, nxt in zip(assigned, assigned[1:]):
            step = 0 if (prev.atomic and prev.opcode is Opcode.LOAD) else 1
            assert nxt.id - prev.id == step

    def test_fields_carried_over(self):
        raw = RawInstruction(7, Opcode.STORE, Access(2, 9))
        (instr,) = assign_ids([raw])
        assert instr == Instruction(0, 7, Opcode.STORE, Access(2, 9))


class TestPartition:

    def test_groups_by_thread_in_order(self):
        threads = partition(assign_ids(recognise(SB_TRACE)))
        assert list(threads) == [0, 1]
        assert [i.id for i in threads[0]] == [0, 1, 2]
        assert [i.id for i in threads[1]] == [3, 4]

    def test_only_observed_threads(self):
        threads = partition(assign_ids(_raw(
            (5, Opcode.SYNC), (2, Opcode.SYNC), (5, Opcode.SYNC),
        )))
        assert list(threads) == [2, 5]
        assert [i.id for i in threads[5]] == [0, 2]

    def test_partition_is_complete(self):
        assigned, threads = assemble(recognise(ATOMIC_TRACE + SB_TRACE.replace("v", "v1")))
        regrouped = [i for instrs in threads.values() for i in instrs]
        assert len(regrouped) == len(assigned)
        assert sorted(regrouped, key=assigned.index) == assigned

    def test_empty(self):
        assert partition([]) == {}
