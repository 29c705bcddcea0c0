# tests/conftest.py
"""
Shared sample traces and fixtures for the memtrace test-suite.
"""

import pytest

from memtrace.grammar import TRACE_GRAMMAR


# ---------------------------------------------------------------------------
# Sample traces
# ---------------------------------------------------------------------------

# Store buffering with a barrier on thread 0.
SB_TRACE = """\
0: v1 := 1
0: sync
0: v0 == 0
1: v0 := 1
1: v1 == 0
"""

# Two threads racing on a counter with atomic read-modify-writes.
ATOMIC_TRACE = """\
0: {v0 == 0; v0 := 1}
1: {M[0] == 1; v0 := 2}
0: v0 == 2
"""

# Both address syntaxes, interleaved threads and free-form whitespace.
ALIAS_TRACE = """
  3 : v3 := 5
1:M[3]==5
3:
   sync
"""

INITIAL_STORE_TRACE = "0: v0 := 0"

DUPLICATE_STORE_TRACE = "0: v0 := 1\n1: v0 := 1"

MISMATCHED_ATOMIC_TRACE = "0: {v0 == 1; v1 := 1}"


@pytest.fixture(scope="session")
def grammar():
    return TRACE_GRAMMAR


@pytest.fixture
def trace_file(tmp_path):
    """Write trace text to a temporary file and return its path."""
    def _write(text: str, name: str = "litmus.trace"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write
