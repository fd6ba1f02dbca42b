"""
Test fixtures for address clustering

Provides small transaction files with known clusters and graph edges.
"""

import pytest

from deanon.clustering import parse_records


# =============================================================================
# Transaction Record Data
# =============================================================================

# Two transactions: A and B fund t1 together, C funds t2 alone
WORKED_EXAMPLE = """\
t1 h1 A 10 in
t1 h1 B 10 in
t1 h1 D 5 out
t2 h2 C 3 in
t2 h2 E 3 out
"""

# Chained multi-input transactions: {A,B} via t1, {B,C} via t2, {D,E,F} via t3
CHAINED_EXAMPLE = """\
t1 h1 A 100 in
t1 h1 B 50 in
t1 h1 X 140 out
t1 h1 A 10 out
t2 h2 B 20 in
t2 h2 C 30 in
t2 h2 Y 45 out
t3 h3 D 1 in
t3 h3 E 2 in
t3 h3 F 3 in
t3 h3 C 6 out
t4 h4 X 140 in
t4 h4 D 70 out
t4 h4 Y 70 out
"""


# =============================================================================
# Parsed Record Fixtures
# =============================================================================


@pytest.fixture
def worked_example_records():
    """Parsed records of the five-line worked example."""
    return list(parse_records(WORKED_EXAMPLE.splitlines()))


@pytest.fixture
def chained_records():
    """Records where clusters are linked through shared input addresses."""
    return list(parse_records(CHAINED_EXAMPLE.splitlines()))


@pytest.fixture
def transactions_file(tmp_path):
    """Worked example written to a transaction file."""
    path = tmp_path / "transactions.txt"
    path.write_text(WORKED_EXAMPLE)
    return path
