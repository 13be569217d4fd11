import pytest

from cyclegrid.board import parse_board
from cyclegrid.orbits import enumerate_canonical
from cyclegrid.simulator import run_simulation

pytest.importorskip("pytest_benchmark")


def test_benchmark_enumerate_length_8(benchmark):
    plans = benchmark(enumerate_canonical, 8)
    assert len(plans) > 0


def test_benchmark_simulate_long_run(benchmark):
    board = parse_board("""
        @.~~.#
        .#..>.
        ~..<.F
    """)

    res = benchmark(run_simulation, board, "ESWN", 500)
    assert res.steps > 0
