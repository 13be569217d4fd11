import pytest

from cyclegrid.basics import Direction, parse_plan
from cyclegrid.board import EMPTY, Board, parse_board
from cyclegrid.errors import InvalidArgument, InvalidBoard
from cyclegrid.simulator import SimulatorConfig, Verdict, run_simulation, simulate

WALLED_CELL = """
###
#@#
###
"""


def test_wall_no_op_keeps_position():
    board = parse_board(WALLED_CELL)
    trace, verdict = simulate(board, [Direction.N], max_steps=10)
    assert verdict is Verdict.UNSOLVED
    assert len(trace) == 11
    assert all(snap == ((1, 1),) for snap in trace)


def test_single_cell_board_edges_act_as_walls():
    trace, verdict = simulate(parse_board("@"), "NESW", max_steps=8)
    assert verdict is Verdict.UNSOLVED
    assert set(trace) == {((0, 0),)}


def test_walled_finish_is_solved_on_first_step():
    board = parse_board(WALLED_CELL.replace("@", "&"))
    trace, verdict = simulate(board, "N", max_steps=10)
    assert verdict is Verdict.SOLVED
    assert trace == (((1, 1),), ((1, 1),))


def test_ice_run_is_one_plan_step():
    board = parse_board("@~~..")
    res = run_simulation(board, "E", max_steps=1)
    # two ice cells and the ground cell after them, all in one step
    assert res.trace == (((0, 0),), ((0, 3),))


def test_ice_run_from_an_ice_cell():
    board = parse_board(".~~..", extra_agents=[(0, 1)])
    trace, _ = simulate(board, "E", max_steps=1)
    assert trace[1] == ((0, 3),)


def test_ice_stops_before_wall_and_edge():
    trace, _ = simulate(parse_board("@~~#."), "E", max_steps=3)
    assert trace[1:] == (((0, 2),),) * 3
    trace, _ = simulate(parse_board("@~~"), "E", max_steps=1)
    assert trace[1] == ((0, 2),)


def test_ice_does_not_consume_plan_steps():
    board = parse_board("@~~.\n....")
    trace, _ = simulate(board, "ES", max_steps=2)
    assert trace[1] == ((0, 3),)
    assert trace[2] == ((1, 3),)


def test_plan_cursor_advances_through_blocked_moves():
    trace, verdict = simulate(parse_board("@.F"), "NE", max_steps=10)
    assert [snap[0] for snap in trace] == [(0, 0), (0, 0), (0, 1), (0, 1), (0, 2)]
    assert verdict is Verdict.SOLVED


def test_multi_agent_requires_simultaneous_finish():
    board = parse_board("@.F\n@.F")
    res = run_simulation(board, "E", max_steps=10)
    assert res.verdict is Verdict.SOLVED
    assert res.solved_at == 2
    assert res.trace[2] == ((0, 2), (1, 2))


def test_multi_agent_leaving_finish_early_is_not_solved():
    board = parse_board("@F.\n@.F")
    res = run_simulation(board, "E", max_steps=10)
    assert res.trace[1] == ((0, 1), (1, 1))
    assert res.trace[2] == ((0, 2), (1, 2))
    assert res.verdict is Verdict.UNSOLVED
    assert res.steps == 10


def test_wall_holds_early_agent_on_finish():
    board = parse_board("@F#\n@.F")
    res = run_simulation(board, "E", max_steps=10)
    assert res.verdict is Verdict.SOLVED
    assert res.solved_at == 2


def test_left_rotator_respins_until_move_is_free():
    board = parse_board("@<.F")
    res = run_simulation(board, "EENN", max_steps=20)
    assert [snap[0] for snap in res.trace] == [
        (0, 0), (0, 1), (0, 1), (0, 1), (0, 2), (0, 2), (0, 2), (0, 3),
    ]
    assert res.verdict is Verdict.SOLVED
    assert res.solved_at == 7


def test_rotator_blocked_forever_is_stuck():
    board = parse_board("@>.F")
    res = run_simulation(board, "EN", max_steps=50, config=SimulatorConfig(max_rotations=8))
    assert res.verdict is Verdict.STUCK
    assert res.stuck_agent == 0
    assert res.steps == 9
    assert len(res.trace) == 10
    assert res.trace[-1] == ((0, 1),)


def test_agent_starting_on_rotator_spins_first():
    board = parse_board("<.F", extra_agents=[(0, 0)])
    stuck = run_simulation(board, "E", max_steps=5, config=SimulatorConfig(max_rotations=0))
    assert stuck.verdict is Verdict.STUCK
    assert stuck.trace == (((0, 0),),)
    res = run_simulation(board, "E", max_steps=5)
    assert [snap[0] for snap in res.trace] == [(0, 0), (0, 0), (0, 1), (0, 2)]


def test_rotation_is_per_agent():
    board = parse_board("@<.F\n####\n@..F")
    res = run_simulation(board, "EENN", max_steps=20)
    # the lower agent never touches a rotator and keeps the original order
    assert [snap[1] for snap in res.trace[:6]] == [(2, 0), (2, 1), (2, 2), (2, 2), (2, 2), (2, 3)]
    assert res.solved_at == 7


def test_runs_share_no_state():
    board = parse_board("@<.F")
    first = run_simulation(board, "EENN", max_steps=20)
    second = run_simulation(board, "EENN", max_steps=20)
    assert first == second


def test_invalid_arguments():
    board = parse_board("@.F")
    with pytest.raises(InvalidArgument):
        simulate(board, [], max_steps=5)
    with pytest.raises(InvalidArgument):
        simulate(board, "E", max_steps=0)
    with pytest.raises(InvalidArgument):
        simulate(board, "E", max_steps=5, config=SimulatorConfig(max_rotations=-1))


def test_malformed_board_detected_before_stepping():
    with pytest.raises(InvalidBoard):
        simulate(Board(tiles=((EMPTY,),), agents=((2, 2),)), "E", max_steps=5)
    with pytest.raises(InvalidBoard):
        simulate(Board(tiles=((EMPTY, "?"),), agents=((0, 0),)), "E", max_steps=5)
    with pytest.raises(InvalidBoard):
        simulate(Board(tiles=((EMPTY,),), agents=()), parse_plan("E"), max_steps=5)
