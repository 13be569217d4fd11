import pytest

from cyclegrid.board import (
    FINISH,
    ICE,
    WALL,
    Board,
    Finish,
    Ice,
    Rotator,
    Spin,
    Wall,
    make_board,
    parse_board,
)
from cyclegrid.errors import InvalidBoard

LEVEL = """
#####
#@~F#
#<.>#
#&..#
#####
"""


def test_parse_board_tiles_and_agents():
    b = parse_board(LEVEL)
    assert (b.height, b.width) == (5, 5)
    assert b.agents == ((1, 1), (3, 1))
    assert isinstance(b.tile_at((1, 2)), Ice)
    assert isinstance(b.tile_at((1, 3)), Finish)
    assert b.tile_at((2, 1)) == Rotator(Spin.LEFT)
    assert b.tile_at((2, 3)) == Rotator(Spin.RIGHT)
    assert isinstance(b.tile_at((0, 0)), Wall)
    assert sorted(b.finish_cells()) == [(1, 3), (3, 1)]


def test_render_round_trip():
    b = parse_board(LEVEL)
    assert b.render() == LEVEL.strip()
    assert parse_board(b.render()) == b


def test_render_custom_positions():
    b = parse_board("@.F")
    assert b.render([(0, 2)]) == "..&"


def test_out_of_bounds_is_blocked():
    b = parse_board("@.#")
    assert b.is_blocked((0, 2))
    assert b.is_blocked((0, 3))
    assert b.is_blocked((-1, 0))
    assert not b.is_blocked((0, 1))


def test_extra_agents_follow_marked_ones():
    b = parse_board("@~F", extra_agents=[(0, 1)])
    assert b.agents == ((0, 0), (0, 1))


@pytest.mark.parametrize(
    "text",
    [
        "",
        "@x",
        "@.\n.",
        "..F",
        "@ F",
    ],
)
def test_invalid_board_text(text):
    with pytest.raises(InvalidBoard):
        parse_board(text)


def test_agent_outside_grid_or_in_wall():
    with pytest.raises(InvalidBoard):
        parse_board("@.F", extra_agents=[(3, 0)])
    with pytest.raises(InvalidBoard):
        parse_board("@#F", extra_agents=[(0, 1)])


def test_make_board_rejects_undefined_tile():
    with pytest.raises(InvalidBoard):
        make_board([[FINISH, "lava"]], [(0, 0)])
    with pytest.raises(InvalidBoard):
        make_board([[Rotator("sideways"), ICE]], [(0, 1)])


def test_board_is_immutable():
    b = make_board([[ICE, WALL, FINISH]], [(0, 0)])
    with pytest.raises(AttributeError):
        b.agents = ((0, 2),)  # type: ignore[misc]
    assert isinstance(b, Board)


@pytest.mark.parametrize("pos", [(0,), (0, 0, 0), (0.5, 1), ("0", "1"), 7])
def test_malformed_agent_coordinate(pos):
    with pytest.raises(InvalidBoard):
        make_board([[FINISH, ICE]], [pos])
    with pytest.raises(InvalidBoard):
        Board(tiles=((FINISH, ICE),), agents=(pos,)).validate()


def test_numpy_agent_coordinates_normalized():
    import numpy as np

    b = make_board([[ICE, FINISH]], [(np.int64(0), np.int64(1))])
    assert b.agents == ((0, 1),)
    assert all(type(v) is int for v in b.agents[0])
