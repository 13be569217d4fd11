"""
Boards: an immutable grid of tiles plus the agents' start cells.
Teaching notes:
- Tile is a closed set of variants; the simulator dispatches on every one of them.
- Coordinates are (row, col) with row 0 at the top, so North decreases the row.
- The text encoding uses one character per tile and one line per row.
"""
from __future__ import annotations

import operator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .errors import InvalidBoard

Coord = Tuple[int, int]


class Spin(Enum):
    LEFT = "left"    # [a, b, c] -> [b, c, a]
    RIGHT = "right"  # [a, b, c] -> [c, a, b]


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Wall:
    pass


@dataclass(frozen=True)
class Ice:
    pass


@dataclass(frozen=True)
class Rotator:
    spin: Spin


@dataclass(frozen=True)
class Finish:
    pass


Tile = Union[Empty, Wall, Ice, Rotator, Finish]
TILE_TYPES = (Empty, Wall, Ice, Rotator, Finish)

EMPTY = Empty()
WALL = Wall()
ICE = Ice()
FINISH = Finish()

# char -> (tile, agent starts here)
TILE_CHARS: Dict[str, Tuple[Tile, bool]] = {
    '.': (EMPTY, False),
    '#': (WALL, False),
    '~': (ICE, False),
    '<': (Rotator(Spin.LEFT), False),
    '>': (Rotator(Spin.RIGHT), False),
    'F': (FINISH, False),
    '@': (EMPTY, True),
    '&': (FINISH, True),
}


def tile_char(tile: Tile) -> str:
    if isinstance(tile, Empty):
        return '.'
    if isinstance(tile, Wall):
        return '#'
    if isinstance(tile, Ice):
        return '~'
    if isinstance(tile, Rotator):
        return '<' if tile.spin is Spin.LEFT else '>'
    if isinstance(tile, Finish):
        return 'F'
    raise InvalidBoard(f"Undefined tile: {tile!r}")


def _is_coord(pos: object) -> bool:
    return (
        isinstance(pos, tuple)
        and len(pos) == 2
        and all(isinstance(v, int) and not isinstance(v, bool) for v in pos)
    )


@dataclass(frozen=True)
class Board:
    tiles: Tuple[Tuple[Tile, ...], ...]
    agents: Tuple[Coord, ...]

    @property
    def height(self) -> int:
        return len(self.tiles)

    @property
    def width(self) -> int:
        return len(self.tiles[0]) if self.tiles else 0

    def in_bounds(self, pos: Coord) -> bool:
        r, c = pos
        return 0 <= r < self.height and 0 <= c < self.width

    def tile_at(self, pos: Coord) -> Tile:
        return self.tiles[pos[0]][pos[1]]

    def is_blocked(self, pos: Coord) -> bool:
        """Out-of-bounds cells behave exactly like walls."""
        return not self.in_bounds(pos) or isinstance(self.tile_at(pos), Wall)

    def finish_cells(self) -> List[Coord]:
        return [
            (r, c)
            for r, row in enumerate(self.tiles)
            for c, t in enumerate(row)
            if isinstance(t, Finish)
        ]

    def validate(self) -> None:
        """Raise InvalidBoard unless the board can be simulated."""
        if not self.tiles or not self.tiles[0]:
            raise InvalidBoard("Board has no cells")
        width = len(self.tiles[0])
        for r, row in enumerate(self.tiles):
            if len(row) != width:
                raise InvalidBoard(f"Row {r} has width {len(row)}, expected {width}")
            for c, t in enumerate(row):
                if not isinstance(t, TILE_TYPES):
                    raise InvalidBoard(f"Undefined tile at {(r, c)}: {t!r}")
                if isinstance(t, Rotator) and not isinstance(t.spin, Spin):
                    raise InvalidBoard(f"Rotator at {(r, c)} has no spin direction")
        if not self.agents:
            raise InvalidBoard("Board has no agents")
        for pos in self.agents:
            if not _is_coord(pos):
                raise InvalidBoard(f"Agent start must be a (row, col) pair of ints, got {pos!r}")
            if not self.in_bounds(pos):
                raise InvalidBoard(f"Agent starts outside the grid at {pos}")
            if isinstance(self.tile_at(pos), Wall):
                raise InvalidBoard(f"Agent starts inside a wall at {pos}")

    def render(self, positions: Optional[Sequence[Coord]] = None) -> str:
        """Text form of the board; agents drawn at ``positions`` (defaults to start cells)."""
        occupied = set(self.agents if positions is None else positions)
        lines = []
        for r, row in enumerate(self.tiles):
            chars = []
            for c, t in enumerate(row):
                ch = tile_char(t)
                if (r, c) in occupied:
                    ch = '&' if isinstance(t, Finish) else '@'
                chars.append(ch)
            lines.append(''.join(chars))
        return '\n'.join(lines)


def _coerce_coord(pos: Any) -> Any:
    try:
        r, c = pos
        return (operator.index(r), operator.index(c))
    except (TypeError, ValueError):
        # left as given; Board.validate reports it
        return tuple(pos) if isinstance(pos, (list, tuple)) else pos


def make_board(rows: Iterable[Iterable[Tile]], agents: Iterable[Coord]) -> Board:
    board = Board(
        tiles=tuple(tuple(row) for row in rows),
        agents=tuple(_coerce_coord(a) for a in agents),
    )
    board.validate()
    return board


def parse_board(text: str, extra_agents: Iterable[Coord] = ()) -> Board:
    """Build a Board from the one-character-per-tile encoding.

    Agents marked with ``@``/``&`` come first in row-major order, followed by
    ``extra_agents`` (useful for agents starting on ice or rotators).
    """
    lines = [ln.strip() for ln in text.strip('\n').splitlines()]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    if not lines:
        raise InvalidBoard("Board text is empty")
    rows: List[List[Tile]] = []
    agents: List[Coord] = []
    for r, line in enumerate(lines):
        row: List[Tile] = []
        for c, ch in enumerate(line):
            if ch not in TILE_CHARS:
                raise InvalidBoard(f"Undefined tile {ch!r} at {(r, c)}")
            tile, has_agent = TILE_CHARS[ch]
            row.append(tile)
            if has_agent:
                agents.append((r, c))
        rows.append(row)
    agents.extend(extra_agents)
    return make_board(rows, agents)
