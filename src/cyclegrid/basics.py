"""
Plan basics: directions, plan representation, parsing and serialization.
Teaching notes:
- A plan is a tuple of Direction values, re-executed from its start forever.
- Direction values double as the canonical alphabet order: N < E < S < W.
- Rotating by k steps is (d + k) mod 4 (clockwise); mirroring swaps E and W.
"""
from __future__ import annotations

from enum import IntEnum
from typing import Iterable, Sequence, Tuple, Union

from .errors import InvalidArgument


class Direction(IntEnum):
    N = 0
    E = 1
    S = 2
    W = 3

    @property
    def delta(self) -> Tuple[int, int]:
        return DELTAS[self]

    def rotated(self, k: int) -> "Direction":
        return Direction((self + k) % 4)

    def mirrored(self) -> "Direction":
        return Direction((-self) % 4)


# (row, col) offsets; row grows southwards
DELTAS = {
    Direction.N: (-1, 0),
    Direction.E: (0, 1),
    Direction.S: (1, 0),
    Direction.W: (0, -1),
}

Plan = Tuple[Direction, ...]
PlanLike = Union[str, Sequence[Direction], Sequence[int]]

_SEPARATORS = " ,-\t\n"


def parse_plan(text: str) -> Plan:
    cleaned = ''.join(c for c in text.upper() if c not in _SEPARATORS)
    if not cleaned:
        raise InvalidArgument("Plan must contain at least one move")
    try:
        return tuple(Direction[c] for c in cleaned)
    except KeyError as e:
        raise InvalidArgument(f"Unknown direction {e.args[0]!r} in plan {text!r}") from None


def as_plan(plan: PlanLike) -> Plan:
    """Coerce a string, a sequence of Directions or of ints 0..3 into a Plan."""
    if isinstance(plan, str):
        return parse_plan(plan)
    out = []
    for d in plan:
        if isinstance(d, str):
            out.extend(parse_plan(d))
            continue
        if isinstance(d, bool) or not isinstance(d, int) or not 0 <= d <= 3:
            raise InvalidArgument(f"Not a direction: {d!r}")
        out.append(Direction(d))
    if not out:
        raise InvalidArgument("Plan must contain at least one move")
    return tuple(out)


def serialize_plan(plan: Iterable[Direction]) -> str:
    return ''.join(Direction(d).name for d in plan)


def plan_codes(plan: Plan) -> Tuple[int, ...]:
    return tuple(int(d) for d in plan)
