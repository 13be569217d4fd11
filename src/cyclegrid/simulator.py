"""
Deterministic execution of a cyclic plan against a board.
Step rules, applied to every agent in lockstep on a shared step counter t:
- On an armed Rotator the agent rearranges its own copy of the plan by one
  position instead of moving; it re-arms while the next move would hit a wall.
- Otherwise it tries plan[t mod L]; walls and the board edge turn the move into
  a no-op that still consumes the step.
- Landing on Ice keeps the agent sliding in the same direction for free until
  it reaches a non-Ice cell or the next cell is blocked.
The run is SOLVED at the first step where every agent stands on a Finish tile.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .basics import DELTAS, Direction, Plan, PlanLike, as_plan
from .board import Board, Coord, Finish, Ice, Rotator, Spin
from .errors import InvalidArgument

DEFAULT_MAX_ROTATIONS = 8

Snapshot = Tuple[Coord, ...]
Trace = Tuple[Snapshot, ...]


class Verdict(Enum):
    SOLVED = "solved"
    UNSOLVED = "unsolved"
    STUCK = "stuck"


@dataclass(frozen=True)
class SimulatorConfig:
    max_rotations: int = DEFAULT_MAX_ROTATIONS


@dataclass(frozen=True)
class SimulationResult:
    trace: Trace
    verdict: Verdict
    steps: int
    solved_at: Optional[int] = None
    stuck_agent: Optional[int] = None


@dataclass
class _Agent:
    pos: Coord
    plan: List[Direction]
    armed: bool = False
    spins: int = 0


def _step_to(pos: Coord, d: Direction) -> Coord:
    dr, dc = DELTAS[d]
    return (pos[0] + dr, pos[1] + dc)


def _spin(plan: List[Direction], spin: Spin) -> List[Direction]:
    if spin is Spin.LEFT:
        return plan[1:] + plan[:1]
    return plan[-1:] + plan[:-1]


def _slide(board: Board, pos: Coord, d: Direction) -> Coord:
    while isinstance(board.tile_at(pos), Ice):
        nxt = _step_to(pos, d)
        if board.is_blocked(nxt):
            break
        pos = nxt
    return pos


def _advance(board: Board, agent: _Agent, t: int, config: SimulatorConfig) -> bool:
    """Run one step for one agent. Returns False when the agent is stuck."""
    tile = board.tile_at(agent.pos)
    length = len(agent.plan)
    if isinstance(tile, Rotator) and agent.armed:
        if agent.spins >= config.max_rotations:
            return False
        agent.plan = _spin(agent.plan, tile.spin)
        agent.spins += 1
        upcoming = agent.plan[(t + 1) % length]
        agent.armed = board.is_blocked(_step_to(agent.pos, upcoming))
        return True
    d = agent.plan[t % length]
    target = _step_to(agent.pos, d)
    if board.is_blocked(target):
        return True
    landing = _slide(board, target, d)
    agent.pos = landing
    if isinstance(board.tile_at(landing), Rotator):
        agent.armed = True
        agent.spins = 0
    return True


def _all_finished(board: Board, agents: List[_Agent]) -> bool:
    return all(isinstance(board.tile_at(a.pos), Finish) for a in agents)


def run_simulation(
    board: Board,
    plan: PlanLike,
    max_steps: int,
    config: Optional[SimulatorConfig] = None,
) -> SimulationResult:
    cfg = config or SimulatorConfig()
    p: Plan = as_plan(plan)
    if isinstance(max_steps, bool) or not isinstance(max_steps, int) or max_steps <= 0:
        raise InvalidArgument(f"max_steps must be a positive integer, got {max_steps!r}")
    if cfg.max_rotations < 0:
        raise InvalidArgument("max_rotations must be non-negative")
    board.validate()

    agents = [
        _Agent(pos=pos, plan=list(p), armed=isinstance(board.tile_at(pos), Rotator))
        for pos in board.agents
    ]
    trace: List[Snapshot] = [tuple(a.pos for a in agents)]
    for t in range(max_steps):
        for i, agent in enumerate(agents):
            if not _advance(board, agent, t, cfg):
                logging.debug("agent %d stuck on rotator at %s after %d steps", i, agent.pos, t)
                return SimulationResult(tuple(trace), Verdict.STUCK, t, stuck_agent=i)
        trace.append(tuple(a.pos for a in agents))
        if _all_finished(board, agents):
            logging.debug("solved at step %d", t + 1)
            return SimulationResult(tuple(trace), Verdict.SOLVED, t + 1, solved_at=t + 1)
    return SimulationResult(tuple(trace), Verdict.UNSOLVED, max_steps)


def simulate(
    board: Board,
    plan: PlanLike,
    max_steps: int,
    config: Optional[SimulatorConfig] = None,
) -> Tuple[Trace, Verdict]:
    res = run_simulation(board, plan, max_steps, config)
    return res.trace, res.verdict
