"""
Puzzle validation: does a plan solve a board, and is it the shortest that does?

Boards are not symmetric, so minimality cannot be read off canonical forms:
every raw plan of each shorter length is simulated (4**l runs per length).
"""
from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, Optional

from .basics import Direction, PlanLike, as_plan, serialize_plan
from .board import Board
from .errors import InvalidArgument
from .simulator import SimulatorConfig, Verdict, run_simulation
from .symmetry import canonicalize


def first_solving_step(
    board: Board,
    plan: PlanLike,
    max_steps: int,
    config: Optional[SimulatorConfig] = None,
) -> Optional[int]:
    res = run_simulation(board, plan, max_steps, config)
    return res.solved_at


def find_shorter_solution(
    board: Board,
    length: int,
    max_steps: int,
    config: Optional[SimulatorConfig] = None,
) -> Optional[str]:
    """First plan (lexicographic, shortest first) of fewer than ``length`` moves that solves the board."""
    for n in range(1, length):
        for combo in itertools.product(Direction, repeat=n):
            if run_simulation(board, combo, max_steps, config).verdict is Verdict.SOLVED:
                return serialize_plan(combo)
    return None


def validate_solution(
    board: Board,
    plan: PlanLike,
    max_steps: int,
    config: Optional[SimulatorConfig] = None,
    max_shorter: Optional[int] = None,
) -> Dict[str, Any]:
    """Report whether ``plan`` is a valid and minimal solution for ``board``.

    ``max_shorter`` caps the longest shorter length that is searched; lengths
    above the cap are not checked and ``is_minimal`` only covers the checked range.
    """
    p = as_plan(plan)
    if max_shorter is not None and max_shorter < 0:
        raise InvalidArgument("max_shorter must be non-negative")
    res = run_simulation(board, p, max_steps, config)
    solves = res.verdict is Verdict.SOLVED

    shorter = None
    if solves:
        limit = len(p) if max_shorter is None else min(len(p), max_shorter + 1)
        shorter = find_shorter_solution(board, limit, max_steps, config)
    logging.debug("validate plan=%s verdict=%s shorter=%s", serialize_plan(p), res.verdict.value, shorter)

    return {
        'plan': serialize_plan(p),
        'canonical_form': serialize_plan(canonicalize(p)),
        'solves': solves,
        'verdict': res.verdict.value,
        'steps': res.steps,
        'solved_at': res.solved_at,
        'is_minimal': solves and shorter is None,
        'shorter_solution': shorter,
    }
