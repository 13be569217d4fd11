"""
Symmetry and canonicalization for cyclic plans.
Teaching notes:
- There are 8 point symmetries (4 rotations x optional mirror) acting on every move.
- Because a plan repeats forever, its start offset is arbitrary: L cyclic shifts
  are folded into the orbit when phase-shift equivalence is on.
- A plan that repeats an inner cycle ([N, E, N, E]) is reduced to that cycle first.
- We canonicalize by taking the lexicographically smallest image (N < E < S < W).
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from .basics import Direction, Plan, PlanLike, as_plan, serialize_plan

ALL_SYMS = [
    'id', 'rot90', 'rot180', 'rot270',
    'mirror', 'mirror+rot90', 'mirror+rot180', 'mirror+rot270',
]

# name -> (quarter turns clockwise, mirror applied before rotating)
SYM_PARAMS = {
    'id': (0, False),
    'rot90': (1, False),
    'rot180': (2, False),
    'rot270': (3, False),
    'mirror': (0, True),
    'mirror+rot90': (1, True),
    'mirror+rot180': (2, True),
    'mirror+rot270': (3, True),
}

# entries per memo; plan inputs are unbounded
CACHE_SIZE = 1 << 16


@dataclass(frozen=True)
class CanonicalizerConfig:
    """Which equivalences are folded into an orbit.

    phase_shift: treat cyclic shifts of the start position as equivalent.
    reduce_cycles: collapse a repeated inner cycle to its primitive period.
    """

    phase_shift: bool = True
    reduce_cycles: bool = True


DEFAULT_CONFIG = CanonicalizerConfig()


def rotate_plan(plan: Plan, k: int) -> Plan:
    return tuple(Direction((d + k) % 4) for d in plan)


def reflect_plan(plan: Plan) -> Plan:
    return tuple(Direction((-d) % 4) for d in plan)


def shift_plan(plan: Plan, s: int) -> Plan:
    s %= len(plan)
    return plan[s:] + plan[:s]


def transform_plan(plan: Plan, kind: str, shift: int = 0) -> Plan:
    if kind not in SYM_PARAMS:
        raise ValueError(f"Unknown transformation: {kind}")
    k, mirror = SYM_PARAMS[kind]
    out = reflect_plan(plan) if mirror else plan
    out = rotate_plan(out, k)
    return shift_plan(out, shift) if shift else out


def _divisors(n: int) -> List[int]:
    return [d for d in range(1, n) if n % d == 0]


def primitive_period(plan: PlanLike) -> int:
    """Length of the shortest prefix whose repetition rebuilds the plan."""
    p = as_plan(plan)
    n = len(p)
    for d in _divisors(n):
        if p[:d] * (n // d) == p:
            return d
    return n


def reduce_plan(plan: PlanLike) -> Plan:
    p = as_plan(plan)
    return p[:primitive_period(p)]


def _shifts(length: int, config: CanonicalizerConfig) -> range:
    return range(length) if config.phase_shift else range(1)


def orbit_images(plan: PlanLike, config: Optional[CanonicalizerConfig] = None) -> List[Tuple[Plan, str]]:
    """All (image, op) pairs of the plan's orbit, duplicates included.

    The plan is reduced first when cycle reduction is enabled.
    """
    cfg = config or DEFAULT_CONFIG
    p = as_plan(plan)
    if cfg.reduce_cycles:
        p = reduce_plan(p)
    images = []
    for kind in ALL_SYMS:
        base = transform_plan(p, kind)
        for s in _shifts(len(p), cfg):
            op = kind if s == 0 else f"{kind}+shift{s}"
            images.append((shift_plan(base, s), op))
    return images


@lru_cache(maxsize=CACHE_SIZE)
def _canonical_tuple(plan_t: Plan, config: CanonicalizerConfig) -> Tuple[Plan, str]:
    return min(orbit_images(plan_t, config), key=lambda x: x[0])


def canonicalize(plan: PlanLike, config: Optional[CanonicalizerConfig] = None) -> Plan:
    """Canonical representative of the plan's orbit.

    Every plan in the same orbit maps to the same output; shorter periods win
    because reducible plans are collapsed before the lexicographic comparison.
    """
    return _canonical_tuple(as_plan(plan), config or DEFAULT_CONFIG)[0]


def is_canonical(plan: PlanLike, config: Optional[CanonicalizerConfig] = None) -> bool:
    p = as_plan(plan)
    return canonicalize(p, config) == p


@lru_cache(maxsize=CACHE_SIZE)
def _symmetry_info_tuple(plan_t: Plan, config: CanonicalizerConfig) -> Tuple[Tuple[str, Any], ...]:
    canonical, canonical_op = _canonical_tuple(plan_t, config)
    images = orbit_images(plan_t, config)
    unique_set = sorted(set(img for img, _ in images))
    period = primitive_period(plan_t)
    reduced = plan_t[:period] if config.reduce_cycles else plan_t

    phase_images = {shift_plan(reduced, s) for s in _shifts(len(reduced), config)}
    mirror_symmetric = reflect_plan(reduced) in phase_images
    rotation_symmetric = any(rotate_plan(reduced, k) in phase_images for k in (1, 2, 3))

    return tuple({
        'plan': serialize_plan(plan_t),
        'canonical_form': serialize_plan(canonical),
        'canonical_op': canonical_op,
        'orbit_size': len(unique_set),
        'primitive_period': period,
        'is_reducible': period < len(plan_t),
        'is_canonical': canonical == plan_t,
        'mirror_symmetric': mirror_symmetric,
        'rotation_symmetric': rotation_symmetric,
    }.items())


def symmetry_info(plan: PlanLike, config: Optional[CanonicalizerConfig] = None) -> Dict[str, Any]:
    # fresh dict per call; the cache holds an immutable tuple of items
    return dict(_symmetry_info_tuple(as_plan(plan), config or DEFAULT_CONFIG))
