"""
Exhaustive enumeration of canonical plans of a given length.

Every plan of length L is encoded as a base-4 integer with the first move as the
most significant digit, so integer order equals lexicographic order over
N < E < S < W. The 4**L codes are processed in chunks: for each code the minimum
over its orbit images is computed with numpy, reducible plans are masked out,
and the per-chunk minima are merged by set union.
"""
from __future__ import annotations

import logging
import numbers
from typing import Dict, Iterator, Optional, Set

import numpy as np

from .basics import Direction, Plan
from .errors import InvalidArgument
from .symmetry import ALL_SYMS, SYM_PARAMS, CanonicalizerConfig, DEFAULT_CONFIG

MAX_ENUMERATION_LENGTH = 12
CHUNK_SIZE = 1 << 16


def _check_length(length: int, allow_large: bool) -> int:
    if isinstance(length, bool) or not isinstance(length, numbers.Integral) or length <= 0:
        raise InvalidArgument(f"Plan length must be a positive integer, got {length!r}")
    length = int(length)
    if length > MAX_ENUMERATION_LENGTH and not allow_large:
        raise InvalidArgument(
            f"Refusing to enumerate 4**{length} plans; pass allow_large=True to override "
            f"(limit is {MAX_ENUMERATION_LENGTH})"
        )
    return length


def _weights(length: int) -> np.ndarray:
    return 4 ** np.arange(length - 1, -1, -1, dtype=np.int64)


def decode_plan(code: int, length: int) -> Plan:
    digits = []
    for _ in range(length):
        digits.append(Direction(code % 4))
        code //= 4
    return tuple(reversed(digits))


def encode_plan(plan: Plan) -> int:
    code = 0
    for d in plan:
        code = code * 4 + int(d)
    return code


def _digits(codes: np.ndarray, weights: np.ndarray) -> np.ndarray:
    return (codes[:, None] // weights[None, :]) % 4


def _orbit_min_codes(digits: np.ndarray, weights: np.ndarray, config: CanonicalizerConfig) -> np.ndarray:
    length = digits.shape[1]
    shifts = range(length) if config.phase_shift else range(1)
    best = None
    for kind in ALL_SYMS:
        k, mirror = SYM_PARAMS[kind]
        base = (-digits) % 4 if mirror else digits
        base = (base + k) % 4
        for s in shifts:
            codes = np.roll(base, -s, axis=1) @ weights
            best = codes if best is None else np.minimum(best, codes)
    return best


def _reducible_mask(digits: np.ndarray) -> np.ndarray:
    length = digits.shape[1]
    mask = np.zeros(digits.shape[0], dtype=bool)
    for d in range(1, length):
        if length % d == 0:
            mask |= np.all(digits == np.roll(digits, -d, axis=1), axis=1)
    return mask


def _iter_chunks(length: int, config: CanonicalizerConfig, chunk_size: int) -> Iterator[np.ndarray]:
    """Yield orbit-minimum codes of the non-reducible plans, chunk by chunk."""
    total = 4 ** length
    weights = _weights(length)
    for start in range(0, total, chunk_size):
        codes = np.arange(start, min(start + chunk_size, total), dtype=np.int64)
        digits = _digits(codes, weights)
        mins = _orbit_min_codes(digits, weights, config)
        if config.reduce_cycles:
            mins = mins[~_reducible_mask(digits)]
        logging.debug("enumerate length=%d chunk=%d..%d kept=%d", length, start, start + len(codes), len(mins))
        yield mins


def enumerate_canonical(
    length: int,
    config: Optional[CanonicalizerConfig] = None,
    allow_large: bool = False,
    chunk_size: int = CHUNK_SIZE,
) -> Set[Plan]:
    """Every plan of exactly ``length`` moves that is its own canonical form."""
    length = _check_length(length, allow_large)
    cfg = config or DEFAULT_CONFIG
    found: Set[int] = set()
    for mins in _iter_chunks(length, cfg, chunk_size):
        found.update(int(c) for c in np.unique(mins))
    return {decode_plan(c, length) for c in found}


def count_canonical(length: int, config: Optional[CanonicalizerConfig] = None, allow_large: bool = False) -> int:
    return len(enumerate_canonical(length, config, allow_large=allow_large))


def orbit_sizes(
    length: int,
    config: Optional[CanonicalizerConfig] = None,
    allow_large: bool = False,
) -> Dict[Plan, int]:
    """Canonical plan -> number of distinct length-``length`` plans in its orbit."""
    length = _check_length(length, allow_large)
    cfg = config or DEFAULT_CONFIG
    sizes: Dict[int, int] = {}
    for mins in _iter_chunks(length, cfg, CHUNK_SIZE):
        uniq, counts = np.unique(mins, return_counts=True)
        for c, n in zip(uniq.tolist(), counts.tolist()):
            sizes[c] = sizes.get(c, 0) + n
    return {decode_plan(c, length): n for c, n in sorted(sizes.items())}
