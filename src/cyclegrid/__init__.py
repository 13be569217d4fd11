"""cyclegrid package.

Canonical forms of cyclic move plans under rotation, reflection, phase shift
and cycle reduction, and a deterministic simulator that runs a plan against a
tiled board with walls, ice, rotators and several agents.

Convenience imports are exposed for common workflows.
"""

from .basics import Direction, parse_plan, serialize_plan
from .board import Board, parse_board
from .errors import CycleGridError, InvalidArgument, InvalidBoard
from .orbits import enumerate_canonical
from .simulator import SimulatorConfig, Verdict, run_simulation, simulate
from .symmetry import CanonicalizerConfig, canonicalize, symmetry_info
from .validation import validate_solution

__all__ = [
    "Board",
    "CanonicalizerConfig",
    "CycleGridError",
    "Direction",
    "InvalidArgument",
    "InvalidBoard",
    "SimulatorConfig",
    "Verdict",
    "canonicalize",
    "enumerate_canonical",
    "parse_board",
    "parse_plan",
    "run_simulation",
    "serialize_plan",
    "simulate",
    "symmetry_info",
    "validate_solution",
]
