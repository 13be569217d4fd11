"""Error taxonomy shared by the canonicalizer and the simulator.

Both are raised eagerly, before any work is done. A rotator loop is not an
error: it is reported as the ``STUCK`` verdict.
"""


class CycleGridError(ValueError):
    """Base class for all input errors raised by cyclegrid."""


class InvalidArgument(CycleGridError):
    """Empty plan, unknown direction, or a non-positive length/step bound."""


class InvalidBoard(CycleGridError):
    """Board is structurally inconsistent (ragged rows, unknown tile, bad agent)."""
