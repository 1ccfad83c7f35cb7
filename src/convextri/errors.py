"""Exception types raised by the triangulation core."""

from __future__ import annotations


class InvalidInputError(ValueError):
    """The caller supplied input the triangulation cannot accept.

    Raised before any cost table is allocated.
    """


class TriangulationInvariantError(RuntimeError):
    """The cost table is in a state the solver should never produce.

    Indicates a defect in the fill phase (unfilled cell, apex outside its
    span) rather than bad input; the computation is abandoned.
    """


__all__ = ["InvalidInputError", "TriangulationInvariantError"]
