"""Error types raised by the Cross Sums core."""

from __future__ import annotations


class CrossSumsError(Exception):
    """Base class for all Cross Sums errors."""


class InvalidPuzzleData(CrossSumsError, ValueError):
    """A puzzle's grid, solution or target sums are inconsistent."""


class ShapeMismatch(CrossSumsError, ValueError):
    """A candidate mask does not have the puzzle's dimensions."""
