from __future__ import annotations

import time
from enum import Enum
from typing import Callable, List, Optional, Tuple

from crosssums.core.puzzle import PuzzleDefinition

STARTING_LIVES = 3


class CellMark(Enum):
    """Mark a player can place on a grid cell."""

    UNMARKED = "unmarked"
    KEPT = "kept"
    REMOVED = "removed"

    def next(self) -> "CellMark":
        """Next mark in the UNMARKED -> KEPT -> REMOVED -> UNMARKED cycle."""
        return _CYCLE[self]

    @classmethod
    def from_solution(cls, kept: bool) -> "CellMark":
        return cls.KEPT if kept else cls.REMOVED


_CYCLE = {
    CellMark.UNMARKED: CellMark.KEPT,
    CellMark.KEPT: CellMark.REMOVED,
    CellMark.REMOVED: CellMark.UNMARKED,
}


class GameSession:
    """Tracks the player's marks, lives and moves for one attempt at a puzzle.

    A session is bound to a single puzzle for its whole lifetime. Restarting
    resets it in place; loading another puzzle means creating a new session.
    """

    def __init__(
        self,
        puzzle: PuzzleDefinition,
        lives: int = STARTING_LIVES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._puzzle = puzzle
        self._starting_lives = lives
        self._clock = clock
        self._marks: List[List[CellMark]] = []
        self._lives = lives
        self._move_count = 0
        self._start_time = clock()
        self._completed = False
        self._game_over = False
        self.restart()

    @property
    def puzzle(self) -> PuzzleDefinition:
        """The puzzle this session is played on."""
        return self._puzzle

    @property
    def lives_remaining(self) -> int:
        """Lives left before the game is over."""
        return self._lives

    @property
    def starting_lives(self) -> int:
        """Lives the session starts and restarts with."""
        return self._starting_lives

    @property
    def move_count(self) -> int:
        """Number of cell changes made since the session (re)started."""
        return self._move_count

    @property
    def start_time(self) -> float:
        """Clock reading when the session last (re)started."""
        return self._start_time

    @property
    def elapsed_seconds(self) -> float:
        """Seconds since the session last (re)started, never negative."""
        return max(0.0, self._clock() - self._start_time)

    @property
    def is_completed(self) -> bool:
        """True once the puzzle has been solved."""
        return self._completed

    @property
    def is_game_over(self) -> bool:
        """True once every life has been lost."""
        return self._game_over

    @property
    def is_active(self) -> bool:
        """True while the puzzle is neither solved nor lost."""
        return not self._completed and not self._game_over

    @property
    def row_count(self) -> int:
        """Number of rows in the mark grid."""
        return len(self._marks)

    @property
    def column_count(self) -> int:
        """Number of columns in the mark grid."""
        return len(self._marks[0]) if self._marks else 0

    @property
    def completion_percentage(self) -> float:
        """Fraction of cells that carry a mark, between 0.0 and 1.0."""
        total = self.row_count * self.column_count
        if not total:
            return 0.0
        marked = sum(1 for row in self._marks for mark in row if mark is not CellMark.UNMARKED)
        return marked / total

    def is_valid_position(self, row: int, column: int) -> bool:
        """True if (row, column) lies inside the grid."""
        return 0 <= row < self.row_count and 0 <= column < self.column_count

    def mark_at(self, row: int, column: int) -> Optional[CellMark]:
        """Current mark of a cell, or None for a position outside the grid."""
        if not self.is_valid_position(row, column):
            return None
        return self._marks[row][column]

    def marks(self) -> Tuple[Tuple[CellMark, ...], ...]:
        """Snapshot of the mark grid."""
        return tuple(tuple(row) for row in self._marks)

    def set_cell(self, row: int, column: int, mark: CellMark) -> bool:
        """Set a cell to ``mark``. Returns False for a position outside the grid."""
        if not self.is_valid_position(row, column):
            return False
        if self._marks[row][column] is not mark:
            self._marks[row][column] = mark
            self._move_count += 1
        return True

    def toggle_cell(self, row: int, column: int) -> Optional[CellMark]:
        """Advance a cell through the mark cycle and return its new mark."""
        current = self.mark_at(row, column)
        if current is None:
            return None
        new_mark = current.next()
        self.set_cell(row, column, new_mark)
        return new_mark

    def clear_cell(self, row: int, column: int) -> bool:
        """Reset a cell to UNMARKED. Returns False for a position outside the grid."""
        return self.set_cell(row, column, CellMark.UNMARKED)

    def is_fully_marked(self) -> bool:
        """True when no cell is left UNMARKED."""
        return all(mark is not CellMark.UNMARKED for row in self._marks for mark in row)

    def effective_mask(self) -> List[List[bool]]:
        """Kept cells as True and everything else as False, for solution checks."""
        return [[mark is CellMark.KEPT for mark in row] for row in self._marks]

    def unmarked_cells(self) -> List[Tuple[int, int]]:
        """Positions of every UNMARKED cell in row-major order."""
        return [
            (r, c)
            for r, row in enumerate(self._marks)
            for c, mark in enumerate(row)
            if mark is CellMark.UNMARKED
        ]

    def lose_life(self) -> bool:
        """Take one life. Returns False if there were none left to lose."""
        if self._lives <= 0:
            return False
        self._lives -= 1
        if self._lives == 0:
            self._game_over = True
        return True

    def add_lives(self, count: int) -> None:
        """Add lives. A game that was over resumes once lives are above zero."""
        self._lives += max(0, count)
        if self._lives > 0 and self._game_over:
            self._game_over = False

    def mark_completed(self) -> bool:
        """Flag the puzzle as solved. Refused once the game is over."""
        if self._game_over:
            return False
        self._completed = True
        return True

    def mark_game_over(self) -> None:
        """Flag the game as lost. Ignored once the puzzle is solved."""
        if not self._completed:
            self._game_over = True

    def restart(self) -> None:
        """Clear every mark and reset lives, moves, flags and the clock."""
        self._marks = [
            [CellMark.UNMARKED] * self._puzzle.column_count for _ in range(self._puzzle.row_count)
        ]
        self._lives = self._starting_lives
        self._move_count = 0
        self._completed = False
        self._game_over = self._starting_lives <= 0
        self._start_time = self._clock()
