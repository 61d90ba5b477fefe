from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from crosssums.core.errors import InvalidPuzzleData, ShapeMismatch

Mask = Sequence[Sequence[bool]]


def puzzle_id_for(difficulty: str, level: int) -> str:
    """Build the identifier for a difficulty/level pair, e.g. ``extra-hard-3``."""
    slug = "-".join(difficulty.strip().lower().split())
    return f"{slug}-{level}"


@dataclass(frozen=True)
class PuzzleDefinition:
    """A single, complete Cross Sums puzzle.

    The player marks each cell of ``grid`` as kept or removed so that the
    kept numbers of every row and column add up to ``row_sums`` and
    ``column_sums``. ``solution`` holds True for kept cells.
    """

    puzzle_id: str
    difficulty: str
    level: int
    grid: Tuple[Tuple[int, ...], ...]
    solution: Tuple[Tuple[bool, ...], ...]
    row_sums: Tuple[int, ...]
    column_sums: Tuple[int, ...]

    @classmethod
    def create(
        cls,
        difficulty: str,
        level: int,
        grid: Sequence[Sequence[int]],
        solution: Mask,
        row_sums: Sequence[int],
        column_sums: Sequence[int],
        puzzle_id: Optional[str] = None,
    ) -> "PuzzleDefinition":
        """Create a puzzle from nested lists, converting them to tuples."""
        return cls(
            puzzle_id=puzzle_id or puzzle_id_for(difficulty, level),
            difficulty=difficulty,
            level=int(level),
            grid=tuple(tuple(int(v) for v in row) for row in grid),
            solution=tuple(tuple(bool(v) for v in row) for row in solution),
            row_sums=tuple(int(v) for v in row_sums),
            column_sums=tuple(int(v) for v in column_sums),
        )

    @property
    def row_count(self) -> int:
        return len(self.grid)

    @property
    def column_count(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    @property
    def cell_count(self) -> int:
        return self.row_count * self.column_count

    @property
    def is_valid(self) -> bool:
        try:
            self.validate()
        except InvalidPuzzleData:
            return False
        return True

    def validate(self) -> None:
        """Raise InvalidPuzzleData unless the grid, solution and sums agree."""
        rows, cols = self.row_count, self.column_count
        if rows == 0 or cols == 0:
            raise InvalidPuzzleData(f"{self.puzzle_id}: grid is empty")
        if any(len(row) != cols for row in self.grid):
            raise InvalidPuzzleData(f"{self.puzzle_id}: grid rows have different lengths")
        if len(self.solution) != rows or any(len(row) != cols for row in self.solution):
            raise InvalidPuzzleData(f"{self.puzzle_id}: solution shape does not match grid")
        if len(self.row_sums) != rows:
            raise InvalidPuzzleData(f"{self.puzzle_id}: expected {rows} row sums, got {len(self.row_sums)}")
        if len(self.column_sums) != cols:
            raise InvalidPuzzleData(
                f"{self.puzzle_id}: expected {cols} column sums, got {len(self.column_sums)}"
            )
        for row, target in enumerate(self.row_sums):
            actual = self.row_sum(self.solution, row)
            if actual != target:
                raise InvalidPuzzleData(f"{self.puzzle_id} row {row}: expected {target}, got {actual}")
        for col, target in enumerate(self.column_sums):
            actual = self.column_sum(self.solution, col)
            if actual != target:
                raise InvalidPuzzleData(f"{self.puzzle_id} column {col}: expected {target}, got {actual}")

    def _check_shape(self, mask: Mask) -> None:
        if len(mask) != self.row_count or any(len(row) != self.column_count for row in mask):
            raise ShapeMismatch(
                f"mask does not match {self.row_count}x{self.column_count} puzzle {self.puzzle_id}"
            )

    def row_sum(self, mask: Mask, row: int) -> Optional[int]:
        """Sum of grid values in ``row`` where ``mask`` is True.

        Returns None for a row outside the grid and raises ShapeMismatch
        when ``mask`` has different dimensions from the puzzle.
        """
        self._check_shape(mask)
        if not 0 <= row < self.row_count:
            return None
        return sum(value for value, kept in zip(self.grid[row], mask[row]) if kept)

    def column_sum(self, mask: Mask, column: int) -> Optional[int]:
        """Sum of grid values in ``column`` where ``mask`` is True."""
        self._check_shape(mask)
        if not 0 <= column < self.column_count:
            return None
        return sum(self.grid[r][column] for r in range(self.row_count) if mask[r][column])

    def row_sums_for(self, mask: Mask) -> List[int]:
        self._check_shape(mask)
        return [self.row_sum(mask, r) for r in range(self.row_count)]

    def column_sums_for(self, mask: Mask) -> List[int]:
        self._check_shape(mask)
        return [self.column_sum(mask, c) for c in range(self.column_count)]

    def is_solution(self, mask: Mask) -> bool:
        """Return True if ``mask`` matches the stored solution cell for cell."""
        try:
            self._check_shape(mask)
        except ShapeMismatch:
            return False
        return all(
            bool(mask[r][c]) == self.solution[r][c]
            for r in range(self.row_count)
            for c in range(self.column_count)
        )

    def value_at(self, row: int, column: int) -> Optional[int]:
        if 0 <= row < self.row_count and 0 <= column < self.column_count:
            return self.grid[row][column]
        return None

    def solution_state_at(self, row: int, column: int) -> Optional[bool]:
        if 0 <= row < self.row_count and 0 <= column < self.column_count:
            return self.solution[row][column]
        return None
