"""Seeded generation of puzzles with a unique solution.

Levels without authored content are generated on demand. The random stream
is seeded from the difficulty and level, so a given level is the same grid
for every player and every run.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from crosssums.core.puzzle import PuzzleDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratorConfig:
    size: int
    low: int
    high: int
    max_attempts: int


# difficulty (lower case) -> generator settings
GENERATOR_CONFIGS: Dict[str, GeneratorConfig] = {
    "easy": GeneratorConfig(size=3, low=1, high=9, max_attempts=100),
    "medium": GeneratorConfig(size=4, low=1, high=15, max_attempts=200),
    "hard": GeneratorConfig(size=5, low=1, high=20, max_attempts=300),
    "extra hard": GeneratorConfig(size=6, low=1, high=25, max_attempts=500),
    "extrahard": GeneratorConfig(size=6, low=1, high=25, max_attempts=500),
    "expert": GeneratorConfig(size=6, low=1, high=30, max_attempts=500),
}


def _norm(difficulty: str) -> str:
    return " ".join(difficulty.strip().lower().split())


def _row_options(values: Sequence[int], target: int) -> List[Tuple[bool, ...]]:
    """Every keep/remove pattern of one row whose kept values add up to ``target``."""
    n = len(values)
    options = []
    for bits in range(1 << n):
        pattern = tuple(bool(bits >> i & 1) for i in range(n))
        if sum(v for v, kept in zip(values, pattern) if kept) == target:
            options.append(pattern)
    return options


def count_solutions(
    grid: Sequence[Sequence[int]],
    row_sums: Sequence[int],
    column_sums: Sequence[int],
    limit: int = 2,
) -> int:
    """Count masks meeting every row and column target, stopping at ``limit``.

    Rows are chosen one at a time from the patterns that satisfy their own
    target. Since all values are positive, a partial column total above its
    target, or one that the remaining rows can no longer reach, prunes the
    branch.
    """
    rows = len(grid)
    columns = len(grid[0]) if rows else 0
    options = [_row_options(grid[r], row_sums[r]) for r in range(rows)]
    if any(not o for o in options):
        return 0
    # remaining[r][c]: the most rows r.. can still add to column c
    remaining = [[0] * columns for _ in range(rows + 1)]
    for r in range(rows - 1, -1, -1):
        remaining[r] = [remaining[r + 1][c] + grid[r][c] for c in range(columns)]

    found = 0

    def _search(r: int, totals: List[int]) -> None:
        nonlocal found
        if found >= limit:
            return
        if r == rows:
            if totals == list(column_sums):
                found += 1
            return
        for pattern in options[r]:
            new_totals = [t + (grid[r][c] if pattern[c] else 0) for c, t in enumerate(totals)]
            if all(
                new_totals[c] <= column_sums[c] <= new_totals[c] + remaining[r + 1][c]
                for c in range(columns)
            ):
                _search(r + 1, new_totals)

    _search(0, [0] * columns)
    return found


def generate_puzzle(difficulty: str, level: int) -> Optional[PuzzleDefinition]:
    """Generate the puzzle for a difficulty and level, or None if that isn't possible.

    Unknown difficulties return None, as does running out of attempts without
    finding a grid whose solution is unique.
    """
    config = GENERATOR_CONFIGS.get(_norm(difficulty))
    if config is None:
        return None
    rng = random.Random(f"{_norm(difficulty)}:{level}")
    size = config.size
    for attempt in range(1, config.max_attempts + 1):
        grid = [[rng.randint(config.low, config.high) for _ in range(size)] for _ in range(size)]
        solution = [[rng.random() < 0.5 for _ in range(size)] for _ in range(size)]
        kept = sum(cell for row in solution for cell in row)
        if kept == 0 or kept == size * size:
            continue
        row_sums = [sum(v for v, k in zip(grid[r], solution[r]) if k) for r in range(size)]
        column_sums = [sum(grid[r][c] for r in range(size) if solution[r][c]) for c in range(size)]
        if count_solutions(grid, row_sums, column_sums) != 1:
            continue
        logger.debug("Generated %s level %d after %d attempts", difficulty, level, attempt)
        return PuzzleDefinition.create(difficulty, level, grid, solution, row_sums, column_sums)
    logger.warning("Could not generate %s level %d in %d attempts", difficulty, level, config.max_attempts)
    return None
