from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol

import yaml

from crosssums.core.errors import InvalidPuzzleData
from crosssums.core.generator import generate_puzzle
from crosssums.core.puzzle import PuzzleDefinition

logger = logging.getLogger(__name__)

DIFFICULTIES = ["Easy", "Medium", "Hard", "Extra Hard", "Expert"]

MAX_LEVEL = 999999

EMERGENCY_SIZES: Dict[str, int] = {
    "easy": 3,
    "medium": 4,
    "hard": 4,
    "extra hard": 5,
    "extrahard": 5,
    "expert": 6,
}


class PuzzleSource(Protocol):
    """Content supply the controller loads puzzles from."""

    def get_puzzle(self, difficulty: str, level: int) -> PuzzleDefinition: ...

    def get_max_level(self, difficulty: str) -> int: ...

    def get_available_difficulties(self) -> List[str]: ...


def _norm(difficulty: str) -> str:
    return " ".join(difficulty.strip().lower().split())


def emergency_puzzle(difficulty: str, level: int) -> PuzzleDefinition:
    """Build a simple always-valid puzzle for when no authored content exists.

    The grid holds 1..n*n in order and the solution keeps every cell where
    ``row + column`` is even.
    """
    size = EMERGENCY_SIZES.get(_norm(difficulty), 3)
    grid = [[r * size + c + 1 for c in range(size)] for r in range(size)]
    solution = [[(r + c) % 2 == 0 for c in range(size)] for r in range(size)]
    row_sums = [sum(v for v, kept in zip(grid[r], solution[r]) if kept) for r in range(size)]
    column_sums = [sum(grid[r][c] for r in range(size) if solution[r][c]) for c in range(size)]
    return PuzzleDefinition.create(difficulty, level, grid, solution, row_sums, column_sums)


class PuzzleRepository:
    """Authored puzzles loaded from ``data/puzzles/*.yaml``.

    Each file holds one difficulty::

        difficulty: Easy
        puzzles:
          - level: 1
            grid: [[5, 3], [2, 7]]
            solution: [[1, 0], [0, 1]]
            row_sums: [5, 7]
            column_sums: [2, 10]
    """

    def __init__(self, puzzles_dir: Optional[Path] = None) -> None:
        self._base_dir = Path(puzzles_dir) if puzzles_dir else self._default_dir()
        self._puzzles = self._load_puzzles()
        self._generated: Dict[str, PuzzleDefinition] = {}

    @staticmethod
    def _default_dir() -> Path:
        return Path(__file__).resolve().parent.parent / "data" / "puzzles"

    def get_puzzle(self, difficulty: str, level: int) -> PuzzleDefinition:
        """Return the authored puzzle, else a generated one, else an emergency puzzle."""
        authored = self._puzzles.get(_norm(difficulty), {}).get(level)
        if authored is not None:
            return authored
        key = f"{_norm(difficulty)}-{level}"
        cached = self._generated.get(key)
        if cached is not None:
            return cached
        puzzle = generate_puzzle(difficulty, level)
        if puzzle is None:
            logger.warning("No puzzle for %s level %d, using emergency puzzle", difficulty, level)
            puzzle = emergency_puzzle(difficulty, level)
        self._generated[key] = puzzle
        return puzzle

    def get_max_level(self, difficulty: str) -> int:
        """Highest playable level. Levels past the authored ones are generated."""
        return MAX_LEVEL

    def authored_max_level(self, difficulty: str) -> int:
        levels = self._puzzles.get(_norm(difficulty))
        return max(levels) if levels else 0

    def get_available_difficulties(self) -> List[str]:
        known = {_norm(name) for name in DIFFICULTIES}
        extra = sorted(
            {
                puzzle.difficulty
                for by_level in self._puzzles.values()
                for puzzle in by_level.values()
                if _norm(puzzle.difficulty) not in known
            }
        )
        return list(DIFFICULTIES) + extra

    def puzzles_for(self, difficulty: str) -> List[PuzzleDefinition]:
        by_level = self._puzzles.get(_norm(difficulty), {})
        return [by_level[level] for level in sorted(by_level)]

    def validate_all(self) -> Dict[str, bool]:
        return {
            puzzle.puzzle_id: puzzle.is_valid
            for by_level in self._puzzles.values()
            for puzzle in by_level.values()
        }

    def clear_cache(self) -> None:
        self._generated.clear()

    def _load_puzzles(self) -> Dict[str, Dict[int, PuzzleDefinition]]:
        if not self._base_dir.exists():
            raise FileNotFoundError(f"Puzzles directory not found: {self._base_dir}")

        puzzles: Dict[str, Dict[int, PuzzleDefinition]] = {}
        for path in sorted(self._base_dir.glob("*.yaml")):
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
            if not raw or not isinstance(raw, dict):
                raise InvalidPuzzleData(f"{path.name}: expected YAML with 'difficulty' and 'puzzles'")
            difficulty = raw.get("difficulty")
            entries = raw.get("puzzles")
            if not difficulty or not isinstance(difficulty, str):
                raise InvalidPuzzleData(f"{path.name}: missing or invalid 'difficulty'")
            if not isinstance(entries, list) or not entries:
                raise InvalidPuzzleData(f"{path.name}: 'puzzles' must be a non-empty list")
            by_level = puzzles.setdefault(_norm(difficulty), {})
            for entry in entries:
                puzzle = self._parse_entry(path, difficulty.strip(), entry)
                if puzzle.level in by_level:
                    raise InvalidPuzzleData(f"{path.name}: duplicate level {puzzle.level}")
                by_level[puzzle.level] = puzzle

        if not puzzles:
            raise ValueError(f"No puzzle files (*.yaml) found in {self._base_dir}")
        logger.info(
            "Loaded %d puzzles across %d difficulties",
            sum(len(v) for v in puzzles.values()),
            len(puzzles),
        )
        return puzzles

    @staticmethod
    def _parse_entry(path: Path, difficulty: str, entry: object) -> PuzzleDefinition:
        if not isinstance(entry, dict):
            raise InvalidPuzzleData(f"{path.name}: each puzzle must be a mapping")
        missing = [k for k in ("level", "grid", "solution", "row_sums", "column_sums") if k not in entry]
        if missing:
            raise InvalidPuzzleData(f"{path.name}: puzzle is missing {', '.join(missing)}")
        try:
            puzzle = PuzzleDefinition.create(
                difficulty,
                int(entry["level"]),
                entry["grid"],
                entry["solution"],
                entry["row_sums"],
                entry["column_sums"],
            )
        except (TypeError, ValueError) as e:
            raise InvalidPuzzleData(f"{path.name}: malformed puzzle data ({e})") from e
        try:
            puzzle.validate()
        except InvalidPuzzleData as e:
            raise InvalidPuzzleData(f"{path.name}: {e}") from e
        return puzzle
