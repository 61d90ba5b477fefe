from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from crosssums.core.puzzle import PuzzleDefinition
from crosssums.core.session import CellMark, GameSession

logger = logging.getLogger(__name__)


class HintStatus(Enum):
    APPLIED = "applied"
    NO_HINTS_AVAILABLE = "no_hints_available"
    PUZZLE_FULLY_MARKED = "puzzle_fully_marked"
    NO_ACTIVE_GAME = "no_active_game"
    SHAPE_MISMATCH = "shape_mismatch"


@dataclass(frozen=True)
class HintResult:
    """Outcome of a hint request.

    ``remaining`` is the hint balance after the request: one less than the
    balance passed in when the hint was applied, unchanged when declined.
    """

    status: HintStatus
    remaining: int
    row: Optional[int] = None
    column: Optional[int] = None
    mark: Optional[CellMark] = None

    @property
    def applied(self) -> bool:
        return self.status is HintStatus.APPLIED


def declined(status: HintStatus, balance: int) -> HintResult:
    return HintResult(status=status, remaining=max(0, balance))


def apply_hint(
    session: GameSession,
    puzzle: PuzzleDefinition,
    hint_balance: int,
    rng: Optional[random.Random] = None,
) -> HintResult:
    """Reveal one unmarked cell by setting it to its solution mark.

    The cell is picked uniformly at random among the cells that are still
    unmarked. The hint counts as a move on the session. The win condition
    is not checked here; callers re-check it exactly as after a manual move.
    """
    if (session.row_count, session.column_count) != (puzzle.row_count, puzzle.column_count):
        logger.warning("Hint declined: session grid does not match puzzle %s", puzzle.puzzle_id)
        return declined(HintStatus.SHAPE_MISMATCH, hint_balance)
    if hint_balance <= 0:
        return declined(HintStatus.NO_HINTS_AVAILABLE, hint_balance)
    candidates = session.unmarked_cells()
    if not candidates:
        return declined(HintStatus.PUZZLE_FULLY_MARKED, hint_balance)

    row, column = (rng or random).choice(candidates)
    mark = CellMark.from_solution(puzzle.solution[row][column])
    session.set_cell(row, column, mark)
    logger.debug("Hint revealed (%d, %d) as %s", row, column, mark.value)
    return HintResult(
        status=HintStatus.APPLIED,
        remaining=hint_balance - 1,
        row=row,
        column=column,
        mark=mark,
    )
