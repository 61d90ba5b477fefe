from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Tuple

from crosssums.core.levels import PuzzleSource
from crosssums.core.profile import PlayerProfile, date_key, utc_today
from crosssums.core.puzzle import PuzzleDefinition

logger = logging.getLogger(__name__)

DAILY_DIFFICULTY = "Medium"
DAILY_LEVEL_CYCLE = 100


def daily_level(day: date) -> int:
    """Level of the daily difficulty that is played on ``day``."""
    return (day.timetuple().tm_yday % DAILY_LEVEL_CYCLE) + 1


class DailyPuzzleService:
    """Picks the puzzle of the day so every player gets the same grid on a UTC date."""

    def __init__(self, source: PuzzleSource) -> None:
        self._source = source
        self._cached: Optional[Tuple[str, PuzzleDefinition]] = None

    def puzzle_for(self, day: Optional[date] = None) -> PuzzleDefinition:
        day = day or utc_today()
        key = date_key(day)
        if self._cached is not None and self._cached[0] == key:
            return self._cached[1]
        level = daily_level(day)
        base = self._source.get_puzzle(DAILY_DIFFICULTY, level)
        puzzle = PuzzleDefinition(
            puzzle_id=f"daily-{key}",
            difficulty="Daily",
            level=base.level,
            grid=base.grid,
            solution=base.solution,
            row_sums=base.row_sums,
            column_sums=base.column_sums,
        )
        logger.info("Daily puzzle for %s is %s level %d", key, DAILY_DIFFICULTY, level)
        self._cached = (key, puzzle)
        return puzzle

    @staticmethod
    def is_completed(profile: PlayerProfile, day: Optional[date] = None) -> bool:
        return profile.is_daily_completed(date_key(day or utc_today()))

    @staticmethod
    def completion_time(profile: PlayerProfile, day: Optional[date] = None) -> Optional[float]:
        return profile.daily_completions.get(date_key(day or utc_today()))
