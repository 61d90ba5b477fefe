from __future__ import annotations

import logging
import random
import time
from datetime import date
from typing import Callable, List, Optional

from crosssums.core.daily import DailyPuzzleService
from crosssums.core.errors import InvalidPuzzleData
from crosssums.core.events import EventBus, HintUsed, LevelCompleted, LevelRestarted, LifeLost
from crosssums.core.hints import HintResult, HintStatus, apply_hint, declined
from crosssums.core.levels import PuzzleSource
from crosssums.core.profile import PlayerProfile, date_key, parse_date_key, utc_today
from crosssums.core.progress import ProfilePersistence
from crosssums.core.puzzle import PuzzleDefinition
from crosssums.core.session import STARTING_LIVES, CellMark, GameSession
from crosssums.core.share import build_share_text

logger = logging.getLogger(__name__)


class GameController:
    """Runs a game: loads puzzles, applies moves and hints, detects wins and losses.

    The controller owns the current session and the player profile. Content
    supply and profile storage are injected; side effects such as leaderboard
    reporting subscribe to ``events``.
    """

    def __init__(
        self,
        source: PuzzleSource,
        store: ProfilePersistence,
        events: Optional[EventBus] = None,
        profile: Optional[PlayerProfile] = None,
        lives: int = STARTING_LIVES,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._source = source
        self._store = store
        self._events = events or EventBus()
        self._profile = profile if profile is not None else store.load_profile()
        self._daily = DailyPuzzleService(source)
        self._lives = lives
        self._clock = clock
        self._rng = rng
        self._puzzle: Optional[PuzzleDefinition] = None
        self._session: Optional[GameSession] = None
        self._daily_key: Optional[str] = None
        self._completion_seconds: Optional[float] = None
        self._hints_used = 0
        self.error_message: Optional[str] = None

    # -- state -------------------------------------------------------------

    @property
    def events(self) -> EventBus:
        return self._events

    @property
    def profile(self) -> PlayerProfile:
        return self._profile

    @property
    def puzzle(self) -> Optional[PuzzleDefinition]:
        return self._puzzle

    @property
    def session(self) -> Optional[GameSession]:
        return self._session

    @property
    def is_daily(self) -> bool:
        return self._daily_key is not None

    @property
    def is_game_active(self) -> bool:
        return self._session is not None and self._session.is_active

    @property
    def is_level_complete(self) -> bool:
        return self._session is not None and self._session.is_completed

    @property
    def is_game_over(self) -> bool:
        return self._session is not None and self._session.is_game_over

    @property
    def lives_remaining(self) -> int:
        return self._session.lives_remaining if self._session else 0

    @property
    def hints_available(self) -> int:
        return self._profile.total_hints

    @property
    def can_use_hint(self) -> bool:
        return self._profile.has_hints_available and self.is_game_active

    @property
    def current_level(self) -> int:
        return self._puzzle.level if self._puzzle else 0

    @property
    def current_difficulty(self) -> str:
        return self._puzzle.difficulty if self._puzzle else ""

    @property
    def current_row_sums(self) -> List[int]:
        if self._puzzle is None or self._session is None:
            return []
        return self._puzzle.row_sums_for(self._session.effective_mask())

    @property
    def current_column_sums(self) -> List[int]:
        if self._puzzle is None or self._session is None:
            return []
        return self._puzzle.column_sums_for(self._session.effective_mask())

    def available_difficulties(self) -> List[str]:
        return self._source.get_available_difficulties()

    def highest_level(self, difficulty: str) -> int:
        return self._profile.highest_level(difficulty)

    def next_level(self, difficulty: str) -> int:
        return self._profile.next_level(difficulty)

    # -- loading -----------------------------------------------------------

    def load_puzzle(self, difficulty: str, level: int) -> bool:
        """Load a puzzle and start a fresh session. Returns False if the data is invalid."""
        puzzle = self._source.get_puzzle(difficulty, level)
        return self._start(puzzle, f"{difficulty} Level {level}", daily_key=None)

    def load_daily_puzzle(self, today: Optional[date] = None) -> bool:
        day = today or utc_today()
        puzzle = self._daily.puzzle_for(day)
        return self._start(puzzle, f"Daily {date_key(day)}", daily_key=date_key(day))

    def load_next_level(self) -> bool:
        if self._puzzle is None or self.is_daily:
            return False
        difficulty = self._puzzle.difficulty
        next_level = self._puzzle.level + 1
        if next_level > self._source.get_max_level(difficulty):
            self.error_message = f"No more levels available for {difficulty} difficulty"
            logger.info("No more levels in %s difficulty", difficulty)
            return False
        return self.load_puzzle(difficulty, next_level)

    def restart_level(self) -> bool:
        """Replace the session with a fresh one for the same puzzle."""
        if self._puzzle is None:
            return False
        self._session = GameSession(self._puzzle, lives=self._lives, clock=self._clock)
        self._completion_seconds = None
        self._hints_used = 0
        logger.info("Level restarted: %s", self._puzzle.puzzle_id)
        self._events.publish(LevelRestarted(puzzle_id=self._puzzle.puzzle_id))
        return True

    def clear_error(self) -> None:
        self.error_message = None

    def _start(self, puzzle: PuzzleDefinition, label: str, daily_key: Optional[str]) -> bool:
        self.error_message = None
        try:
            puzzle.validate()
        except InvalidPuzzleData as e:
            logger.error("Puzzle %s failed validation: %s", puzzle.puzzle_id, e)
            self.error_message = f"Invalid puzzle data for: {label}"
            return False
        self._puzzle = puzzle
        self._session = GameSession(puzzle, lives=self._lives, clock=self._clock)
        self._daily_key = daily_key
        self._completion_seconds = None
        self._hints_used = 0
        logger.info(
            "Loaded puzzle %s (%dx%d)", puzzle.puzzle_id, puzzle.row_count, puzzle.column_count
        )
        return True

    # -- moves -------------------------------------------------------------

    def set_cell(self, row: int, column: int, mark: CellMark) -> bool:
        """Set a cell to ``mark``. Returns False if no game is active or the position is invalid."""
        if not self.is_game_active:
            return False
        if not self._session.set_cell(row, column, mark):
            logger.warning("Invalid cell position: (%d, %d)", row, column)
            return False
        logger.debug("Cell (%d, %d) set to %s", row, column, mark.value)
        # every manual placement is judged, even if the cell already held it
        self._validate_move(row, column, mark)
        self.check_for_win()
        return True

    def toggle_cell(self, row: int, column: int) -> Optional[CellMark]:
        """Advance a cell through the mark cycle. Returns the new mark, or None if ignored."""
        if not self.is_game_active:
            return None
        mark = self._session.toggle_cell(row, column)
        if mark is None:
            logger.warning("Invalid cell position: (%d, %d)", row, column)
            return None
        logger.debug("Cell (%d, %d) toggled to %s", row, column, mark.value)
        self._validate_move(row, column, mark)
        self.check_for_win()
        return mark

    def use_hint(self) -> HintResult:
        """Reveal one unmarked cell, spending a hint from the profile."""
        if not self.is_game_active:
            return declined(HintStatus.NO_ACTIVE_GAME, self._profile.total_hints)
        result = apply_hint(self._session, self._puzzle, self._profile.total_hints, self._rng)
        if not result.applied:
            logger.info("Hint declined: %s", result.status.value)
            return result
        self._profile.use_hint()
        self._hints_used += 1
        self._save()
        logger.info(
            "Hint used: cell (%d, %d) = %s, %d left",
            result.row,
            result.column,
            result.mark.value,
            result.remaining,
        )
        self._events.publish(
            HintUsed(
                puzzle_id=self._puzzle.puzzle_id,
                row=result.row,
                column=result.column,
                mark=result.mark,
                remaining=result.remaining,
            )
        )
        self.check_for_win()
        return result

    def _validate_move(self, row: int, column: int, mark: CellMark) -> None:
        if mark is CellMark.UNMARKED:
            return
        expected = CellMark.from_solution(self._puzzle.solution[row][column])
        if mark is expected:
            return
        if not self._session.lose_life():
            return
        logger.info("Mistake at (%d, %d), lives remaining: %d", row, column, self._session.lives_remaining)
        if self._session.is_game_over:
            logger.info("Game over: %s", self._puzzle.puzzle_id)
        self._events.publish(
            LifeLost(
                puzzle_id=self._puzzle.puzzle_id,
                row=row,
                column=column,
                lives_remaining=self._session.lives_remaining,
                game_over=self._session.is_game_over,
            )
        )

    # -- completion --------------------------------------------------------

    def check_for_win(self) -> bool:
        """Complete the level if the grid is fully and correctly marked.

        Returns True only when this call completed the level; repeated calls
        after completion or game over change nothing.
        """
        if self._puzzle is None or self._session is None or not self._session.is_active:
            return False
        if not self._session.is_fully_marked():
            return False
        if not self._puzzle.is_solution(self._session.effective_mask()):
            # the player may keep adjusting marks; no extra penalty here
            logger.info("Grid fully marked but incorrect: %s", self._puzzle.puzzle_id)
            return False
        if not self._session.mark_completed():
            return False
        self._handle_level_complete()
        return True

    def _handle_level_complete(self) -> None:
        puzzle, session = self._puzzle, self._session
        elapsed = session.elapsed_seconds
        self._completion_seconds = elapsed
        mistakes = session.starting_lives - session.lives_remaining
        new_record = False
        hints_awarded = 0
        daily_streak = 0
        if self._daily_key is not None:
            self._profile.complete_daily_puzzle(self._daily_key, elapsed)
            daily_streak = self._profile.compute_current_streak(parse_date_key(self._daily_key))
        else:
            new_record = self._profile.complete_level(puzzle.level, puzzle.difficulty)
            hints_awarded = self._profile.award_hints_for_completion(puzzle.level, puzzle.difficulty)
        self._save()

        logger.info("Level %d (%s) completed in %.1fs", puzzle.level, puzzle.difficulty, elapsed)
        if new_record:
            logger.info("New personal best for %s: level %d", puzzle.difficulty, puzzle.level)
        self._events.publish(
            LevelCompleted(
                puzzle_id=puzzle.puzzle_id,
                difficulty=puzzle.difficulty,
                level=puzzle.level,
                elapsed_seconds=elapsed,
                move_count=session.move_count,
                mistakes=mistakes,
                new_record=new_record,
                hints_awarded=hints_awarded,
                is_daily=self._daily_key is not None,
                hints_used=self._hints_used,
                highest_level=self._profile.highest_level(puzzle.difficulty),
                total_levels_completed=self._profile.total_levels_completed,
                daily_streak=daily_streak,
                total_daily_completed=self._profile.total_daily_completed,
            )
        )

    def share_text(self) -> Optional[str]:
        """Shareable summary of the completed level, or None before completion."""
        if not self.is_level_complete:
            return None
        streak = None
        if self._daily_key is not None:
            streak = self._profile.compute_current_streak(parse_date_key(self._daily_key))
        return build_share_text(
            self._puzzle,
            self._completion_seconds or 0.0,
            self._session.move_count,
            self._session.lives_remaining,
            is_daily=self.is_daily,
            streak=streak,
        )

    # -- settings ----------------------------------------------------------

    def set_sound_enabled(self, enabled: bool) -> None:
        self._profile.set_sound_enabled(enabled)
        self._save()

    def toggle_sound(self) -> bool:
        self._profile.toggle_sound()
        self._save()
        return self._profile.sound_enabled

    def _save(self) -> None:
        self._store.save_profile(self._profile)
