from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Set

from crosssums.core.events import GameEvent, LevelCompleted, LevelRestarted, LifeLost

logger = logging.getLogger(__name__)

MAX_SUBMISSIONS = 100

# total levels completed -> achievement
PROGRESSION_ACHIEVEMENTS = [
    (1, "first_steps"),
    (10, "getting_serious"),
    (50, "expert"),
    (100, "master"),
]

# difficulty (lower case) -> (highest level needed, achievement)
DIFFICULTY_ACHIEVEMENTS = {
    "easy": (25, "easy_master"),
    "medium": (15, "medium_master"),
    "hard": (10, "hard_core"),
    "extra hard": (5, "extra_hard_elite"),
}

FAST_COMPLETION_SECONDS = 30.0
FAST_DAILY_SECONDS = 60.0


@dataclass(frozen=True)
class Submission:
    """A score handed to the leaderboard."""

    board: str
    difficulty: str
    value: float


class LeaderboardReporter:
    """Turns completed levels into leaderboard submissions.

    Subscribe an instance to the controller's EventBus. The highest-level
    board only receives new records; completion times are always submitted.
    ``submissions`` keeps the most recent MAX_SUBMISSIONS entries.
    """

    def __init__(self, max_submissions: int = MAX_SUBMISSIONS) -> None:
        self.submissions: Deque[Submission] = deque(maxlen=max_submissions)

    def __call__(self, event: GameEvent) -> None:
        if isinstance(event, LevelCompleted):
            self.on_level_completed(event)

    def on_level_completed(self, event: LevelCompleted) -> None:
        if event.new_record and not event.is_daily:
            self._submit("highest_level", event.difficulty, event.level)
        self._submit("completion_time", event.difficulty, round(event.elapsed_seconds, 2))

    def _submit(self, board: str, difficulty: str, value: float) -> None:
        self.submissions.append(Submission(board=board, difficulty=difficulty, value=value))
        logger.info("Leaderboard %s (%s): %s", board, difficulty, value)


class AchievementTracker:
    """Unlocks achievements from game events.

    Runs of completed levels, hint-free completions and mistake-free
    completions are counted across levels. A restart or a lost game ends
    all three runs. Each achievement unlocks once.
    """

    def __init__(self) -> None:
        self.unlocked: Set[str] = set()
        self.consecutive_completions = 0
        self.completions_without_hints = 0
        self.completions_without_mistakes = 0

    def __call__(self, event: GameEvent) -> None:
        if isinstance(event, LevelCompleted):
            self.on_level_completed(event)
        elif isinstance(event, LevelRestarted):
            self.reset_runs()
        elif isinstance(event, LifeLost) and event.game_over:
            self.reset_runs()

    def reset_runs(self) -> None:
        self.consecutive_completions = 0
        self.completions_without_hints = 0
        self.completions_without_mistakes = 0

    def on_level_completed(self, event: LevelCompleted) -> List[str]:
        """Update the runs and return the achievements this completion unlocked."""
        self.consecutive_completions += 1
        self.completions_without_hints = self.completions_without_hints + 1 if event.hints_used == 0 else 0
        self.completions_without_mistakes = self.completions_without_mistakes + 1 if event.mistakes == 0 else 0

        earned = [name for needed, name in PROGRESSION_ACHIEVEMENTS if event.total_levels_completed >= needed]
        if event.elapsed_seconds < FAST_COMPLETION_SECONDS:
            earned.append("lightning_fast")
        rule = DIFFICULTY_ACHIEVEMENTS.get(event.difficulty.strip().lower())
        if rule is not None and event.highest_level >= rule[0]:
            earned.append(rule[1])
        if event.mistakes == 0:
            earned.append("perfectionist")
        if self.completions_without_hints >= 10:
            earned.append("hint_free")
        if self.completions_without_mistakes >= 5:
            earned.append("no_mistakes")
        if self.consecutive_completions >= 5:
            earned.append("on_fire")
        if self.consecutive_completions >= 25:
            earned.append("unstoppable")
        if event.is_daily:
            earned.extend(self._daily_achievements(event))
        return self._unlock(earned)

    @staticmethod
    def _daily_achievements(event: LevelCompleted) -> List[str]:
        earned = []
        if event.total_daily_completed >= 1:
            earned.append("daily_player")
        if event.daily_streak >= 7:
            earned.append("daily_streak_week")
        if event.daily_streak >= 30:
            earned.append("daily_streak_month")
        if event.elapsed_seconds < FAST_DAILY_SECONDS:
            earned.append("daily_speedster")
        return earned

    def _unlock(self, names: List[str]) -> List[str]:
        new = [name for name in names if name not in self.unlocked]
        for name in new:
            self.unlocked.add(name)
            logger.info("Achievement unlocked: %s", name)
        return new
