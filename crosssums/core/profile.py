from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_HINTS = 5

# difficulty (lower case) -> (every Nth level, hints granted)
HINT_SCHEDULE: Dict[str, tuple[int, int]] = {
    "easy": (10, 1),
    "medium": (8, 2),
    "hard": (5, 3),
    "extra hard": (3, 5),
}


def utc_today() -> date:
    """Today's date on the UTC calendar, which daily keys are based on."""
    return datetime.now(timezone.utc).date()


def date_key(day: date) -> str:
    """Daily log key for a UTC calendar date, e.g. ``2026-10-18``."""
    return day.isoformat()


def parse_date_key(key: str) -> date:
    """Inverse of date_key. Raises ValueError for a malformed key."""
    return date.fromisoformat(key)


@dataclass
class PlayerProfile:
    """The player's persistent data: progress, hints, settings and daily log."""

    highest_level_completed: Dict[str, int] = field(default_factory=dict)
    total_hints: int = DEFAULT_HINTS
    sound_enabled: bool = True
    daily_completions: Dict[str, float] = field(default_factory=dict)
    best_daily_streak: int = 0
    total_daily_completed: int = 0

    # -- levels ------------------------------------------------------------

    @property
    def total_levels_completed(self) -> int:
        """Sum of the highest completed level over every difficulty."""
        return sum(self.highest_level_completed.values())

    @property
    def has_played_before(self) -> bool:
        """True if any level of any difficulty has been completed."""
        return bool(self.highest_level_completed)

    def highest_level(self, difficulty: str) -> int:
        """Highest completed level for ``difficulty``, 0 if none."""
        return self.highest_level_completed.get(difficulty, 0)

    def next_level(self, difficulty: str) -> int:
        """Level the player should play next in ``difficulty``."""
        return self.highest_level(difficulty) + 1

    def complete_level(self, level: int, difficulty: str) -> bool:
        """Record a completed level. Returns True only if it beats the stored best."""
        if level > self.highest_level(difficulty):
            self.highest_level_completed[difficulty] = level
            return True
        return False

    def reset_progress(self, difficulty: str) -> None:
        """Forget the completed levels of one difficulty."""
        self.highest_level_completed.pop(difficulty, None)

    def reset_all_progress(self) -> None:
        self.highest_level_completed.clear()

    def reset_to_defaults(self) -> None:
        """Clear progress and restore the default hint balance and sound setting."""
        self.highest_level_completed.clear()
        self.total_hints = DEFAULT_HINTS
        self.sound_enabled = True

    # -- hints -------------------------------------------------------------

    @property
    def has_hints_available(self) -> bool:
        """True while the hint balance is above zero."""
        return self.total_hints > 0

    def use_hint(self) -> bool:
        """Spend one hint. Returns False, changing nothing, when none are left."""
        if self.total_hints <= 0:
            return False
        self.total_hints -= 1
        return True

    def add_hints(self, count: int) -> None:
        """Add hints to the balance. Negative counts are ignored."""
        self.total_hints += max(0, count)

    def award_hints_for_completion(self, level: int, difficulty: str) -> int:
        """Grant milestone bonus hints for ``level`` and return how many were granted."""
        every, hints = HINT_SCHEDULE.get(difficulty.strip().lower(), (0, 0))
        if not every or level % every != 0:
            return 0
        self.add_hints(hints)
        return hints

    # -- settings ----------------------------------------------------------

    def toggle_sound(self) -> None:
        self.sound_enabled = not self.sound_enabled

    def set_sound_enabled(self, enabled: bool) -> None:
        self.sound_enabled = bool(enabled)

    # -- daily puzzles -----------------------------------------------------

    def is_daily_completed(self, key: str) -> bool:
        """True if the daily puzzle for ``key`` has a recorded completion."""
        return key in self.daily_completions

    def complete_daily_puzzle(
        self, key: str, elapsed_seconds: float, today: Optional[date] = None
    ) -> bool:
        """Record the first completion of the daily puzzle for ``key``.

        Later completions on the same day leave the stored time alone and
        return False. The best streak is raised, never lowered.
        """
        if key in self.daily_completions:
            return False
        self.daily_completions[key] = float(elapsed_seconds)
        self.total_daily_completed += 1
        streak = self.compute_current_streak(today or parse_date_key(key))
        if streak > self.best_daily_streak:
            self.best_daily_streak = streak
        return True

    def compute_current_streak(self, today: date) -> int:
        """Count consecutive days with a completion, walking back from ``today``."""
        streak = 0
        day = today
        while date_key(day) in self.daily_completions:
            streak += 1
            day -= timedelta(days=1)
        return streak

    def best_daily_time(self) -> Optional[float]:
        """Fastest daily completion in seconds, or None if there are none."""
        if not self.daily_completions:
            return None
        return min(self.daily_completions.values())

    def average_daily_time(self) -> Optional[float]:
        """Mean daily completion time in seconds, or None if there are none."""
        if not self.daily_completions:
            return None
        return sum(self.daily_completions.values()) / len(self.daily_completions)

    # -- serialisation -----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-ready representation, the inverse of from_dict."""
        return {
            "highest_level_completed": dict(self.highest_level_completed),
            "total_hints": self.total_hints,
            "sound_enabled": self.sound_enabled,
            "daily_completions": dict(self.daily_completions),
            "best_daily_streak": self.best_daily_streak,
            "total_daily_completed": self.total_daily_completed,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PlayerProfile":
        """Build a profile from stored data, falling back to defaults field by field."""
        profile = cls()
        levels = payload.get("highest_level_completed", {})
        if isinstance(levels, dict):
            for key, value in levels.items():
                try:
                    profile.highest_level_completed[str(key)] = int(value)
                except (TypeError, ValueError):
                    logger.warning("Ignoring bad level entry %r: %r", key, value)
        daily = payload.get("daily_completions", {})
        if isinstance(daily, dict):
            for key, value in daily.items():
                try:
                    parse_date_key(str(key))
                    profile.daily_completions[str(key)] = float(value)
                except (TypeError, ValueError):
                    logger.warning("Ignoring bad daily entry %r: %r", key, value)
        for name in ("total_hints", "best_daily_streak", "total_daily_completed"):
            try:
                setattr(profile, name, max(0, int(payload.get(name, getattr(profile, name)))))
            except (TypeError, ValueError):
                logger.warning("Ignoring bad %s value: %r", name, payload.get(name))
        sound = payload.get("sound_enabled", True)
        if isinstance(sound, bool):
            profile.sound_enabled = sound
        return profile
