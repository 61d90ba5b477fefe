"""Domain events published by the game controller.

Listeners such as leaderboard reporting subscribe to an EventBus. They are
called after the controller's own state is consistent and their failures
never reach the game logic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Union

from crosssums.core.session import CellMark

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelCompleted:
    """A level was solved. Profile figures are taken after the completion was recorded."""

    puzzle_id: str
    difficulty: str
    level: int
    elapsed_seconds: float
    move_count: int
    mistakes: int
    new_record: bool
    hints_awarded: int = 0
    is_daily: bool = False
    hints_used: int = 0
    highest_level: int = 0
    total_levels_completed: int = 0
    daily_streak: int = 0
    total_daily_completed: int = 0


@dataclass(frozen=True)
class HintUsed:
    puzzle_id: str
    row: int
    column: int
    mark: CellMark
    remaining: int


@dataclass(frozen=True)
class LifeLost:
    puzzle_id: str
    row: int
    column: int
    lives_remaining: int
    game_over: bool


@dataclass(frozen=True)
class LevelRestarted:
    puzzle_id: str


GameEvent = Union[LevelCompleted, HintUsed, LifeLost, LevelRestarted]
Listener = Callable[[GameEvent], None]


class EventBus:
    """Synchronous publish/subscribe for game events."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a function that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, event: GameEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed on %s", listener, type(event).__name__)
