"""Application setup for the Cross Sums rules engine."""

import logging
from pathlib import Path
from typing import Optional

from crosssums.core.controller import GameController
from crosssums.core.events import EventBus
from crosssums.core.levels import PuzzleRepository
from crosssums.core.progress import ProfileStore
from crosssums.core.reporting import AchievementTracker, LeaderboardReporter


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_controller(
    profile_path: Optional[Path] = None,
    puzzles_dir: Optional[Path] = None,
) -> GameController:
    """Wire the bundled puzzles, the JSON profile store, leaderboards and achievements."""
    puzzles = PuzzleRepository(puzzles_dir)
    store = ProfileStore(profile_path)
    events = EventBus()
    events.subscribe(LeaderboardReporter())
    events.subscribe(AchievementTracker())
    controller = GameController(source=puzzles, store=store, events=events)
    logging.info(
        "Cross Sums ready: %d hints, difficulties %s",
        controller.hints_available,
        ", ".join(controller.available_difficulties()),
    )
    return controller
