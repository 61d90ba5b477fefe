from __future__ import annotations

from typing import Optional

from crosssums.core.puzzle import PuzzleDefinition

APP_NAME = "Cross Sums"


def format_time(seconds: float) -> str:
    """Format a duration as ``m:ss``."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


def build_share_text(
    puzzle: PuzzleDefinition,
    elapsed_seconds: float,
    moves: int,
    lives_left: int,
    is_daily: bool = False,
    streak: Optional[int] = None,
) -> str:
    """Plain-text summary of a completed puzzle for sharing."""
    lines = []
    if is_daily:
        lines.append(f"{APP_NAME} Daily Puzzle")
        if streak:
            lines.append(f"{streak} day streak")
    else:
        lines.append(APP_NAME)
        lines.append(f"Level {puzzle.level} - {puzzle.difficulty}")
    lines.append("")
    lines.append(format_time(elapsed_seconds))
    lines.append(f"{moves} moves")
    lines.append(f"{lives_left} {'life' if lives_left == 1 else 'lives'} left")
    return "\n".join(lines) + "\n"
