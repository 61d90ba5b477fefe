"""Tests for crosssums.core.session – per-attempt play state."""

from __future__ import annotations

import pytest

from crosssums.core.puzzle import PuzzleDefinition
from crosssums.core.session import STARTING_LIVES, CellMark, GameSession


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def puzzle() -> PuzzleDefinition:
    return PuzzleDefinition.create(
        "Easy",
        1,
        grid=[[5, 3], [2, 7]],
        solution=[[True, False], [False, True]],
        row_sums=[5, 7],
        column_sums=[5, 7],
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def session(puzzle: PuzzleDefinition, clock: FakeClock) -> GameSession:
    return GameSession(puzzle, clock=clock)


# ---------------------------------------------------------------------------
# CellMark
# ---------------------------------------------------------------------------

class TestCellMark:
    def test_cycle(self):
        assert CellMark.UNMARKED.next() is CellMark.KEPT
        assert CellMark.KEPT.next() is CellMark.REMOVED
        assert CellMark.REMOVED.next() is CellMark.UNMARKED

    def test_cycle_is_closed(self):
        for mark in CellMark:
            assert mark.next() in set(CellMark)
            assert mark.next().next().next() is mark

    def test_from_solution(self):
        assert CellMark.from_solution(True) is CellMark.KEPT
        assert CellMark.from_solution(False) is CellMark.REMOVED


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------

class TestInitialState:
    def test_all_unmarked(self, session: GameSession):
        assert all(m is CellMark.UNMARKED for row in session.marks() for m in row)

    def test_dimensions_match_puzzle(self, session: GameSession, puzzle: PuzzleDefinition):
        assert session.row_count == puzzle.row_count
        assert session.column_count == puzzle.column_count

    def test_defaults(self, session: GameSession):
        assert session.lives_remaining == STARTING_LIVES == 3
        assert session.move_count == 0
        assert not session.is_completed
        assert not session.is_game_over
        assert session.is_active

    def test_custom_lives(self, puzzle: PuzzleDefinition):
        assert GameSession(puzzle, lives=5).lives_remaining == 5

    def test_start_time_from_clock(self, session: GameSession):
        assert session.start_time == 1000.0

    def test_elapsed(self, session: GameSession, clock: FakeClock):
        clock.now = 1042.5
        assert session.elapsed_seconds == 42.5


# ---------------------------------------------------------------------------
# set_cell / toggle_cell
# ---------------------------------------------------------------------------

class TestSetCell:
    def test_sets_mark(self, session: GameSession):
        assert session.set_cell(0, 1, CellMark.REMOVED) is True
        assert session.mark_at(0, 1) is CellMark.REMOVED

    def test_counts_one_move_per_change(self, session: GameSession):
        session.set_cell(0, 0, CellMark.KEPT)
        session.set_cell(0, 0, CellMark.REMOVED)
        assert session.move_count == 2

    def test_no_op_does_not_count(self, session: GameSession):
        session.set_cell(0, 0, CellMark.KEPT)
        assert session.set_cell(0, 0, CellMark.KEPT) is True
        assert session.move_count == 1

    def test_setting_unmarked_cell_to_unmarked_is_no_op(self, session: GameSession):
        session.set_cell(1, 1, CellMark.UNMARKED)
        assert session.move_count == 0

    @pytest.mark.parametrize("row,col", [(-1, 0), (0, -1), (2, 0), (0, 2), (9, 9)])
    def test_out_of_bounds(self, session: GameSession, row, col):
        before = session.marks()
        assert session.set_cell(row, col, CellMark.KEPT) is False
        assert session.marks() == before
        assert session.move_count == 0

    def test_clear_cell(self, session: GameSession):
        session.set_cell(1, 0, CellMark.REMOVED)
        assert session.clear_cell(1, 0)
        assert session.mark_at(1, 0) is CellMark.UNMARKED
        assert session.move_count == 2

    def test_mark_at_out_of_bounds(self, session: GameSession):
        assert session.mark_at(3, 0) is None


class TestToggleCell:
    def test_cycles_through_marks(self, session: GameSession):
        assert session.toggle_cell(0, 0) is CellMark.KEPT
        assert session.toggle_cell(0, 0) is CellMark.REMOVED
        assert session.toggle_cell(0, 0) is CellMark.UNMARKED

    def test_three_toggles_count_three_moves(self, session: GameSession):
        for _ in range(3):
            session.toggle_cell(1, 1)
        assert session.move_count == 3
        assert session.mark_at(1, 1) is CellMark.UNMARKED

    def test_out_of_bounds(self, session: GameSession):
        assert session.toggle_cell(2, 2) is None
        assert session.move_count == 0


# ---------------------------------------------------------------------------
# Masks and progress
# ---------------------------------------------------------------------------

class TestMasks:
    def test_fully_marked(self, session: GameSession):
        assert not session.is_fully_marked()
        session.set_cell(0, 0, CellMark.KEPT)
        session.set_cell(0, 1, CellMark.REMOVED)
        session.set_cell(1, 0, CellMark.REMOVED)
        assert not session.is_fully_marked()
        session.set_cell(1, 1, CellMark.KEPT)
        assert session.is_fully_marked()

    def test_effective_mask(self, session: GameSession):
        session.set_cell(0, 0, CellMark.KEPT)
        session.set_cell(0, 1, CellMark.REMOVED)
        assert session.effective_mask() == [[True, False], [False, False]]

    def test_unmarked_cells(self, session: GameSession):
        session.set_cell(0, 1, CellMark.KEPT)
        assert session.unmarked_cells() == [(0, 0), (1, 0), (1, 1)]

    def test_completion_percentage(self, session: GameSession):
        assert session.completion_percentage == 0.0
        session.set_cell(0, 0, CellMark.KEPT)
        assert session.completion_percentage == 0.25


# ---------------------------------------------------------------------------
# Lives and terminal flags
# ---------------------------------------------------------------------------

class TestLives:
    def test_lose_life(self, session: GameSession):
        assert session.lose_life() is True
        assert session.lives_remaining == 2
        assert not session.is_game_over

    def test_last_life_ends_game(self, session: GameSession):
        for _ in range(3):
            session.lose_life()
        assert session.lives_remaining == 0
        assert session.is_game_over

    def test_lose_life_at_zero_is_no_op(self, session: GameSession):
        for _ in range(3):
            session.lose_life()
        assert session.lose_life() is False
        assert session.lives_remaining == 0
        assert session.is_game_over

    def test_add_lives_revives(self, session: GameSession):
        for _ in range(3):
            session.lose_life()
        session.add_lives(1)
        assert session.lives_remaining == 1
        assert not session.is_game_over

    def test_add_negative_lives_ignored(self, session: GameSession):
        session.add_lives(-4)
        assert session.lives_remaining == 3


class TestTerminalFlags:
    def test_mark_completed(self, session: GameSession):
        assert session.mark_completed()
        assert session.is_completed
        assert not session.is_active

    def test_cannot_complete_after_game_over(self, session: GameSession):
        session.mark_game_over()
        assert session.mark_completed() is False
        assert not session.is_completed
        assert session.is_game_over

    def test_game_over_not_set_after_completion(self, session: GameSession):
        session.mark_completed()
        session.mark_game_over()
        assert not session.is_game_over


# ---------------------------------------------------------------------------
# restart
# ---------------------------------------------------------------------------

class TestRestart:
    def test_resets_everything(self, session: GameSession, clock: FakeClock):
        session.set_cell(0, 0, CellMark.KEPT)
        session.toggle_cell(1, 1)
        session.lose_life()
        session.mark_completed()
        clock.now = 2000.0

        session.restart()

        assert session.unmarked_cells() == [(0, 0), (0, 1), (1, 0), (1, 1)]
        assert session.lives_remaining == 3
        assert session.move_count == 0
        assert not session.is_completed
        assert not session.is_game_over
        assert session.start_time == 2000.0
        assert session.elapsed_seconds == 0.0

    def test_restart_after_game_over(self, session: GameSession):
        for _ in range(3):
            session.lose_life()
        session.restart()
        assert session.is_active
        assert session.lives_remaining == 3
