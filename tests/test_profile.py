"""Tests for crosssums.core.profile – progression, hints and daily streaks."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from crosssums.core.profile import DEFAULT_HINTS, PlayerProfile, date_key, parse_date_key, utc_today

D = date(2026, 10, 18)


def _key(days_back: int) -> str:
    return date_key(D - timedelta(days=days_back))


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

class TestDefaults:
    def test_fresh_profile(self):
        p = PlayerProfile()
        assert p.highest_level_completed == {}
        assert p.total_hints == DEFAULT_HINTS == 5
        assert p.sound_enabled is True
        assert p.daily_completions == {}
        assert p.best_daily_streak == 0
        assert p.total_daily_completed == 0
        assert not p.has_played_before

    def test_independent_dicts(self):
        a, b = PlayerProfile(), PlayerProfile()
        a.complete_level(1, "Easy")
        assert b.highest_level_completed == {}


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------

class TestCompleteLevel:
    def test_first_completion_is_record(self):
        p = PlayerProfile()
        assert p.complete_level(1, "Easy") is True
        assert p.highest_level("Easy") == 1
        assert p.next_level("Easy") == 2

    def test_lower_level_is_not_record(self):
        p = PlayerProfile()
        p.complete_level(5, "Easy")
        assert p.complete_level(3, "Easy") is False
        assert p.complete_level(5, "Easy") is False
        assert p.highest_level("Easy") == 5

    def test_difficulties_are_independent(self):
        p = PlayerProfile()
        p.complete_level(4, "Easy")
        p.complete_level(2, "Hard")
        assert p.highest_level("Hard") == 2
        assert p.highest_level("Medium") == 0
        assert p.total_levels_completed == 6
        assert p.has_played_before

    def test_reset_progress(self):
        p = PlayerProfile()
        p.complete_level(4, "Easy")
        p.complete_level(2, "Hard")
        p.reset_progress("Easy")
        assert p.highest_level("Easy") == 0
        assert p.highest_level("Hard") == 2
        p.reset_all_progress()
        assert p.highest_level_completed == {}

    def test_reset_to_defaults(self):
        p = PlayerProfile(total_hints=1, sound_enabled=False)
        p.complete_level(3, "Easy")
        p.reset_to_defaults()
        assert p == PlayerProfile()


# ---------------------------------------------------------------------------
# Hints
# ---------------------------------------------------------------------------

class TestHints:
    def test_use_hint(self):
        p = PlayerProfile(total_hints=1)
        assert p.use_hint() is True
        assert p.total_hints == 0
        assert p.use_hint() is False
        assert p.total_hints == 0
        assert not p.has_hints_available

    def test_add_hints_ignores_negative(self):
        p = PlayerProfile(total_hints=2)
        p.add_hints(3)
        p.add_hints(-10)
        assert p.total_hints == 5


class TestAwardHints:
    @pytest.mark.parametrize(
        "difficulty,level,granted",
        [
            ("Easy", 10, 1),
            ("Easy", 9, 0),
            ("Easy", 20, 1),
            ("Medium", 8, 2),
            ("Medium", 12, 0),
            ("Hard", 5, 3),
            ("Hard", 7, 0),
            ("Extra Hard", 3, 5),
            ("Extra Hard", 4, 0),
            ("Expert", 10, 0),
            ("Daily", 30, 0),
        ],
    )
    def test_schedule(self, difficulty, level, granted):
        p = PlayerProfile(total_hints=0)
        assert p.award_hints_for_completion(level, difficulty) == granted
        assert p.total_hints == granted

    @pytest.mark.parametrize("name", ["easy", "EASY", " Easy "])
    def test_case_insensitive(self, name):
        assert PlayerProfile().award_hints_for_completion(10, name) == 1

    def test_extra_hard_lowercase(self):
        assert PlayerProfile().award_hints_for_completion(6, "extra hard") == 5


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class TestSound:
    def test_toggle(self):
        p = PlayerProfile()
        p.toggle_sound()
        assert p.sound_enabled is False
        p.toggle_sound()
        assert p.sound_enabled is True

    def test_set(self):
        p = PlayerProfile()
        p.set_sound_enabled(False)
        assert p.sound_enabled is False


# ---------------------------------------------------------------------------
# Daily puzzles and streaks
# ---------------------------------------------------------------------------

class TestDateKeys:
    def test_iso_format(self):
        assert date_key(date(2026, 1, 5)) == "2026-01-05"

    def test_round_trip(self):
        assert parse_date_key("2026-10-18") == D

    def test_utc_today_is_a_date(self):
        assert isinstance(utc_today(), date)


class TestStreak:
    def test_three_consecutive_days(self):
        p = PlayerProfile(daily_completions={_key(0): 60.0, _key(1): 70.0, _key(2): 80.0})
        assert p.compute_current_streak(D) == 3

    def test_gap_stops_walk(self):
        p = PlayerProfile(
            daily_completions={_key(0): 60.0, _key(1): 70.0, _key(2): 80.0, _key(4): 50.0}
        )
        assert p.compute_current_streak(D) == 3

    def test_missing_today_is_zero(self):
        p = PlayerProfile(daily_completions={_key(1): 70.0, _key(2): 80.0})
        assert p.compute_current_streak(D) == 0

    def test_empty_log(self):
        assert PlayerProfile().compute_current_streak(D) == 0

    def test_crosses_month_and_year(self):
        start = date(2026, 1, 1)
        p = PlayerProfile(
            daily_completions={date_key(start - timedelta(days=i)): 30.0 for i in range(5)}
        )
        assert p.compute_current_streak(start) == 5


class TestCompleteDailyPuzzle:
    def test_first_completion_recorded(self):
        p = PlayerProfile()
        assert p.complete_daily_puzzle(_key(0), 95.5) is True
        assert p.daily_completions == {_key(0): 95.5}
        assert p.total_daily_completed == 1
        assert p.best_daily_streak == 1
        assert p.is_daily_completed(_key(0))

    def test_second_completion_same_day_ignored(self):
        p = PlayerProfile()
        p.complete_daily_puzzle(_key(0), 95.5)
        assert p.complete_daily_puzzle(_key(0), 10.0) is False
        assert p.daily_completions[_key(0)] == 95.5
        assert p.total_daily_completed == 1

    def test_best_streak_grows(self):
        p = PlayerProfile()
        for back in (2, 1, 0):
            p.complete_daily_puzzle(_key(back), 60.0)
        assert p.best_daily_streak == 3

    def test_best_streak_never_lowered(self):
        p = PlayerProfile(best_daily_streak=7)
        p.complete_daily_puzzle(_key(0), 60.0)
        assert p.best_daily_streak == 7

    def test_streak_from_explicit_today(self):
        p = PlayerProfile(daily_completions={_key(1): 40.0})
        p.complete_daily_puzzle(_key(2), 60.0, today=D - timedelta(days=1))
        assert p.best_daily_streak == 2


class TestDailyTimes:
    def test_empty_log_is_absent(self):
        p = PlayerProfile()
        assert p.best_daily_time() is None
        assert p.average_daily_time() is None

    def test_best_and_average(self):
        p = PlayerProfile(daily_completions={_key(0): 60.0, _key(3): 30.0, _key(9): 90.0})
        assert p.best_daily_time() == 30.0
        assert p.average_daily_time() == 60.0


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------

class TestDictConversion:
    def test_round_trip(self):
        p = PlayerProfile(
            highest_level_completed={"Easy": 4},
            total_hints=2,
            sound_enabled=False,
            daily_completions={"2026-10-18": 61.5},
            best_daily_streak=3,
            total_daily_completed=9,
        )
        assert PlayerProfile.from_dict(p.to_dict()) == p

    def test_missing_fields_use_defaults(self):
        assert PlayerProfile.from_dict({}) == PlayerProfile()

    def test_bad_entries_dropped(self):
        p = PlayerProfile.from_dict(
            {
                "highest_level_completed": {"Easy": "x", "Hard": 3},
                "daily_completions": {"yesterday": 5, "2026-10-17": "slow", "2026-10-18": 12},
                "total_hints": "lots",
                "sound_enabled": "no",
            }
        )
        assert p.highest_level_completed == {"Hard": 3}
        assert p.daily_completions == {"2026-10-18": 12.0}
        assert p.total_hints == DEFAULT_HINTS
        assert p.sound_enabled is True

    def test_negative_counters_clamped(self):
        p = PlayerProfile.from_dict({"total_hints": -3, "best_daily_streak": -1})
        assert p.total_hints == 0
        assert p.best_daily_streak == 0
