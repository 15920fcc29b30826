"""Tests for the streak calculator."""

from datetime import date, timedelta

import pytest

from streakbook.analytics.models import DailyLogPoint
from streakbook.analytics.streaks import (
    current_streak,
    longest_streak,
    normalize,
    running_streaks,
)

TODAY = date(2026, 3, 15)


def _pts(*pairs):
    """(days_ago, completed) pairs → DailyLogPoints, in the order given."""
    return [DailyLogPoint(TODAY - timedelta(days=ago), done) for ago, done in pairs]


class TestScenarios:
    def test_broken_by_not_completed(self):
        points = _pts((1, True), (2, True), (3, False), (4, True))
        assert current_streak(points, TODAY) == 2
        assert longest_streak(points) == 2

    def test_missing_day_breaks_longest(self):
        # day-2 has no journal entry, hence no log
        points = _pts((1, True), (3, True))
        assert longest_streak(points) == 1
        assert current_streak(points, TODAY) == 1

    def test_empty(self):
        assert current_streak([], TODAY) == 0
        assert longest_streak([]) == 0

    def test_single_completed_log(self):
        points = _pts((10, True))
        assert longest_streak(points) == 1

    def test_full_contiguous_run(self):
        points = _pts(*[(i, True) for i in range(10)])
        assert current_streak(points, TODAY) == 10
        assert longest_streak(points) == 10


class TestCurrentStreak:
    def test_zero_when_latest_not_completed(self):
        points = _pts((0, False), (1, True), (2, True))
        assert current_streak(points, TODAY) == 0

    def test_today_not_logged_yet_keeps_yesterday_streak(self):
        points = _pts((1, True), (2, True), (3, True))
        assert current_streak(points, TODAY) == 3

    def test_lapsed_streak_is_zero(self):
        points = _pts((3, True), (4, True))
        assert current_streak(points, TODAY) == 0
        # without an anchor the run ending at the latest log counts
        assert current_streak(points) == 2

    def test_order_independent(self):
        newest_first = _pts((0, True), (1, True), (2, False))
        oldest_first = list(reversed(newest_first))
        assert current_streak(newest_first, TODAY) == current_streak(oldest_first, TODAY) == 2

    @pytest.mark.parametrize("pairs", [
        [(0, True), (1, True), (3, True), (4, True), (5, True)],
        [(0, True), (2, True), (3, False), (4, True)],
        [(1, True), (2, True), (5, True), (6, True), (7, True), (8, True)],
        [(0, False)],
        [(0, True)],
    ])
    def test_never_exceeds_longest(self, pairs):
        points = _pts(*pairs)
        assert current_streak(points, TODAY) <= longest_streak(points)


class TestLongestStreak:
    def test_gap_starts_new_run(self):
        points = _pts((0, True), (1, True), (3, True), (4, True), (5, True))
        assert longest_streak(points) == 3

    def test_not_completed_resets(self):
        points = _pts((0, True), (1, False), (2, True), (3, True))
        assert longest_streak(points) == 2

    def test_all_not_completed(self):
        points = _pts((0, False), (1, False))
        assert longest_streak(points) == 0


class TestRunningStreaks:
    def test_values_oldest_first(self):
        points = _pts((0, True), (1, True), (2, False), (4, True), (5, True))
        streaks = running_streaks(points)
        assert [s.date for s in streaks] == sorted(p.date for p in points)
        assert [s.streak for s in streaks] == [1, 2, 0, 1, 2]

    def test_last_value_matches_current(self):
        points = _pts((0, True), (1, True), (2, True), (3, False))
        assert running_streaks(points)[-1].streak == current_streak(points, TODAY)

    def test_to_dict(self):
        s = running_streaks(_pts((0, True)))[0]
        assert s.to_dict() == {"date": "2026-03-15", "completed": True, "streak": 1}


class TestNormalize:
    def test_one_point_per_day(self):
        points = _pts((0, False), (0, True), (1, False))
        result = normalize(points)
        assert len(result) == 2
        assert result[-1] == DailyLogPoint(TODAY, True)
