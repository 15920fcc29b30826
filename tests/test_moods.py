"""Tests for the mood aggregator."""

from dataclasses import dataclass
from datetime import date, timedelta

from streakbook.analytics.models import Mood
from streakbook.analytics.moods import (
    mood_counts,
    mood_distribution,
    recent_moods,
    summarize_moods,
)

TODAY = date(2026, 3, 15)


@dataclass
class _Entry:
    date: date
    mood: str | None


def _entries(*moods):
    """Entries with the given moods, newest first (one per day)."""
    return [_Entry(TODAY - timedelta(days=i), m) for i, m in enumerate(moods)]


class TestMoodParse:
    def test_known(self):
        assert Mood.parse("happy") is Mood.HAPPY
        assert Mood.parse(" Sad ") is Mood.SAD

    def test_missing_and_unknown_are_neutral(self):
        assert Mood.parse(None) is Mood.NEUTRAL
        assert Mood.parse("") is Mood.NEUTRAL
        assert Mood.parse("grumpy") is Mood.NEUTRAL


class TestDistribution:
    def test_scenario(self):
        entries = _entries(*(["happy"] * 4 + ["sad"] * 3 + ["neutral"] * 3))
        assert mood_distribution(entries) == {Mood.HAPPY: 40, Mood.SAD: 30, Mood.NEUTRAL: 30}

    def test_absent_mood_counts_as_neutral(self):
        entries = _entries(None, "neutral", "happy", None)
        assert mood_counts(entries) == {Mood.NEUTRAL: 3, Mood.HAPPY: 1}

    def test_single_mood_is_100(self):
        assert mood_distribution(_entries("calm", "calm", "calm")) == {Mood.CALM: 100}

    def test_independent_rounding_may_not_sum_to_100(self):
        dist = mood_distribution(_entries("happy", "sad", "calm"))
        assert set(dist.values()) == {33}
        assert sum(dist.values()) == 99

    def test_empty(self):
        assert mood_distribution([]) == {}

    def test_values_are_integers_in_range(self):
        dist = mood_distribution(_entries("happy", "sad", "sad", "tired", None, "excited", "anxious"))
        assert all(isinstance(v, int) and 0 <= v <= 100 for v in dist.values())


class TestRecentMoods:
    def test_newest_first_with_duplicates(self):
        entries = _entries("happy", "happy", "sad", None, "calm", "sad", "tired", "excited", "happy")
        entries.reverse()  # input order must not matter
        assert recent_moods(entries, 7) == [
            Mood.HAPPY, Mood.HAPPY, Mood.SAD, Mood.NEUTRAL, Mood.CALM, Mood.SAD, Mood.TIRED,
        ]

    def test_fewer_entries_than_limit(self):
        assert recent_moods(_entries("sad"), 7) == [Mood.SAD]

    def test_accepts_db_rows(self):
        rows = [
            {"date": "2026-03-14T08:00:00+00:00", "mood": "sad"},
            {"date": "2026-03-15T08:00:00+00:00", "mood": None},
        ]
        assert recent_moods(rows) == [Mood.NEUTRAL, Mood.SAD]


class TestSummary:
    def test_to_dict(self):
        summary = summarize_moods(_entries("happy", "happy", "sad", "neutral"), recent_limit=2)
        assert summary.to_dict() == {
            "totalEntries": 4,
            "moodCounts": {"happy": 2, "neutral": 1, "sad": 1},
            "moodDistribution": {"happy": 50, "neutral": 25, "sad": 25},
            "recentMoods": ["happy", "happy"],
        }

    def test_empty(self):
        summary = summarize_moods([])
        assert summary.total_entries == 0
        assert summary.to_dict()["moodDistribution"] == {}
