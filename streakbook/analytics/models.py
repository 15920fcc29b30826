"""Derived value types produced by the analytics engine.

All types are frozen and recomputed per request. None of them refers back
to a database row: to_dict() yields plain JSON-ready structures with the
camelCase keys the presentation layer consumes.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum

from streakbook.errors import InvalidRange

log = logging.getLogger(__name__)


def percent(part: int, whole: int) -> int:
    """part/whole as an integer percentage, rounded half up. 0 when whole is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


class Mood(str, Enum):
    """Closed set of journal moods. Missing or unknown values read as NEUTRAL."""
    HAPPY = "happy"
    CALM = "calm"
    NEUTRAL = "neutral"
    ANXIOUS = "anxious"
    SAD = "sad"
    EXCITED = "excited"
    TIRED = "tired"

    @classmethod
    def parse(cls, value: "str | Mood | None") -> "Mood":
        if isinstance(value, Mood):
            return value
        if not value:
            return cls.NEUTRAL
        try:
            return cls(value.strip().lower())
        except ValueError:
            log.warning("Unknown mood %r, treating as neutral", value)
            return cls.NEUTRAL


@dataclass(frozen=True)
class DateRange:
    """Contiguous calendar range, inclusive of both endpoints."""
    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise InvalidRange(self.start, self.end)

    @classmethod
    def trailing(cls, today: date, days: int) -> "DateRange":
        """The last `days` calendar days ending on (and including) today."""
        return cls(today - timedelta(days=max(days, 1) - 1), today)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def __iter__(self):
        for offset in range(len(self)):
            yield self.start + timedelta(days=offset)

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class DailyLogPoint:
    date: date
    completed: bool

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "completed": self.completed}


@dataclass(frozen=True)
class HabitLogRecord:
    """One habit log enriched with the calendar day of its journal entry."""
    habit_id: int
    date: date
    completed: bool
    notes: str | None = None

    @property
    def point(self) -> DailyLogPoint:
        return DailyLogPoint(self.date, self.completed)

    def to_dict(self) -> dict:
        return {
            "habitId": self.habit_id,
            "date": self.date.isoformat(),
            "completed": self.completed,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class HabitStats:
    current_streak: int = 0
    longest_streak: int = 0
    completion_rate: int = 0
    total_days: int = 0
    completed_days: int = 0

    def to_dict(self) -> dict:
        return {
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "completionRate": self.completion_rate,
            "totalDays": self.total_days,
            "completedDays": self.completed_days,
        }


@dataclass(frozen=True)
class StreakPoint:
    """A log point with the length of the streak ending on that day."""
    date: date
    completed: bool
    streak: int

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "completed": self.completed, "streak": self.streak}


@dataclass(frozen=True)
class PeriodRate:
    """Completion figures for a named bucket (a weekday or a month)."""
    name: str
    completed: int
    total: int

    @property
    def completion_rate(self) -> int:
        return percent(self.completed, self.total)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "completed": self.completed,
            "total": self.total,
            "completionRate": self.completion_rate,
        }


@dataclass(frozen=True)
class MoodSummary:
    counts: dict[Mood, int] = field(default_factory=dict)
    distribution: dict[Mood, int] = field(default_factory=dict)
    recent_moods: tuple[Mood, ...] = ()
    total_entries: int = 0

    def to_dict(self) -> dict:
        return {
            "totalEntries": self.total_entries,
            "moodCounts": {m.value: n for m, n in self.counts.items()},
            "moodDistribution": {m.value: p for m, p in self.distribution.items()},
            "recentMoods": [m.value for m in self.recent_moods],
        }


@dataclass(frozen=True)
class HeatmapCell:
    date: date
    intensity_level: int
    completed_count: int
    total_habits: int

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "intensityLevel": self.intensity_level,
            "completedCount": self.completed_count,
            "totalHabits": self.total_habits,
        }


@dataclass(frozen=True)
class ConsistencyPoint:
    """One day of the multi-habit consistency chart: 100 = done, 0 = not done."""
    date: date
    values: dict[int, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "habits": {str(habit_id): v for habit_id, v in self.values.items()},
        }


@dataclass(frozen=True)
class JournalHeatmapCell:
    date: date
    mood: Mood
    count: int = 1

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "mood": self.mood.value, "count": self.count}
