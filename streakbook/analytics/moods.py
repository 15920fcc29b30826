"""Mood/Activity Aggregator.

Percentages are rounded independently per mood, so a distribution may sum
to 99 or 101. No mood is adjusted to force a total of 100.
"""

from collections import Counter
from collections.abc import Iterable, Mapping
from datetime import date, datetime

from streakbook.analytics.clock import local_date
from streakbook.analytics.models import Mood, MoodSummary, percent


def entry_date(entry) -> date:
    """Calendar day of a journal entry (a db row mapping or any object with .date)."""
    value = entry["date"] if isinstance(entry, Mapping) else entry.date
    if isinstance(value, (str, datetime)):
        return local_date(value)
    return value


def entry_mood(entry) -> Mood:
    value = entry.get("mood") if isinstance(entry, Mapping) else getattr(entry, "mood", None)
    return Mood.parse(value)


def mood_counts(entries: Iterable) -> dict[Mood, int]:
    """Entries per observed mood, most frequent first."""
    counts = Counter(entry_mood(e) for e in entries)
    order = list(Mood)
    return dict(sorted(counts.items(), key=lambda kv: (-kv[1], order.index(kv[0]))))


def mood_distribution(entries: Iterable) -> dict[Mood, int]:
    counts = mood_counts(entries)
    total = sum(counts.values())
    return {mood: percent(n, total) for mood, n in counts.items()}


def recent_moods(entries: Iterable, limit: int = 7) -> list[Mood]:
    """Moods of the `limit` most recent entries, newest first, duplicates kept."""
    newest_first = sorted(entries, key=entry_date, reverse=True)
    return [entry_mood(e) for e in newest_first[:limit]]


def summarize_moods(entries: Iterable, recent_limit: int = 7) -> MoodSummary:
    entries = list(entries)
    counts = mood_counts(entries)
    total = len(entries)
    return MoodSummary(
        counts=counts,
        distribution={mood: percent(n, total) for mood, n in counts.items()},
        recent_moods=tuple(recent_moods(entries, recent_limit)),
        total_entries=total,
    )
