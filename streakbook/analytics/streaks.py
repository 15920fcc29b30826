"""Streak Calculator — current and longest streak under one adjacency rule.

Two logs are adjacent only when their calendar days differ by exactly one.
A day without a log (no journal entry that day) breaks a run just like an
explicit "not completed" log does. Every streak in the codebase goes
through these functions; nothing else counts runs.
"""

from collections.abc import Iterable
from datetime import date

from streakbook.analytics.models import DailyLogPoint, StreakPoint


def normalize(points: Iterable[DailyLogPoint]) -> list[DailyLogPoint]:
    """One point per calendar day, oldest first. Duplicates merge as "any completed"."""
    by_day: dict[date, bool] = {}
    for p in points:
        by_day[p.date] = by_day.get(p.date, False) or p.completed
    return [DailyLogPoint(d, by_day[d]) for d in sorted(by_day)]


def _adjacent(earlier: date, later: date) -> bool:
    return (later - earlier).days == 1


def running_streaks(points: Iterable[DailyLogPoint]) -> list[StreakPoint]:
    """Length of the streak ending on each logged day, oldest first.

    Not-completed days carry 0; a completed day after a gap starts at 1.
    """
    result: list[StreakPoint] = []
    run = 0
    prev: date | None = None
    for p in normalize(points):
        if not p.completed:
            run = 0
        elif run and prev is not None and _adjacent(prev, p.date):
            run += 1
        else:
            run = 1
        result.append(StreakPoint(p.date, p.completed, run))
        prev = p.date
    return result


def longest_streak(points: Iterable[DailyLogPoint]) -> int:
    return max((s.streak for s in running_streaks(points)), default=0)


def current_streak(points: Iterable[DailyLogPoint], today: date | None = None) -> int:
    """Completed, adjacent days counted back from the most recent log.

    With `today` given, the most recent log must be today or yesterday
    (today's entry may not be written yet); anything older means the
    streak has already lapsed. A log that exists for the latest day but is
    not completed always gives 0.
    """
    ordered = normalize(points)
    if not ordered:
        return 0
    if today is not None and (today - ordered[-1].date).days > 1:
        return 0

    streak = 0
    prev: date | None = None
    for p in reversed(ordered):
        if not p.completed:
            break
        if prev is not None and not _adjacent(p.date, prev):
            break
        streak += 1
        prev = p.date
    return streak
