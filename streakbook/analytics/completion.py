"""Completion Rate Calculator.

totalDays is the number of recorded logs in the window, not the number of
calendar days: a habit first logged 5 days ago has totalDays == 5.
"""

import calendar
from collections.abc import Iterable
from datetime import date

from streakbook.analytics.models import DailyLogPoint, HabitStats, PeriodRate, percent
from streakbook.analytics.streaks import current_streak, longest_streak, normalize

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def completion_rate(points: Iterable[DailyLogPoint]) -> int:
    ordered = normalize(points)
    return percent(sum(p.completed for p in ordered), len(ordered))


def habit_stats(points: Iterable[DailyLogPoint], today: date | None = None) -> HabitStats:
    ordered = normalize(points)
    completed = sum(p.completed for p in ordered)
    return HabitStats(
        current_streak=current_streak(ordered, today),
        longest_streak=longest_streak(ordered),
        completion_rate=percent(completed, len(ordered)),
        total_days=len(ordered),
        completed_days=completed,
    )


def weekday_rates(points: Iterable[DailyLogPoint]) -> list[PeriodRate]:
    """Completion per day of week, Sunday first. Always 7 rows."""
    completed = [0] * 7
    total = [0] * 7
    for p in normalize(points):
        idx = (p.date.weekday() + 1) % 7
        total[idx] += 1
        completed[idx] += p.completed
    return [PeriodRate(WEEKDAY_NAMES[i], completed[i], total[i]) for i in range(7)]


def monthly_rates(points: Iterable[DailyLogPoint], today: date, months: int = 3) -> list[PeriodRate]:
    """Completion for the last `months` calendar months (current included), oldest first."""
    buckets: dict[tuple[int, int], list[int]] = {}
    year, month = today.year, today.month
    for _ in range(months):
        buckets[(year, month)] = [0, 0]
        year, month = (year, month - 1) if month > 1 else (year - 1, 12)

    for p in normalize(points):
        bucket = buckets.get((p.date.year, p.date.month))
        if bucket is not None and p.date <= today:
            bucket[0] += p.completed
            bucket[1] += 1

    return [
        PeriodRate(calendar.month_abbr[m], done, total)
        for (y, m), (done, total) in sorted(buckets.items())
    ]
