"""Calendar/Heatmap Projector — per-day cells over a contiguous date range.

Habit heatmaps (single and all-habits) emit exactly one cell per calendar
day in the range so empty days can be rendered. The journal heatmap emits
only days that have an entry; the view draws the rest as empty cells.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import date, timedelta

from streakbook.analytics.models import (
    ConsistencyPoint,
    DailyLogPoint,
    DateRange,
    HeatmapCell,
    JournalHeatmapCell,
    percent,
)
from streakbook.analytics.moods import entry_date, entry_mood

log = logging.getLogger(__name__)

MAX_LEVEL = 4


def date_range(start: date, end: date) -> DateRange:
    """Inclusive range; raises InvalidRange when end < start."""
    return DateRange(start, end)


def month_grid(year: int, month: int) -> DateRange:
    """Full Sunday-to-Saturday weeks covering the given month."""
    first = date(year, month, 1)
    last = (first.replace(day=28) + timedelta(days=4)).replace(day=1) - timedelta(days=1)
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    end = last + timedelta(days=(5 - last.weekday()) % 7)
    return DateRange(start, end)


def intensity_level(completed: int, total: int) -> int:
    """Bucket completed/total into 0-4: 0%, (0,25], (25,50], (50,75], (75,100]."""
    if total <= 0 or completed <= 0:
        return 0
    scaled = completed * 100
    for level, upper in ((1, 25), (2, 50), (3, 75)):
        if scaled <= upper * total:
            return level
    return MAX_LEVEL


def _completed_days(points: Iterable[DailyLogPoint]) -> set[date]:
    return {p.date for p in points if p.completed}


def _with_data(points_by_habit: Mapping[int, Iterable[DailyLogPoint]]) -> dict[int, list[DailyLogPoint]]:
    """Habits that have at least one log; the others do not count toward totals."""
    materialized = {hid: list(points) for hid, points in points_by_habit.items()}
    return {hid: points for hid, points in materialized.items() if points}


def habit_heatmap(points: Iterable[DailyLogPoint], days: DateRange) -> list[HeatmapCell]:
    """Single habit: level 4 when a completed log exists that day, else 0."""
    done = _completed_days(points)
    return [
        HeatmapCell(day, MAX_LEVEL if day in done else 0, int(day in done), 1)
        for day in days
    ]


def all_habits_heatmap(points_by_habit: Mapping[int, Iterable[DailyLogPoint]],
                       days: DateRange) -> list[HeatmapCell]:
    """Share of habits (with any data) completed each day, bucketed into 0-4."""
    done_by_habit = [_completed_days(p) for p in _with_data(points_by_habit).values()]
    total = len(done_by_habit)
    cells = []
    for day in days:
        count = sum(day in done for done in done_by_habit)
        cells.append(HeatmapCell(day, intensity_level(count, total), count, total))
    log.debug("All-habits heatmap: %d days, %d habits with data", len(cells), total)
    return cells


def journal_heatmap(entries: Iterable, days: DateRange | None = None) -> list[JournalHeatmapCell]:
    """(date, mood, 1) for each day that has an entry, oldest first."""
    cells: dict[date, JournalHeatmapCell] = {}
    for entry in sorted(entries, key=entry_date):
        day = entry_date(entry)
        if days is not None and day not in days:
            continue
        cells.setdefault(day, JournalHeatmapCell(day, entry_mood(entry)))
    return list(cells.values())


def consistency_series(points_by_habit: Mapping[int, Iterable[DailyLogPoint]],
                       days: DateRange) -> list[ConsistencyPoint]:
    """Per day, 100 for each habit completed that day and 0 otherwise."""
    done_by_habit = {hid: _completed_days(p) for hid, p in points_by_habit.items()}
    return [
        ConsistencyPoint(day, {hid: 100 if day in done else 0 for hid, done in done_by_habit.items()})
        for day in days
    ]


def overall_streak(points_by_habit: Mapping[int, Iterable[DailyLogPoint]], today: date) -> int:
    """Consecutive days, ending today or yesterday, with at least one habit completed."""
    active_days: set[date] = set()
    for points in points_by_habit.values():
        active_days |= _completed_days(points)

    cursor = today if today in active_days else today - timedelta(days=1)
    streak = 0
    while cursor in active_days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def overall_completion_rate(points_by_habit: Mapping[int, Iterable[DailyLogPoint]],
                            today: date, days: int = 30) -> int:
    """Completed habit-days over (habits with data x days) in the trailing window."""
    window = DateRange.trailing(today, days)
    with_data = _with_data(points_by_habit)
    completed = sum(
        sum(1 for day in _completed_days(points) if day in window)
        for points in with_data.values()
    )
    return percent(completed, len(with_data) * len(window))
