"""Dashboard Composer — one request, one snapshot, one composed response.

The composer performs no calculation of its own. It owns:
  - the day boundary (computed once, passed to every sub-computation)
  - the window each sub-computation uses (see config)
  - the order in which results are merged into the response

Journal figures count written entries only; placeholder entries opened by
habit logging are skipped until the owner writes them.

Reads are independent and run concurrently in worker threads. If any read
fails, the exception propagates and no partial dashboard is returned.
"""

import asyncio
import logging
from datetime import date

from streakbook import db
from streakbook.config import (
    DASHBOARD_LIST_LIMIT,
    HABIT_WINDOW_DAYS,
    HEATMAP_WINDOW_DAYS,
    MONTHLY_BREAKDOWN_MONTHS,
    RECENT_ENTRIES_LIMIT,
    RECENT_MOODS_LIMIT,
)
from streakbook.analytics.clock import DayBoundary, day_boundary, local_date
from streakbook.analytics.completion import (
    completion_rate,
    habit_stats,
    monthly_rates,
    weekday_rates,
)
from streakbook.analytics.heatmap import (
    all_habits_heatmap,
    consistency_series,
    journal_heatmap,
    overall_completion_rate,
    overall_streak,
)
from streakbook.analytics.models import DateRange, Mood, percent
from streakbook.analytics.moods import summarize_moods
from streakbook.analytics.reader import read_all_habit_logs, read_habit_logs
from streakbook.analytics.streaks import current_streak, longest_streak, running_streaks
from streakbook.errors import NotFound

log = logging.getLogger(__name__)


def _habit_dict(habit: dict) -> dict:
    return {
        "id": habit["id"],
        "name": habit["name"],
        "description": habit.get("description", ""),
        "icon": habit.get("icon"),
        "color": habit.get("color"),
        "active": bool(habit.get("active", 1)),
    }


def _entry_dict(entry: dict) -> dict:
    return {
        "id": entry["id"],
        "date": local_date(entry["date"]).isoformat(),
        "title": entry.get("title", ""),
        "mood": Mood.parse(entry.get("mood")).value,
        "content": entry.get("content", ""),
    }


# ═══════════════════════════════════════════════════════════════════════════
# Dashboard
# ═══════════════════════════════════════════════════════════════════════════

async def build_dashboard(user_id: int, boundary: DayBoundary | None = None) -> dict:
    """Compose the full dashboard for one owner."""
    boundary = boundary or day_boundary()
    today = boundary.today
    today_start, today_end = boundary.bounds
    year_start, year_end = boundary.window_bounds(HEATMAP_WINDOW_DAYS)
    habit_window_start, _ = boundary.window_bounds(HABIT_WINDOW_DAYS)

    (habit_logs, today_entry, year_entries, recent_entries,
     projects, upcoming, recently_completed) = await asyncio.gather(
        asyncio.to_thread(read_all_habit_logs, user_id, HABIT_WINDOW_DAYS, boundary),
        asyncio.to_thread(db.get_journal_entry_for_day, user_id, today_start, today_end),
        asyncio.to_thread(db.get_journal_entries, user_id, year_start, year_end,
                          written_only=True),
        asyncio.to_thread(db.get_journal_entries, user_id, None, None, RECENT_ENTRIES_LIMIT,
                          written_only=True),
        asyncio.to_thread(db.get_active_projects, user_id, DASHBOARD_LIST_LIMIT),
        asyncio.to_thread(db.get_upcoming_tasks, user_id, today_start, DASHBOARD_LIST_LIMIT),
        asyncio.to_thread(db.get_recently_completed_tasks, user_id,
                          habit_window_start, DASHBOARD_LIST_LIMIT),
    )

    # Habits
    habits = []
    points_by_habit = {}
    for habit, records in habit_logs:
        points = [r.point for r in records]
        points_by_habit[habit["id"]] = points
        habits.append({
            **_habit_dict(habit),
            "streak": current_streak(points, today),
            "longestStreak": longest_streak(points),
            "completionRate": completion_rate(points),
            "streakData": [p.to_dict() for p in points],
        })

    habit_days = DateRange.trailing(today, HABIT_WINDOW_DAYS)
    consistency = {
        "heatmap": [c.to_dict() for c in all_habits_heatmap(points_by_habit, habit_days)],
        "series": [p.to_dict() for p in consistency_series(points_by_habit, habit_days)],
        "overallStreak": overall_streak(points_by_habit, today),
        "overallCompletionRate": overall_completion_rate(points_by_habit, today, HABIT_WINDOW_DAYS),
    }

    # Journal
    moods = summarize_moods(year_entries, RECENT_MOODS_LIMIT)
    year_days = DateRange.trailing(today, HEATMAP_WINDOW_DAYS)
    journal = {
        **moods.to_dict(),
        "hasEntryToday": today_entry is not None and not today_entry["auto_created"],
        "entries": [_entry_dict(e) for e in recent_entries],
        "heatmap": [c.to_dict() for c in journal_heatmap(year_entries, year_days)],
    }

    log.info("Dashboard for user %d on %s: %d habits, %d entries in %d days",
             user_id, today, len(habits), moods.total_entries, HEATMAP_WINDOW_DAYS)

    return {
        "generatedFor": today.isoformat(),
        "habits": habits,
        "consistency": consistency,
        "journal": journal,
        "projects": {"list": projects, "total": len(projects)},
        "tasks": {"upcoming": upcoming, "recentlyCompleted": recently_completed},
    }


# ═══════════════════════════════════════════════════════════════════════════
# Per-habit report
# ═══════════════════════════════════════════════════════════════════════════

def _months_back_start(today: date, months: int) -> date:
    year, month = today.year, today.month - (max(months, 1) - 1)
    while month < 1:
        month += 12
        year -= 1
    return date(year, month, 1)


def build_habit_report(user_id: int, habit_id: int, boundary: DayBoundary | None = None) -> dict:
    """Stats, daily logs and breakdowns for one habit. Raises NotFound."""
    boundary = boundary or day_boundary()
    today = boundary.today

    habit = db.get_habit(user_id, habit_id)
    if not habit:
        raise NotFound("habit", habit_id)

    # Monthly breakdown needs whole months; stats stay on the habit window.
    history_days = (today - _months_back_start(today, MONTHLY_BREAKDOWN_MONTHS)).days + 1
    history = read_habit_logs(user_id, habit_id, max(HABIT_WINDOW_DAYS, history_days), boundary)
    window = DateRange.trailing(today, HABIT_WINDOW_DAYS)
    recent = [r for r in history if r.date in window]
    points = [r.point for r in recent]
    all_points = [r.point for r in history]

    return {
        "habit": _habit_dict(habit),
        "stats": habit_stats(points, today).to_dict(),
        "dailyLogs": [r.to_dict() for r in reversed(recent)],
        "streakData": [s.to_dict() for s in running_streaks(points)],
        "weekdays": [w.to_dict() for w in weekday_rates(all_points)],
        "monthly": [m.to_dict() for m in monthly_rates(all_points, today, MONTHLY_BREAKDOWN_MONTHS)],
    }


# ═══════════════════════════════════════════════════════════════════════════
# Per-project report
# ═══════════════════════════════════════════════════════════════════════════

def build_project_report(user_id: int, project_id: int, boundary: DayBoundary | None = None) -> dict:
    """Task counts and progress for one project. Raises NotFound."""
    boundary = boundary or day_boundary()
    project = db.get_project(user_id, project_id)
    if not project:
        raise NotFound("project", project_id)

    tasks = db.get_project_tasks(project_id)
    today_start, _ = boundary.bounds
    completed = sum(t["status"] == "completed" for t in tasks)
    upcoming = [
        t for t in tasks
        if t["status"] != "completed" and t["due_date"] and t["due_date"] >= today_start
    ]

    return {
        "project": project,
        "tasks": tasks,
        "stats": {
            "totalTasks": len(tasks),
            "completedTasks": completed,
            "progressPercentage": percent(completed, len(tasks)),
            "taskStatusCount": {
                "pending": sum(t["status"] == "pending" for t in tasks),
                "inProgress": sum(t["status"] == "in-progress" for t in tasks),
                "completed": completed,
            },
            "taskPriorityCount": {
                p: sum(t["priority"] == p for t in tasks) for p in ("high", "medium", "low")
            },
            "upcomingTasks": len(upcoming),
        },
    }
