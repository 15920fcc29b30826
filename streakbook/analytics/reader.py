"""Log Reader — windowed habit logs, the single source of truth per day.

Returns HabitLogRecord lists ordered newest first. A habit with no logs in
the window yields []; only a missing or foreign habit raises NotFound.
"""

import logging

from streakbook import db
from streakbook.analytics.clock import DayBoundary, local_date
from streakbook.analytics.models import HabitLogRecord
from streakbook.errors import NotFound

log = logging.getLogger(__name__)


def _to_records(rows: list[dict]) -> list[HabitLogRecord]:
    return [
        HabitLogRecord(
            habit_id=r["habit_id"],
            date=local_date(r["date"]),
            completed=bool(r["completed"]),
            notes=r["notes"],
        )
        for r in rows
    ]


def read_habit_logs(user_id: int, habit_id: int, window_days: int,
                    boundary: DayBoundary) -> list[HabitLogRecord]:
    """Logs of one habit in the trailing window ending today, newest first."""
    if not db.get_habit(user_id, habit_id):
        raise NotFound("habit", habit_id)
    start_iso, end_iso = boundary.window_bounds(window_days)
    records = _to_records(db.get_habit_logs([habit_id], start_iso, end_iso))
    log.debug("Read %d logs for habit #%d (%d days to %s)",
              len(records), habit_id, window_days, boundary.today)
    return records


def read_all_habit_logs(user_id: int, window_days: int,
                        boundary: DayBoundary) -> list[tuple[dict, list[HabitLogRecord]]]:
    """(habit, logs) for every active habit of the user, in habit creation order."""
    habits = db.get_habits(user_id, active_only=True)
    start_iso, end_iso = boundary.window_bounds(window_days)
    rows = db.get_habit_logs([h["id"] for h in habits], start_iso, end_iso)

    by_habit: dict[int, list[HabitLogRecord]] = {h["id"]: [] for h in habits}
    for record in _to_records(rows):
        by_habit[record.habit_id].append(record)

    log.debug("Read %d logs across %d habits for user %d", len(rows), len(habits), user_id)
    return [(h, by_habit[h["id"]]) for h in habits]
