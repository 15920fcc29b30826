"""Tests for the database layer."""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

import pytest

from streakbook.analytics.clock import TZ, DayBoundary, to_utc_iso
from streakbook.db import (
    init_db,
    create_habit,
    get_habit,
    get_habit_by_name,
    get_habits,
    set_habit_active,
    delete_habit,
    create_journal_entry,
    get_journal_entry_for_day,
    get_journal_entries,
    delete_journal_entry,
    log_habit,
    get_habit_logs,
    create_project,
    get_active_projects,
    archive_project,
    create_task,
    complete_task,
    get_project_tasks,
    get_upcoming_tasks,
    get_recently_completed_tasks,
)
from streakbook.errors import DuplicateEntry, NotFound

MORNING = datetime(2026, 3, 15, 9, 0, tzinfo=TZ)
BOUNDARY = DayBoundary.for_day(MORNING.date())


@pytest.fixture(autouse=True)
def fresh_db(tmp_path, monkeypatch):
    """Ensure a fresh database for each test."""
    db_path = tmp_path / "test.db"
    import streakbook.db as db_module
    monkeypatch.setattr(db_module, "DB_PATH", db_path)
    init_db()
    yield db_path


class TestHabits:
    def test_create_and_get(self):
        hid = create_habit(1, "Meditate", icon="🧘")
        assert hid > 0
        habit = get_habit(1, hid)
        assert habit["name"] == "Meditate"
        assert habit["icon"] == "🧘"
        assert habit["active"] == 1

    def test_duplicate_name_returns_existing(self):
        assert create_habit(1, "Run") == create_habit(1, "Run")

    def test_owner_isolation(self):
        hid = create_habit(1, "Run")
        assert get_habit(2, hid) is None
        assert get_habits(2) == []

    def test_lookup_by_name_ignores_case(self):
        hid = create_habit(1, "Read")
        assert get_habit_by_name(1, "read")["id"] == hid

    def test_soft_disable(self):
        a = create_habit(1, "A")
        b = create_habit(1, "B")
        assert set_habit_active(1, a, False)
        assert [h["id"] for h in get_habits(1)] == [b]
        assert [h["id"] for h in get_habits(1, active_only=False)] == [a, b]

    def test_delete_removes_logs(self):
        hid = create_habit(1, "Run")
        log_habit(1, hid, True, when=MORNING)
        assert delete_habit(1, hid)
        start, end = BOUNDARY.bounds
        assert get_habit_logs([hid], start, end) == []


class TestJournal:
    def test_create_and_find_today(self):
        eid = create_journal_entry(1, "Good day", "happy", when=MORNING)
        start, end = BOUNDARY.bounds
        entry = get_journal_entry_for_day(1, start, end)
        assert entry["id"] == eid
        assert entry["mood"] == "happy"

    def test_one_entry_per_day(self):
        create_journal_entry(1, "first", when=MORNING)
        with pytest.raises(DuplicateEntry):
            create_journal_entry(1, "second", when=MORNING + timedelta(hours=10))

    def test_other_day_and_other_user_allowed(self):
        create_journal_entry(1, "today", when=MORNING)
        create_journal_entry(1, "yesterday", when=MORNING - timedelta(days=1))
        create_journal_entry(2, "someone else", when=MORNING)
        assert len(get_journal_entries(1)) == 2

    def test_entries_ordering_and_limit(self):
        for i in range(5):
            create_journal_entry(1, f"day {i}", when=MORNING - timedelta(days=i))
        newest = get_journal_entries(1, limit=2)
        assert [e["content"] for e in newest] == ["day 0", "day 1"]
        oldest = get_journal_entries(1, newest_first=False)
        assert oldest[0]["content"] == "day 4"

    def test_entries_window(self):
        for i in range(5):
            create_journal_entry(1, f"day {i}", when=MORNING - timedelta(days=i))
        start, end = BOUNDARY.window_bounds(3)
        assert len(get_journal_entries(1, start, end)) == 3

    def test_concurrent_writers_one_entry_per_day(self):
        def write(i):
            try:
                return create_journal_entry(1, f"writer {i}", when=MORNING + timedelta(minutes=i))
            except DuplicateEntry:
                return None

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(write, range(8)))

        assert sum(r is not None for r in results) == 1
        assert len(get_journal_entries(1)) == 1

    def test_concurrent_logging_one_entry_per_day(self):
        habits = [create_habit(1, f"Habit {i}") for i in range(6)]
        with ThreadPoolExecutor(max_workers=6) as pool:
            list(pool.map(lambda hid: log_habit(1, hid, True, when=MORNING), habits))

        assert len(get_journal_entries(1)) == 1
        start, end = BOUNDARY.bounds
        assert len(get_habit_logs(habits, start, end)) == 6

    def test_no_entry_today(self):
        start, end = BOUNDARY.bounds
        assert get_journal_entry_for_day(1, start, end) is None


class TestHabitLogs:
    def test_log_creates_journal_entry(self):
        hid = create_habit(1, "Run")
        log_habit(1, hid, True, when=MORNING)
        start, end = BOUNDARY.bounds
        assert get_journal_entry_for_day(1, start, end) is not None

    def test_upsert(self):
        hid = create_habit(1, "Run")
        first = log_habit(1, hid, False, when=MORNING)
        second = log_habit(1, hid, True, notes="5k", when=MORNING + timedelta(hours=2))
        assert first == second
        start, end = BOUNDARY.bounds
        logs = get_habit_logs([hid], start, end)
        assert len(logs) == 1
        assert logs[0]["completed"] == 1
        assert logs[0]["notes"] == "5k"

    def test_foreign_habit_rejected(self):
        hid = create_habit(1, "Run")
        with pytest.raises(NotFound):
            log_habit(2, hid, True, when=MORNING)

    def test_logs_newest_first(self):
        hid = create_habit(1, "Run")
        for i in range(3):
            log_habit(1, hid, i != 1, when=MORNING - timedelta(days=i))
        start, end = BOUNDARY.window_bounds(30)
        logs = get_habit_logs([hid], start, end)
        assert [l["completed"] for l in logs] == [1, 0, 1]
        assert logs[0]["date"] > logs[1]["date"] > logs[2]["date"]

    def test_journal_after_logging_fills_placeholder(self):
        hid = create_habit(1, "Run")
        log_habit(1, hid, True, when=MORNING - timedelta(hours=1))
        start, end = BOUNDARY.bounds
        placeholder = get_journal_entry_for_day(1, start, end)
        assert placeholder["auto_created"] == 1
        assert get_journal_entries(1, written_only=True) == []

        eid = create_journal_entry(1, "great day", "happy", when=MORNING + timedelta(hours=9))
        assert eid == placeholder["id"]
        entry = get_journal_entry_for_day(1, start, end)
        assert (entry["content"], entry["mood"], entry["auto_created"]) == ("great day", "happy", 0)
        assert len(get_habit_logs([hid], start, end)) == 1

        with pytest.raises(DuplicateEntry):
            create_journal_entry(1, "again", when=MORNING + timedelta(hours=10))

    def test_logging_after_journal_keeps_entry(self):
        hid = create_habit(1, "Run")
        eid = create_journal_entry(1, "morning pages", "calm", when=MORNING)
        log_habit(1, hid, True, when=MORNING + timedelta(hours=2))
        start, end = BOUNDARY.bounds
        entry = get_journal_entry_for_day(1, start, end)
        assert (entry["id"], entry["mood"], entry["auto_created"]) == (eid, "calm", 0)

    def test_journal_delete_cascades(self):
        hid = create_habit(1, "Run")
        log_habit(1, hid, True, when=MORNING)
        start, end = BOUNDARY.bounds
        entry = get_journal_entry_for_day(1, start, end)
        assert delete_journal_entry(1, entry["id"])
        assert get_habit_logs([hid], start, end) == []

    def test_empty_habit_list(self):
        assert get_habit_logs([], "a", "z") == []


class TestProjectsAndTasks:
    def test_active_projects_with_open_counts(self):
        pid = create_project(1, "Website")
        archived = create_project(1, "Old")
        archive_project(1, archived)
        create_task(1, "Design", project_id=pid)
        complete_task(create_task(1, "Deploy", project_id=pid))
        projects = get_active_projects(1)
        assert [p["id"] for p in projects] == [pid]
        assert projects[0]["open_tasks"] == 1

    def test_project_task_order(self):
        pid = create_project(1, "Website")
        done = create_task(1, "Done", project_id=pid)
        complete_task(done)
        create_task(1, "Later", project_id=pid, status="in-progress")
        create_task(1, "Now", project_id=pid)
        assert [t["title"] for t in get_project_tasks(pid)] == ["Now", "Later", "Done"]

    def test_upcoming_and_recently_completed(self):
        create_task(1, "Past", due_date=MORNING - timedelta(days=2))
        create_task(1, "Soon", due_date=MORNING + timedelta(days=1))
        create_task(1, "Later", due_date=MORNING + timedelta(days=5))
        done = create_task(1, "Finished")
        complete_task(done, when=MORNING)

        upcoming = get_upcoming_tasks(1, to_utc_iso(MORNING))
        assert [t["title"] for t in upcoming] == ["Soon", "Later"]
        recent = get_recently_completed_tasks(1, to_utc_iso(MORNING - timedelta(days=30)))
        assert [t["title"] for t in recent] == ["Finished"]
