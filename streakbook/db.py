"""SQLite database layer — habits, journal entries, habit logs, projects, tasks.

Lightweight schema. Tables are created automatically on first run.

Timestamps are stored as UTC ISO-8601 strings (see analytics.clock) and every
read helper takes explicit UTC bounds, so callers decide what "today" means.
Each call opens its own connection; calls are safe to run from worker threads.
"""

import sqlite3
import logging
from datetime import datetime

from streakbook.config import DB_PATH, LOG_SQL
from streakbook.analytics.clock import TZ, day_end, day_start, local_date, to_utc_iso
from streakbook.errors import DuplicateEntry, NotFound

logger = logging.getLogger(__name__)


def _connect() -> sqlite3.Connection:
    """Return a connection with row_factory set."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    if LOG_SQL:
        conn.set_trace_callback(logger.debug)
    return conn


def init_db() -> None:
    """Create tables if they don't exist."""
    conn = _connect()
    conn.executescript("""
        -- Habits (defined by user)
        CREATE TABLE IF NOT EXISTS habits (
            id          INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id     INTEGER NOT NULL,
            name        TEXT    NOT NULL,
            description TEXT    NOT NULL DEFAULT '',
            icon        TEXT,
            color       TEXT,
            active      INTEGER NOT NULL DEFAULT 1,
            created_at  TEXT    NOT NULL
        );
        CREATE UNIQUE INDEX IF NOT EXISTS idx_habits_user_name
            ON habits(user_id, name);

        -- Journal entries (at most one per user per calendar day)
        CREATE TABLE IF NOT EXISTS journals (
            id         INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id    INTEGER NOT NULL,
            date       TEXT    NOT NULL,
            title      TEXT    NOT NULL DEFAULT '',
            content    TEXT    NOT NULL DEFAULT '',
            mood       TEXT,
            auto_created INTEGER NOT NULL DEFAULT 0,
            created_at TEXT    NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_journals_user_date
            ON journals(user_id, date);

        -- Habit logs (one per journal entry and habit)
        CREATE TABLE IF NOT EXISTS habit_logs (
            id         INTEGER PRIMARY KEY AUTOINCREMENT,
            journal_id INTEGER NOT NULL REFERENCES journals(id) ON DELETE CASCADE,
            habit_id   INTEGER NOT NULL REFERENCES habits(id) ON DELETE CASCADE,
            completed  INTEGER NOT NULL DEFAULT 0,
            notes      TEXT
        );
        CREATE UNIQUE INDEX IF NOT EXISTS idx_habit_logs_journal_habit
            ON habit_logs(journal_id, habit_id);
        CREATE INDEX IF NOT EXISTS idx_habit_logs_habit
            ON habit_logs(habit_id);

        -- Projects
        CREATE TABLE IF NOT EXISTS projects (
            id          INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id     INTEGER NOT NULL,
            name        TEXT    NOT NULL,
            description TEXT    NOT NULL DEFAULT '',
            icon        TEXT,
            color       TEXT,
            archived    INTEGER NOT NULL DEFAULT 0,
            created_at  TEXT    NOT NULL
        );

        -- Tasks
        CREATE TABLE IF NOT EXISTS tasks (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id      INTEGER NOT NULL,
            project_id   INTEGER REFERENCES projects(id) ON DELETE SET NULL,
            title        TEXT    NOT NULL,
            status       TEXT    NOT NULL DEFAULT 'pending',
            priority     TEXT    NOT NULL DEFAULT 'medium',
            due_date     TEXT,
            completed_at TEXT,
            created_at   TEXT    NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_tasks_user_status
            ON tasks(user_id, status);
    """)
    conn.close()
    logger.info("Database initialized at %s", DB_PATH)


def _now_iso() -> str:
    return to_utc_iso(datetime.now(TZ))


# ═══════════════════════════════════════════════════════════════════════════
# Habits
# ═══════════════════════════════════════════════════════════════════════════

_HABIT_COLUMNS = "id, user_id, name, description, icon, color, active, created_at"


def create_habit(user_id: int, name: str, description: str = "",
                 icon: str | None = None, color: str | None = None) -> int:
    """Create a new habit. Returns habit id (the existing one if the name is taken)."""
    conn = _connect()
    conn.execute(
        """INSERT OR IGNORE INTO habits (user_id, name, description, icon, color, created_at)
           VALUES (?, ?, ?, ?, ?, ?)""",
        (user_id, name, description, icon, color, _now_iso()),
    )
    conn.commit()
    row = conn.execute(
        "SELECT id FROM habits WHERE user_id = ? AND name = ?", (user_id, name)
    ).fetchone()
    conn.close()
    return row["id"]


def get_habit(user_id: int, habit_id: int) -> dict | None:
    """Return the habit if it exists and belongs to user_id."""
    conn = _connect()
    row = conn.execute(
        f"SELECT {_HABIT_COLUMNS} FROM habits WHERE id = ? AND user_id = ?",
        (habit_id, user_id),
    ).fetchone()
    conn.close()
    return dict(row) if row else None


def get_habit_by_name(user_id: int, name: str) -> dict | None:
    conn = _connect()
    row = conn.execute(
        f"SELECT {_HABIT_COLUMNS} FROM habits WHERE user_id = ? AND name = ? COLLATE NOCASE",
        (user_id, name),
    ).fetchone()
    conn.close()
    return dict(row) if row else None


def get_habits(user_id: int, active_only: bool = True) -> list[dict]:
    """Habits of a user in creation order."""
    conn = _connect()
    sql = f"SELECT {_HABIT_COLUMNS} FROM habits WHERE user_id = ?"
    if active_only:
        sql += " AND active = 1"
    sql += " ORDER BY created_at, id"
    rows = conn.execute(sql, (user_id,)).fetchall()
    conn.close()
    return [dict(r) for r in rows]


def set_habit_active(user_id: int, habit_id: int, active: bool) -> bool:
    """Soft-enable/disable a habit. History stays; only future tracking changes."""
    conn = _connect()
    cur = conn.execute(
        "UPDATE habits SET active = ? WHERE id = ? AND user_id = ?",
        (int(active), habit_id, user_id),
    )
    conn.commit()
    conn.close()
    return cur.rowcount > 0


def delete_habit(user_id: int, habit_id: int) -> bool:
    """Delete a habit and all of its logs."""
    conn = _connect()
    cur = conn.execute(
        "DELETE FROM habits WHERE id = ? AND user_id = ?", (habit_id, user_id)
    )
    conn.commit()
    conn.close()
    return cur.rowcount > 0


# ═══════════════════════════════════════════════════════════════════════════
# Journal
# ═══════════════════════════════════════════════════════════════════════════

_JOURNAL_COLUMNS = "id, user_id, date, title, content, mood, auto_created"


def _entry_for_day(conn: sqlite3.Connection, user_id: int,
                   start_iso: str, end_iso: str) -> sqlite3.Row | None:
    return conn.execute(
        f"""SELECT {_JOURNAL_COLUMNS} FROM journals
            WHERE user_id = ? AND date >= ? AND date <= ?
            ORDER BY date LIMIT 1""",
        (user_id, start_iso, end_iso),
    ).fetchone()


def create_journal_entry(user_id: int, content: str = "", mood: str | None = None,
                         title: str = "", when: datetime | None = None) -> int:
    """Create the journal entry for the calendar day of `when` (default: now).

    If habit logging already opened a placeholder entry for that day, the
    placeholder is filled in and its id returned. Raises DuplicateEntry if
    the user already wrote an entry that day.
    """
    when = when or datetime.now(TZ)
    day = local_date(when)
    conn = _connect()
    try:
        # Write lock held across the check and the write
        conn.execute("BEGIN IMMEDIATE")
        existing = _entry_for_day(conn, user_id, to_utc_iso(day_start(day)), to_utc_iso(day_end(day)))
        if existing and not existing["auto_created"]:
            raise DuplicateEntry(day)
        if existing:
            conn.execute(
                """UPDATE journals SET content = ?, mood = ?, title = ?, auto_created = 0
                   WHERE id = ?""",
                (content, mood, title or existing["title"], existing["id"]),
            )
            conn.commit()
            logger.debug("Filled in journal #%d for %s", existing["id"], day)
            return existing["id"]
        cur = conn.execute(
            """INSERT INTO journals (user_id, date, title, content, mood, created_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (user_id, to_utc_iso(when), title or f"Journal for {day.isoformat()}",
             content, mood, _now_iso()),
        )
        conn.commit()
        return cur.lastrowid
    finally:
        conn.close()


def get_journal_entry_for_day(user_id: int, start_iso: str, end_iso: str) -> dict | None:
    """The user's entry whose date falls within [start_iso, end_iso]."""
    conn = _connect()
    row = _entry_for_day(conn, user_id, start_iso, end_iso)
    conn.close()
    return dict(row) if row else None


def get_journal_entries(user_id: int, start_iso: str | None = None,
                        end_iso: str | None = None, limit: int | None = None,
                        newest_first: bool = True, written_only: bool = False) -> list[dict]:
    """Entries in [start_iso, end_iso]. written_only skips placeholders opened by log_habit."""
    conn = _connect()
    sql = f"SELECT {_JOURNAL_COLUMNS} FROM journals WHERE user_id = ?"
    params: list = [user_id]
    if written_only:
        sql += " AND auto_created = 0"
    if start_iso:
        sql += " AND date >= ?"
        params.append(start_iso)
    if end_iso:
        sql += " AND date <= ?"
        params.append(end_iso)
    sql += " ORDER BY date DESC" if newest_first else " ORDER BY date ASC"
    if limit:
        sql += " LIMIT ?"
        params.append(limit)
    rows = conn.execute(sql, params).fetchall()
    conn.close()
    return [dict(r) for r in rows]


def delete_journal_entry(user_id: int, entry_id: int) -> bool:
    """Delete an entry; its habit logs go with it."""
    conn = _connect()
    cur = conn.execute(
        "DELETE FROM journals WHERE id = ? AND user_id = ?", (entry_id, user_id)
    )
    conn.commit()
    conn.close()
    return cur.rowcount > 0


# ═══════════════════════════════════════════════════════════════════════════
# Habit Logs
# ═══════════════════════════════════════════════════════════════════════════

def log_habit(user_id: int, habit_id: int, completed: bool = True,
              notes: str | None = None, when: datetime | None = None) -> int:
    """Record a habit for the day of `when` (default: today). Returns the log id.

    Opens a placeholder journal entry for that day when missing (filled in
    later by create_journal_entry), then upserts the log.
    """
    when = when or datetime.now(TZ)
    day = local_date(when)
    conn = _connect()
    try:
        conn.execute("BEGIN IMMEDIATE")
        habit = conn.execute(
            "SELECT id FROM habits WHERE id = ? AND user_id = ?", (habit_id, user_id)
        ).fetchone()
        if not habit:
            raise NotFound("habit", habit_id)

        entry = _entry_for_day(conn, user_id, to_utc_iso(day_start(day)), to_utc_iso(day_end(day)))
        if entry:
            journal_id = entry["id"]
        else:
            cur = conn.execute(
                """INSERT INTO journals (user_id, date, title, content, auto_created, created_at)
                   VALUES (?, ?, ?, '', 1, ?)""",
                (user_id, to_utc_iso(when), f"Journal for {day.isoformat()}", _now_iso()),
            )
            journal_id = cur.lastrowid
            logger.debug("Created journal #%d for %s while logging habit #%d",
                         journal_id, day, habit_id)

        conn.execute(
            """INSERT INTO habit_logs (journal_id, habit_id, completed, notes) VALUES (?, ?, ?, ?)
               ON CONFLICT(journal_id, habit_id)
               DO UPDATE SET completed = excluded.completed, notes = excluded.notes""",
            (journal_id, habit_id, int(completed), notes),
        )
        conn.commit()
        row = conn.execute(
            "SELECT id FROM habit_logs WHERE journal_id = ? AND habit_id = ?",
            (journal_id, habit_id),
        ).fetchone()
        return row["id"]
    finally:
        conn.close()


def get_habit_logs(habit_ids: list[int], start_iso: str, end_iso: str) -> list[dict]:
    """Logs of the given habits joined to their journal date, newest first.

    Each item: {habit_id, completed, notes, date}
    """
    if not habit_ids:
        return []
    conn = _connect()
    placeholders = ",".join("?" * len(habit_ids))
    rows = conn.execute(
        f"""SELECT l.habit_id, l.completed, l.notes, j.date
            FROM habit_logs l JOIN journals j ON j.id = l.journal_id
            WHERE l.habit_id IN ({placeholders}) AND j.date >= ? AND j.date <= ?
            ORDER BY j.date DESC, l.habit_id""",
        [*habit_ids, start_iso, end_iso],
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]


# ═══════════════════════════════════════════════════════════════════════════
# Projects
# ═══════════════════════════════════════════════════════════════════════════

def create_project(user_id: int, name: str, description: str = "",
                   icon: str | None = None, color: str | None = None) -> int:
    conn = _connect()
    cur = conn.execute(
        """INSERT INTO projects (user_id, name, description, icon, color, created_at)
           VALUES (?, ?, ?, ?, ?, ?)""",
        (user_id, name, description, icon, color, _now_iso()),
    )
    conn.commit()
    pid = cur.lastrowid
    conn.close()
    return pid


def get_project(user_id: int, project_id: int) -> dict | None:
    conn = _connect()
    row = conn.execute(
        """SELECT id, name, description, icon, color, archived, created_at
           FROM projects WHERE id = ? AND user_id = ?""",
        (project_id, user_id),
    ).fetchone()
    conn.close()
    return dict(row) if row else None


def archive_project(user_id: int, project_id: int) -> bool:
    conn = _connect()
    cur = conn.execute(
        "UPDATE projects SET archived = 1 WHERE id = ? AND user_id = ?",
        (project_id, user_id),
    )
    conn.commit()
    conn.close()
    return cur.rowcount > 0


def get_active_projects(user_id: int, limit: int = 5) -> list[dict]:
    """Non-archived projects, newest first, each with its count of open tasks."""
    conn = _connect()
    rows = conn.execute(
        """SELECT p.id, p.name, p.description, p.icon, p.color, p.created_at,
                  (SELECT COUNT(*) FROM tasks t
                   WHERE t.project_id = p.id AND t.status != 'completed') AS open_tasks
           FROM projects p
           WHERE p.user_id = ? AND p.archived = 0
           ORDER BY p.created_at DESC, p.id DESC LIMIT ?""",
        (user_id, limit),
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]


# ═══════════════════════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════════════════════

_TASK_COLUMNS = "id, project_id, title, status, priority, due_date, completed_at, created_at"


def create_task(user_id: int, title: str, project_id: int | None = None,
                priority: str = "medium", due_date: datetime | None = None,
                status: str = "pending") -> int:
    conn = _connect()
    cur = conn.execute(
        """INSERT INTO tasks (user_id, project_id, title, status, priority, due_date, created_at)
           VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (user_id, project_id, title, status, priority,
         to_utc_iso(due_date) if due_date else None, _now_iso()),
    )
    conn.commit()
    tid = cur.lastrowid
    conn.close()
    return tid


def complete_task(task_id: int, when: datetime | None = None) -> None:
    conn = _connect()
    conn.execute(
        "UPDATE tasks SET status = 'completed', completed_at = ? WHERE id = ?",
        (to_utc_iso(when) if when else _now_iso(), task_id),
    )
    conn.commit()
    conn.close()


def get_project_tasks(project_id: int) -> list[dict]:
    """Tasks of a project: pending, then in progress, then completed; by due date."""
    conn = _connect()
    rows = conn.execute(
        f"""SELECT {_TASK_COLUMNS} FROM tasks WHERE project_id = ?
            ORDER BY CASE status WHEN 'pending' THEN 0 WHEN 'in-progress' THEN 1 ELSE 2 END,
                     due_date IS NULL, due_date""",
        (project_id,),
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]


def get_upcoming_tasks(user_id: int, now_iso: str, limit: int = 5) -> list[dict]:
    """Open tasks due at or after now_iso, soonest first, with project info."""
    conn = _connect()
    rows = conn.execute(
        """SELECT t.id, t.project_id, t.title, t.status, t.priority, t.due_date,
                  p.name AS project_name, p.color AS project_color, p.icon AS project_icon
           FROM tasks t LEFT JOIN projects p ON p.id = t.project_id
           WHERE t.user_id = ? AND t.status != 'completed' AND t.due_date >= ?
           ORDER BY t.due_date LIMIT ?""",
        (user_id, now_iso, limit),
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]


def get_recently_completed_tasks(user_id: int, since_iso: str, limit: int = 5) -> list[dict]:
    conn = _connect()
    rows = conn.execute(
        """SELECT t.id, t.project_id, t.title, t.priority, t.completed_at,
                  p.name AS project_name, p.color AS project_color, p.icon AS project_icon
           FROM tasks t LEFT JOIN projects p ON p.id = t.project_id
           WHERE t.user_id = ? AND t.status = 'completed' AND t.completed_at >= ?
           ORDER BY t.completed_at DESC LIMIT ?""",
        (user_id, since_iso, limit),
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]
