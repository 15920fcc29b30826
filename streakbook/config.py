"""Configuration — loads environment variables with sensible defaults.

All tunables live here. Override via .env file or environment variables.
Analytics windows are read from here by the dashboard composer only; the
calculators themselves take every window as an explicit argument.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

def _env(key: str, default: str = "") -> str:
    return os.getenv(key, default)

def _env_int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))

def _env_bool(key: str, default: bool = False) -> bool:
    return os.getenv(key, str(default)).lower() in ("1", "true", "yes")


# ═══════════════════════════════════════════════════════════════════════════
# Transport
# ═══════════════════════════════════════════════════════════════════════════

TELEGRAM_BOT_TOKEN = _env("TELEGRAM_BOT_TOKEN")

# ═══════════════════════════════════════════════════════════════════════════
# Owner
# ═══════════════════════════════════════════════════════════════════════════
# Single-owner deployment: the bot only answers this Telegram user id.
# 0 = not set, the first user to talk to the bot becomes the owner.

OWNER_USER_ID = _env_int("OWNER_USER_ID", 0)


def set_owner_user_id(user_id: int) -> None:
    """Set OWNER_USER_ID at runtime and persist to .env for restart safety."""
    global OWNER_USER_ID
    OWNER_USER_ID = user_id
    _persist_owner(user_id)


def _persist_owner(user_id: int) -> None:
    """Write OWNER_USER_ID into .env so it survives restarts."""
    env_path = _PROJECT_ROOT / ".env"
    try:
        if env_path.exists():
            lines = env_path.read_text().splitlines()
            for i, line in enumerate(lines):
                if line.startswith("OWNER_USER_ID="):
                    lines[i] = f"OWNER_USER_ID={user_id}"
                    break
            else:
                lines.append(f"OWNER_USER_ID={user_id}")
            env_path.write_text("\n".join(lines) + "\n")
        else:
            env_path.write_text(f"OWNER_USER_ID={user_id}\n")
    except OSError:
        import logging
        logging.getLogger(__name__).warning(
            "Could not persist OWNER_USER_ID to .env, set it manually"
        )


# ═══════════════════════════════════════════════════════════════════════════
# Analytics windows (in calendar days, inclusive of today)
# ═══════════════════════════════════════════════════════════════════════════

HABIT_WINDOW_DAYS = _env_int("HABIT_WINDOW_DAYS", 30)
HEATMAP_WINDOW_DAYS = _env_int("HEATMAP_WINDOW_DAYS", 365)
RECENT_MOODS_LIMIT = _env_int("RECENT_MOODS_LIMIT", 7)
RECENT_ENTRIES_LIMIT = _env_int("RECENT_ENTRIES_LIMIT", 10)
DASHBOARD_LIST_LIMIT = _env_int("DASHBOARD_LIST_LIMIT", 5)
MONTHLY_BREAKDOWN_MONTHS = _env_int("MONTHLY_BREAKDOWN_MONTHS", 3)

# ═══════════════════════════════════════════════════════════════════════════
# Database
# ═══════════════════════════════════════════════════════════════════════════

DB_PATH = Path(_env("STREAKBOOK_DB_PATH") or _PROJECT_ROOT / "data" / "streakbook.db")

# ═══════════════════════════════════════════════════════════════════════════
# Logging
# ═══════════════════════════════════════════════════════════════════════════

LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()
LOG_SQL = _env_bool("LOG_SQL", False)

# ═══════════════════════════════════════════════════════════════════════════
# Timezone (default UTC, override for your locale in .env)
# ═══════════════════════════════════════════════════════════════════════════
# Every calendar-day computation (journal uniqueness, "today", windows)
# uses this single fixed offset.

TIMEZONE_OFFSET_HOURS = _env_int("TIMEZONE_OFFSET_HOURS", 0)
