"""Day boundary — the single notion of "today" used by one request.

Timestamps are stored as UTC ISO-8601 strings (second precision) so that
string comparison in SQLite matches chronological order. Calendar days are
always interpreted in the configured fixed offset (TIMEZONE_OFFSET_HOURS).

A DayBoundary is computed once per request and passed explicitly into every
sub-computation, so a request straddling midnight never mixes two "todays".
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from streakbook.config import TIMEZONE_OFFSET_HOURS

TZ = timezone(timedelta(hours=TIMEZONE_OFFSET_HOURS))


def to_utc_iso(dt: datetime) -> str:
    """Serialize an aware datetime the way the database stores it."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=TZ)
    return dt.astimezone(timezone.utc).isoformat(timespec="seconds")


def local_date(value: datetime | str) -> date:
    """Calendar day of a stored timestamp, in the configured timezone."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(TZ).date()


def day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=TZ)


def day_end(day: date) -> datetime:
    return datetime.combine(day, time(23, 59, 59), tzinfo=TZ)


@dataclass(frozen=True)
class DayBoundary:
    """Today's local date and its start/end instants."""
    today: date
    start: datetime
    end: datetime

    @classmethod
    def for_day(cls, day: date) -> "DayBoundary":
        return cls(today=day, start=day_start(day), end=day_end(day))

    def window_start(self, days: int) -> date:
        """First day of a trailing window of `days` calendar days ending today."""
        return self.today - timedelta(days=max(days, 1) - 1)

    def window_bounds(self, days: int) -> tuple[str, str]:
        """UTC ISO bounds (inclusive) of a trailing window, ready for SQL."""
        return to_utc_iso(day_start(self.window_start(days))), to_utc_iso(self.end)

    @property
    def bounds(self) -> tuple[str, str]:
        """UTC ISO bounds (inclusive) of today."""
        return to_utc_iso(self.start), to_utc_iso(self.end)


def day_boundary(now: datetime | None = None) -> DayBoundary:
    """Compute the boundary for `now` (default: the current instant)."""
    if now is None:
        now = datetime.now(TZ)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=TZ)
    return DayBoundary.for_day(now.astimezone(TZ).date())
