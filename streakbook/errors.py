"""Error taxonomy shared by the persistence layer and the analytics engine.

Empty input is never an error: zero logs, entries or habits produce
zero-valued results. Only the read boundary and malformed ranges raise.
"""

from datetime import date


class StreakbookError(Exception):
    """Base class for all errors surfaced to callers."""


class NotFound(StreakbookError):
    """A habit/project does not exist or belongs to another owner."""

    def __init__(self, kind: str, ident: int | str):
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind.capitalize()} not found: {ident}")


class InvalidRange(StreakbookError):
    """A date range whose end lies before its start."""

    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end
        super().__init__(f"Invalid date range: {start.isoformat()} > {end.isoformat()}")


class DuplicateEntry(StreakbookError):
    """A second journal entry for the same owner on the same calendar day."""

    def __init__(self, day: date):
        self.day = day
        super().__init__(f"A journal entry already exists for {day.isoformat()}")
