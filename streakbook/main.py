"""streakbook — main entry point.

    streakbook                      run the Telegram bot (default)
    streakbook dashboard --user N   print the composed dashboard as JSON
    streakbook habit --user N --habit H
                                    print one habit's report as JSON
    streakbook project --user N --project P
                                    print one project's report as JSON

Bot boot sequence:
1. Database initialization
2. Transport (Telegram by default)
3. Idle until interrupted
"""

import argparse
import asyncio
import json
import logging
from datetime import date

from streakbook.config import LOG_LEVEL
from streakbook.db import init_db
from streakbook.analytics.clock import DayBoundary, day_boundary
from streakbook.analytics.dashboard import build_dashboard, build_habit_report, build_project_report
from streakbook.errors import StreakbookError
from streakbook.transport.telegram import TelegramTransport

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)-5s %(name)s — %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("streakbook")


async def run_bot():
    """Boot sequence."""
    log.info("=" * 50)
    log.info("streakbook starting up...")
    log.info("=" * 50)

    init_db()
    log.info("Database ready")

    transport = TelegramTransport()
    await transport.start()
    log.info("Transport started: %s", transport.name)

    try:
        while True:
            await asyncio.sleep(3600)
    except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
        log.info("Shutting down...")
        await transport.stop()


def _boundary(args) -> DayBoundary:
    return DayBoundary.for_day(date.fromisoformat(args.date)) if args.date else day_boundary()


def _print_json(data: dict) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="streakbook", description="Habit & journal consistency tracker")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("bot", help="run the Telegram bot")

    dash = sub.add_parser("dashboard", help="print the dashboard as JSON")
    dash.add_argument("--user", type=int, required=True)
    dash.add_argument("--date", help="compute as of this day (YYYY-MM-DD)")

    habit = sub.add_parser("habit", help="print one habit's report as JSON")
    habit.add_argument("--user", type=int, required=True)
    habit.add_argument("--habit", type=int, required=True)
    habit.add_argument("--date", help="compute as of this day (YYYY-MM-DD)")

    project = sub.add_parser("project", help="print one project's report as JSON")
    project.add_argument("--user", type=int, required=True)
    project.add_argument("--project", type=int, required=True)
    project.add_argument("--date", help="compute as of this day (YYYY-MM-DD)")

    args = parser.parse_args(argv)

    if args.command in (None, "bot"):
        asyncio.run(run_bot())
        return

    init_db()
    try:
        if args.command == "dashboard":
            _print_json(asyncio.run(build_dashboard(args.user, _boundary(args))))
        elif args.command == "habit":
            _print_json(build_habit_report(args.user, args.habit, _boundary(args)))
        else:
            _print_json(build_project_report(args.user, args.project, _boundary(args)))
    except StreakbookError as e:
        parser.exit(1, f"streakbook: {e}\n")


if __name__ == "__main__":
    main()
