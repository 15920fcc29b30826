"""Telegram transport — serves the analytics as chat commands.

This is the default transport. Requires TELEGRAM_BOT_TOKEN in .env.
Only the owner (OWNER_USER_ID, or the first user to say /start) is served;
the Telegram user id is used as the owner id in the database.
"""

import asyncio
import logging
from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes

import streakbook.config as config
from streakbook import db
from streakbook.analytics.dashboard import build_dashboard, build_habit_report
from streakbook.analytics.models import Mood
from streakbook.errors import NotFound, StreakbookError
from streakbook.report import render_habit_report, render_habits, render_moods, render_today
from streakbook.transport import Transport

log = logging.getLogger(__name__)

HELP_TEXT = (
    "Track habits and journal daily, and I'll keep the streaks.\n\n"
    "Commands:\n"
    "/today — Today's journal and habit status\n"
    "/habits — Streaks and completion rates\n"
    "/habit <name> — Detailed stats for one habit\n"
    "/moods — Mood distribution\n"
    "/journal [mood] <text> — Write today's entry\n"
    "/newhabit <name> — Start tracking a habit\n"
    "/done <habit> — Mark a habit done today\n"
    "/skip <habit> — Mark a habit not done today\n"
    "/help — This message"
)


MAX_MESSAGE_LENGTH = 4096


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Chunks of at most `limit` chars, split on line breaks where possible."""
    chunks = []
    while len(text) > limit:
        cut = text.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(text[:cut])
        text = text[cut:].lstrip("\n")
    if text:
        chunks.append(text)
    return chunks


def _is_owner(user_id: int) -> bool:
    """Check if user_id matches the configured owner."""
    return bool(config.OWNER_USER_ID) and user_id == config.OWNER_USER_ID


def parse_journal_args(args: list[str]) -> tuple[str | None, str]:
    """Split '/journal [mood] text' into (mood, text). Mood is optional."""
    if args and args[0].lower() in {m.value for m in Mood}:
        return args[0].lower(), " ".join(args[1:])
    return None, " ".join(args)


class TelegramTransport(Transport):
    """Telegram Bot API transport."""

    def __init__(self):
        self._app: Application | None = None

    @property
    def name(self) -> str:
        return "telegram"

    async def start(self) -> None:
        if not config.TELEGRAM_BOT_TOKEN:
            log.warning("TELEGRAM_BOT_TOKEN not set, Telegram transport disabled")
            return

        self._app = Application.builder().token(config.TELEGRAM_BOT_TOKEN).build()

        handlers = {
            "start": self._cmd_start,
            "help": self._cmd_help,
            "today": self._cmd_today,
            "habits": self._cmd_habits,
            "habit": self._cmd_habit,
            "moods": self._cmd_moods,
            "journal": self._cmd_journal,
            "newhabit": self._cmd_newhabit,
            "done": self._cmd_done,
            "skip": self._cmd_skip,
        }
        for command, callback in handlers.items():
            self._app.add_handler(CommandHandler(command, callback))

        await self._app.initialize()
        await self._app.start()
        await self._app.updater.start_polling(drop_pending_updates=True)
        log.info("Telegram transport started")

    async def stop(self) -> None:
        if self._app:
            await self._app.updater.stop()
            await self._app.stop()
            await self._app.shutdown()
            log.info("Telegram transport stopped")

    async def send_message(self, user_id: int, text: str) -> None:
        if not self._app:
            log.warning("Telegram not started, cannot send message")
            return
        for chunk in split_message(text):
            await self._app.bot.send_message(chat_id=user_id, text=chunk)

    # ── Helpers ───────────────────────────────────────────────

    async def _reply(self, update: Update, produce) -> None:
        """Run `produce(user_id)` for the owner and reply with its text."""
        user_id = update.effective_user.id
        if not _is_owner(user_id):
            return
        try:
            text = await produce(user_id)
        except StreakbookError as e:
            text = str(e)
        except Exception as e:
            log.error("Command %r failed: %s", update.message.text, e, exc_info=True)
            text = "Something went wrong, check the logs."
        for chunk in split_message(text):
            await update.message.reply_text(chunk)

    async def _set_habit(self, update: Update, context: ContextTypes.DEFAULT_TYPE,
                         completed: bool) -> None:
        name = " ".join(context.args)

        async def produce(user_id: int) -> str:
            if not name:
                return "Which habit? e.g. /done Meditate"
            habit = await asyncio.to_thread(db.get_habit_by_name, user_id, name)
            if not habit:
                raise NotFound("habit", name)
            await asyncio.to_thread(db.log_habit, user_id, habit["id"], completed)
            report = await asyncio.to_thread(build_habit_report, user_id, habit["id"])
            streak = report["stats"]["currentStreak"]
            if completed:
                return f"✅ {habit['name']} done. Streak: {streak} days"
            return f"❌ {habit['name']} marked not done today."

        await self._reply(update, produce)

    # ── Handlers ──────────────────────────────────────────────

    async def _cmd_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        user_id = update.effective_user.id
        # Auto-detect owner: first user to /start becomes the owner
        if not config.OWNER_USER_ID:
            config.set_owner_user_id(user_id)
            log.info("Owner auto-detected: user_id=%d", user_id)
        elif user_id != config.OWNER_USER_ID:
            await update.message.reply_text("Sorry, this is a personal tracker.")
            return
        await update.message.reply_text("Hi! Journal daily and I'll keep track of your streaks. Try /help.")

    async def _cmd_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.message.reply_text(HELP_TEXT)

    async def _cmd_today(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        async def produce(user_id: int) -> str:
            return render_today(await build_dashboard(user_id))
        await self._reply(update, produce)

    async def _cmd_habits(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        async def produce(user_id: int) -> str:
            return render_habits(await build_dashboard(user_id))
        await self._reply(update, produce)

    async def _cmd_moods(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        async def produce(user_id: int) -> str:
            return render_moods(await build_dashboard(user_id))
        await self._reply(update, produce)

    async def _cmd_habit(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        name = " ".join(context.args)

        async def produce(user_id: int) -> str:
            if not name:
                return "Which habit? e.g. /habit Meditate"
            habit = await asyncio.to_thread(db.get_habit_by_name, user_id, name)
            if not habit:
                raise NotFound("habit", name)
            report = await asyncio.to_thread(build_habit_report, user_id, habit["id"])
            return render_habit_report(report)

        await self._reply(update, produce)

    async def _cmd_journal(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        mood, text = parse_journal_args(context.args)

        async def produce(user_id: int) -> str:
            if not text:
                return "Write something, e.g. /journal happy Long walk by the river."
            entry_id = await asyncio.to_thread(db.create_journal_entry, user_id, text, mood)
            log.info("Journal entry #%d created", entry_id)
            return f"📓 Saved today's entry ({mood or Mood.NEUTRAL.value})."

        await self._reply(update, produce)

    async def _cmd_newhabit(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        name = " ".join(context.args)

        async def produce(user_id: int) -> str:
            if not name:
                return "Name the habit, e.g. /newhabit Meditate"
            habit_id = await asyncio.to_thread(db.create_habit, user_id, name)
            return f"🎯 Tracking {name} (#{habit_id}). Mark it with /done {name}"

        await self._reply(update, produce)

    async def _cmd_done(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._set_habit(update, context, completed=True)

    async def _cmd_skip(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._set_habit(update, context, completed=False)
