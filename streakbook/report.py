"""Plain-text rendering of dashboard and habit reports for chat transports."""

from streakbook.analytics.models import Mood
from streakbook.config import HABIT_WINDOW_DAYS, HEATMAP_WINDOW_DAYS

_MOOD_ICONS = {
    Mood.HAPPY.value: "😊",
    Mood.CALM.value: "😌",
    Mood.NEUTRAL.value: "😐",
    Mood.ANXIOUS.value: "😟",
    Mood.SAD.value: "😢",
    Mood.EXCITED.value: "🤩",
    Mood.TIRED.value: "😴",
}

# Heatmap intensity 0-4
_LEVEL_BLOCKS = "·░▒▓█"


def mood_icon(mood: str) -> str:
    return _MOOD_ICONS.get(mood, _MOOD_ICONS[Mood.NEUTRAL.value])


def heatmap_strip(cells: list[dict]) -> str:
    """One character per day, oldest → newest."""
    return "".join(_LEVEL_BLOCKS[c["intensityLevel"]] for c in cells)


def render_habits(dashboard: dict) -> str:
    habits = dashboard["habits"]
    if not habits:
        return "No active habits yet. Add one with /newhabit <name>."

    lines = [f"🎯 Habits (last {HABIT_WINDOW_DAYS} days)", ""]
    for h in habits:
        icon = f"{h['icon']} " if h.get("icon") else ""
        lines.append(
            f"{icon}{h['name']}: 🔥 {h['streak']}d streak"
            f" (best {h['longestStreak']}d), {h['completionRate']}% done"
        )

    consistency = dashboard["consistency"]
    lines += [
        "",
        heatmap_strip(consistency["heatmap"]),
        f"Overall: {consistency['overallStreak']}-day streak, "
        f"{consistency['overallCompletionRate']}% of habit-days completed",
    ]
    return "\n".join(lines)


def render_moods(dashboard: dict) -> str:
    journal = dashboard["journal"]
    if not journal["totalEntries"]:
        return f"No journal entries in the last {HEATMAP_WINDOW_DAYS} days. Write one with /journal."

    lines = [f"📓 {journal['totalEntries']} entries in the last {HEATMAP_WINDOW_DAYS} days", ""]
    for mood, pct in journal["moodDistribution"].items():
        lines.append(f"{mood_icon(mood)} {mood}: {pct}%")
    recent = " ".join(mood_icon(m) for m in journal["recentMoods"])
    lines += ["", f"Recent: {recent}"]
    return "\n".join(lines)


def render_today(dashboard: dict) -> str:
    journal = dashboard["journal"]
    lines = [f"📅 {dashboard['generatedFor']}"]
    lines.append("✅ Journal written today" if journal["hasEntryToday"] else "✍️ No journal entry yet today")

    today = dashboard["generatedFor"]
    for h in dashboard["habits"]:
        latest = h["streakData"][0] if h["streakData"] else None
        if latest and latest["date"] == today:
            mark = "✅" if latest["completed"] else "❌"
        else:
            mark = "⬜"
        lines.append(f"{mark} {h['name']}")

    upcoming = dashboard["tasks"]["upcoming"]
    if upcoming:
        lines += ["", "Upcoming tasks:"]
        lines += [f"- {t['title']} (due {t['due_date'][:10]})" for t in upcoming]
    return "\n".join(lines)


def render_habit_report(report: dict) -> str:
    habit, stats = report["habit"], report["stats"]
    lines = [
        f"{habit.get('icon') or '🎯'} {habit['name']}",
        "",
        f"Current streak: {stats['currentStreak']} days",
        f"Longest streak: {stats['longestStreak']} days",
        f"Completion: {stats['completionRate']}% "
        f"({stats['completedDays']}/{stats['totalDays']} logged days)",
    ]

    weekdays = [w for w in report["weekdays"] if w["total"]]
    if weekdays:
        best = max(weekdays, key=lambda w: w["completionRate"])
        lines.append(f"Best day: {best['name']} ({best['completionRate']}%)")

    lines += ["", "Monthly:"]
    lines += [
        f"  {m['name']}: {m['completionRate']}% ({m['completed']}/{m['total']})"
        for m in report["monthly"]
    ]
    return "\n".join(lines)
