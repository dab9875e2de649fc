"""Progress summaries for the student and teacher dashboards."""
from datetime import date, timedelta

from quest_hub.config import BADGES, LEVEL_LABELS
from quest_hub.models import AppState, Badge, Quest, Student, UserStats


def get_level_label(level: int) -> str:
    return LEVEL_LABELS.get(level, LEVEL_LABELS[max(LEVEL_LABELS)])


def get_level_color(progress: float) -> str:
    if progress >= 75:
        return "green"
    elif progress >= 40:
        return "yellow"
    return "cyan"


def get_level_progress(stats: UserStats) -> float:
    """Percent of the way to ``next_level_xp``, capped at 100."""
    if stats.next_level_xp <= 0:
        return 100.0
    return round(min(100.0, stats.current_xp / stats.next_level_xp * 100), 1)


def get_quest_progress(quest: Quest) -> float:
    if quest.total_xp <= 0:
        return 0.0
    return round(quest.earned_xp / quest.total_xp * 100, 1)


def get_recent_activity(quests: list[Quest], limit: int = 3) -> list[Quest]:
    """Quests that have been started but not finished."""
    started = [q for q in quests if 0 < q.earned_xp < q.total_xp]
    return started[:limit]


def get_weekly_history(stats: UserStats, today: date = None) -> list[dict]:
    """XP earned on each of the last seven days, oldest first, zero-filled."""
    today = today or date.today()
    earned = {h.date: h.xp_earned for h in stats.daily_history}
    days = []
    for offset in range(6, -1, -1):
        day = (today - timedelta(days=offset)).isoformat()
        days.append({"date": day, "xp": earned.get(day, 0)})
    return days


def get_class_roster(state: AppState, class_id: str) -> list[Student]:
    group = state.find_class(class_id)
    if group is None:
        return []
    by_id = {s.id: s for s in state.students}
    return [by_id[sid] for sid in group.student_ids if sid in by_id]


def get_orphaned_students(state: AppState) -> list[Student]:
    """Students no class references, e.g. after their class was deleted."""
    enrolled = {sid for c in state.classes for sid in c.student_ids}
    return [s for s in state.students if s.id not in enrolled]


def get_badge_board(stats: UserStats, catalog: list[Badge] = BADGES) -> list[dict]:
    earned = set(stats.earned_badges)
    return [{"badge": b, "earned": b.id in earned} for b in catalog]
