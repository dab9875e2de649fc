"""XP leveling, streak tracking and badge unlocks."""
from dataclasses import replace
from datetime import date, timedelta
from typing import Optional

from quest_hub.config import BADGES, LEVELS
from quest_hub.models import Badge, DailyProgress, Quest, UserStats


def compute_level(current_xp: int, thresholds: list[int] = LEVELS) -> int:
    """Return the highest level whose threshold ``current_xp`` has reached.

    ``thresholds[n]`` is the XP needed for level n+1, with a leading zero.
    XP beyond the last threshold stays at the top level.
    """
    level = 1
    for index, needed in enumerate(thresholds):
        if current_xp >= needed:
            level = index + 1
        else:
            break
    return level


def next_level_xp(level: int, thresholds: list[int] = LEVELS) -> int:
    if not thresholds:
        return 0
    if level < len(thresholds):
        return thresholds[level]
    return thresholds[-1]


def apply_xp_delta(
    stats: UserStats,
    delta: int,
    thresholds: list[int] = LEVELS,
    today: Optional[date] = None,
) -> UserStats:
    """Return new stats with ``delta`` applied and level fields recomputed.

    XP never drops below zero. Positive deltas accumulate into today's
    history entry; revoked XP is not removed from history.
    """
    new_xp = max(0, stats.current_xp + delta)
    level = compute_level(new_xp, thresholds)
    history = list(stats.daily_history)
    if delta > 0:
        day = (today or date.today()).isoformat()
        for i, entry in enumerate(history):
            if entry.date == day:
                history[i] = DailyProgress(date=day, xp_earned=entry.xp_earned + delta)
                break
        else:
            history.append(DailyProgress(date=day, xp_earned=delta))
    return replace(
        stats,
        current_xp=new_xp,
        level=level,
        next_level_xp=next_level_xp(level, thresholds),
        daily_history=history,
    )


def _criterion_met(badge: Badge, stats: UserStats) -> bool:
    kind = badge.criteria.type
    if kind == "xp":
        return stats.current_xp >= badge.criteria.threshold
    if kind == "streak":
        return stats.streak_days >= badge.criteria.threshold
    if kind == "quests_completed":
        return stats.total_quests_completed >= badge.criteria.threshold
    return False


def check_badge_unlocks(stats: UserStats, catalog: list[Badge] = BADGES) -> tuple[UserStats, list[Badge]]:
    """Award every catalog badge whose criterion is now met.

    Returns the updated stats and the badges unlocked by this call, in
    catalog order. Badges already earned are never returned again.
    """
    earned = list(stats.earned_badges)
    unlocked = []
    for badge in catalog:
        if badge.id in earned:
            continue
        if _criterion_met(badge, stats):
            earned.append(badge.id)
            unlocked.append(badge)
    if not unlocked:
        return stats, []
    return replace(stats, earned_badges=earned), unlocked


def compute_streak(daily_history: list[DailyProgress], today: Optional[date] = None) -> int:
    """Count consecutive days with earned XP, ending today or yesterday."""
    today = today or date.today()
    active = {h.date for h in daily_history if h.xp_earned > 0}
    day = today if today.isoformat() in active else today - timedelta(days=1)
    streak = 0
    while day.isoformat() in active:
        streak += 1
        day -= timedelta(days=1)
    return streak


def count_completed_quests(quests: list[Quest]) -> int:
    return sum(1 for q in quests if q.tasks and all(t.is_completed for t in q.tasks))


def refresh_stats(
    stats: UserStats,
    quests: list[Quest],
    catalog: list[Badge] = BADGES,
    today: Optional[date] = None,
) -> tuple[UserStats, list[Badge]]:
    """Recompute derived counters from ``quests``/history, then check badges."""
    updated = replace(
        stats,
        total_quests_completed=count_completed_quests(quests),
        streak_days=compute_streak(stats.daily_history, today),
    )
    return check_badge_unlocks(updated, catalog)
