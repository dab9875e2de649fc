"""Tests for leveling, streaks and badge unlocks."""
from datetime import date

from quest_hub.config import BADGES, LEVELS
from quest_hub.models import Badge, BadgeCriteria, DailyProgress, Task, UserStats, build_quest
from quest_hub.progression import (
    apply_xp_delta, check_badge_unlocks, compute_level, compute_streak, count_completed_quests,
    next_level_xp, refresh_stats,
)

TODAY = date(2026, 10, 17)


def test_compute_level_at_thresholds():
    assert compute_level(0) == 1
    assert compute_level(99) == 1
    assert compute_level(100) == 2
    assert compute_level(299) == 2
    assert compute_level(300) == 3


def test_compute_level_caps_at_table_length():
    assert compute_level(5500) == len(LEVELS)
    assert compute_level(99999) == len(LEVELS)


def test_compute_level_empty_table():
    assert compute_level(500, []) == 1


def test_compute_level_is_monotonic():
    levels = [compute_level(xp) for xp in range(0, 6000, 37)]
    assert levels == sorted(levels)


def test_next_level_xp():
    assert next_level_xp(1) == 100
    assert next_level_xp(2) == 300
    assert next_level_xp(11) == 5500
    assert next_level_xp(1, []) == 0


def test_apply_xp_delta_level_up():
    """Completing a 50 XP task at 80 XP crosses into level 2."""
    stats = UserStats(current_xp=80)
    updated = apply_xp_delta(stats, 50, today=TODAY)
    assert updated.current_xp == 130
    assert updated.level == 2
    assert updated.next_level_xp == 300
    assert updated.daily_history == [DailyProgress(date="2026-10-17", xp_earned=50)]
    # input untouched
    assert stats.current_xp == 80
    assert stats.daily_history == []


def test_apply_xp_delta_clamps_at_zero():
    stats = UserStats(current_xp=30)
    updated = apply_xp_delta(stats, -50, today=TODAY)
    assert updated.current_xp == 0
    assert updated.level == 1
    assert updated.daily_history == []


def test_apply_xp_delta_accumulates_same_day():
    stats = apply_xp_delta(UserStats(), 50, today=TODAY)
    stats = apply_xp_delta(stats, 25, today=TODAY)
    assert stats.daily_history == [DailyProgress(date="2026-10-17", xp_earned=75)]


def test_apply_xp_delta_new_day_appends():
    stats = apply_xp_delta(UserStats(), 50, today=date(2026, 10, 16))
    stats = apply_xp_delta(stats, 10, today=TODAY)
    assert [h.date for h in stats.daily_history] == ["2026-10-16", "2026-10-17"]


def test_apply_xp_delta_revoke_keeps_history():
    stats = apply_xp_delta(UserStats(), 50, today=TODAY)
    stats = apply_xp_delta(stats, -50, today=TODAY)
    assert stats.current_xp == 0
    assert stats.daily_history[0].xp_earned == 50


def test_badge_unlock_at_500_xp():
    stats = UserStats(current_xp=520, level=3)
    updated, unlocked = check_badge_unlocks(stats)
    assert [b.id for b in unlocked] == ["scholar"]
    assert updated.earned_badges == ["scholar"]


def test_badge_unlock_is_idempotent():
    stats, _ = check_badge_unlocks(UserStats(current_xp=520))
    again, unlocked = check_badge_unlocks(stats)
    assert unlocked == []
    assert again is stats


def test_badges_unlock_in_catalog_order():
    stats = UserStats(current_xp=6000, total_quests_completed=5, streak_days=3)
    _, unlocked = check_badge_unlocks(stats)
    assert [b.id for b in unlocked] == [b.id for b in BADGES]


def test_badge_never_revoked():
    stats, _ = check_badge_unlocks(UserStats(current_xp=520))
    stats = apply_xp_delta(stats, -400, today=TODAY)
    stats, _ = check_badge_unlocks(stats)
    assert "scholar" in stats.earned_badges


def test_unknown_criterion_never_met():
    catalog = [Badge("odd", "Odd", "", BadgeCriteria("moon_phase", 0))]
    _, unlocked = check_badge_unlocks(UserStats(), catalog)
    assert unlocked == []


def test_compute_streak_consecutive_days():
    history = [
        DailyProgress("2026-10-15", 10),
        DailyProgress("2026-10-16", 20),
        DailyProgress("2026-10-17", 5),
    ]
    assert compute_streak(history, TODAY) == 3


def test_compute_streak_counts_from_yesterday():
    history = [DailyProgress("2026-10-15", 10), DailyProgress("2026-10-16", 20)]
    assert compute_streak(history, TODAY) == 2


def test_compute_streak_broken():
    history = [DailyProgress("2026-10-14", 10), DailyProgress("2026-10-17", 5)]
    assert compute_streak(history, TODAY) == 1
    assert compute_streak([], TODAY) == 0


def test_count_completed_quests_ignores_empty():
    done = build_quest("Done", [Task(id="a", title="A", description="", xp=10, is_completed=True)])
    open_ = build_quest("Open", [Task(id="b", title="B", description="", xp=10)])
    empty = build_quest("Empty", [])
    assert count_completed_quests([done, open_, empty]) == 1


def test_refresh_stats_unlocks_novice_and_streak():
    done = build_quest("Done", [Task(id="a", title="A", description="", xp=10, is_completed=True)])
    history = [DailyProgress(d, 10) for d in ("2026-10-15", "2026-10-16", "2026-10-17")]
    stats, unlocked = refresh_stats(UserStats(daily_history=history), [done], today=TODAY)
    assert stats.total_quests_completed == 1
    assert stats.streak_days == 3
    assert [b.id for b in unlocked] == ["novice", "streak_3"]


def test_small_threshold_table():
    thresholds = [0, 100, 300, 600]
    assert compute_level(100, thresholds) == 2
    assert compute_level(99, thresholds) == 1
    assert compute_level(1000, thresholds) == 4


def test_two_deltas_same_day_share_one_entry():
    stats = apply_xp_delta(UserStats(), 50, today=TODAY)
    stats = apply_xp_delta(stats, 60, today=TODAY)
    assert stats.current_xp == 110
    assert stats.daily_history == [DailyProgress(date="2026-10-17", xp_earned=110)]


def test_xp_never_negative_for_any_delta_sequence():
    stats = UserStats()
    for delta in [30, -100, 50, -10, -500, 700, -699, -1]:
        stats = apply_xp_delta(stats, delta, today=TODAY)
        assert stats.current_xp >= 0
    assert stats.current_xp == 0


def test_xp_badge_unlocks_on_exact_threshold_once():
    catalog = [Badge("five_hundred", "500", "", BadgeCriteria("xp", 500))]
    stats, unlocked = check_badge_unlocks(UserStats(current_xp=499), catalog)
    assert unlocked == []
    stats = apply_xp_delta(stats, 1, today=TODAY)
    stats, unlocked = check_badge_unlocks(stats, catalog)
    assert unlocked == catalog
    assert stats.earned_badges == ["five_hundred"]
    stats, unlocked = check_badge_unlocks(stats, catalog)
    assert unlocked == []
