from datetime import date

from quest_hub.config import BADGES
from quest_hub.dashboard import (
    get_badge_board, get_class_roster, get_level_color, get_level_label, get_level_progress,
    get_orphaned_students, get_quest_progress, get_recent_activity, get_weekly_history,
)
from quest_hub.models import AppState, ClassGroup, DailyProgress, Student, Task, UserStats, build_quest


def test_level_label():
    assert get_level_label(1) == "Curious Learner"
    assert get_level_label(11) == "Legend"
    assert get_level_label(99) == "Legend"


def test_level_color():
    assert get_level_color(90) == "green"
    assert get_level_color(50) == "yellow"
    assert get_level_color(10) == "cyan"


def test_level_progress():
    assert get_level_progress(UserStats(current_xp=50, next_level_xp=100)) == 50.0
    assert get_level_progress(UserStats(current_xp=6000, next_level_xp=5500)) == 100.0
    assert get_level_progress(UserStats(current_xp=0, next_level_xp=0)) == 100.0


def test_quest_progress():
    quest = build_quest("Q", [
        Task(id="a", title="A", description="", xp=50, is_completed=True),
        Task(id="b", title="B", description="", xp=150),
    ])
    assert get_quest_progress(quest) == 25.0
    assert get_quest_progress(build_quest("Empty", [])) == 0.0


def test_recent_activity_only_started_units():
    started = build_quest("Started", [
        Task(id="a", title="A", description="", xp=10, is_completed=True),
        Task(id="b", title="B", description="", xp=10),
    ])
    fresh = build_quest("Fresh", [Task(id="c", title="C", description="", xp=10)])
    done = build_quest("Done", [Task(id="d", title="D", description="", xp=10, is_completed=True)])
    assert get_recent_activity([fresh, started, done]) == [started]
    assert get_recent_activity([started] * 5, limit=3) == [started] * 3


def test_weekly_history_zero_fills():
    stats = UserStats(daily_history=[
        DailyProgress("2026-10-17", 50),
        DailyProgress("2026-10-14", 25),
        DailyProgress("2026-10-01", 999),
    ])
    week = get_weekly_history(stats, today=date(2026, 10, 17))
    assert len(week) == 7
    assert week[0] == {"date": "2026-10-11", "xp": 0}
    assert week[3] == {"date": "2026-10-14", "xp": 25}
    assert week[-1] == {"date": "2026-10-17", "xp": 50}


def test_class_roster_and_orphans():
    ann, bob, cy = Student(id="s1", name="Ann"), Student(id="s2", name="Bob"), Student(id="s3", name="Cy")
    state = AppState(
        students=[ann, bob, cy],
        classes=[ClassGroup(id="c1", title="A", year_id="y1", student_ids=["s2", "s1", "gone"])],
    )
    assert get_class_roster(state, "c1") == [bob, ann]
    assert get_class_roster(state, "missing") == []
    assert get_orphaned_students(state) == [cy]


def test_badge_board():
    board = get_badge_board(UserStats(earned_badges=["scholar"]))
    assert [entry["badge"].id for entry in board] == [b.id for b in BADGES]
    earned = {entry["badge"].id: entry["earned"] for entry in board}
    assert earned["scholar"] is True
    assert earned["novice"] is False
