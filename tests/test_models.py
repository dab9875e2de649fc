"""Tests for data model classes."""
from quest_hub.models import (
    XP_BY_TYPE, AppState, ClassGroup, DailyProgress, Quest, QuizQuestion, Student, Task, UserStats, Year,
    build_quest, new_task,
)


def test_year_default_description():
    y = Year(id="y1", title="Grade 3")
    assert y.description == ""


def test_student_defaults():
    s = Student(id="s1", name="Jane Doe")
    assert s.xp == 0
    assert s.level == 1
    assert s.streak == 0
    assert s.completed_tasks == 0
    assert s.status == "active"
    assert s.email is None


def test_task_defaults():
    t = Task(id="t1", title="Arrays", description="", xp=50)
    assert t.type == "Lesson"
    assert t.is_completed is False
    assert t.resources == []
    assert t.quiz_content is None
    assert t.markdown_content is None


def test_new_task_uses_type_xp():
    assert new_task("Build a bridge", "Project").xp == XP_BY_TYPE["Project"] == 150
    assert new_task("Quick check", "Quiz").xp == 10
    assert new_task("Custom", "Game", xp=7).xp == 7


def test_new_task_default_description():
    t = new_task("Arrays")
    assert t.description == "Master the concepts of Arrays."


def test_build_quest_computes_xp_caches():
    tasks = [
        Task(id="a", title="A", description="", xp=50, is_completed=True),
        Task(id="b", title="B", description="", xp=100),
    ]
    q = build_quest("Unit 1", tasks, year_id="y1")
    assert q.total_xp == 150
    assert q.earned_xp == 50
    assert q.status == "active"
    assert q.year_id == "y1"
    assert q.created_at


def test_build_quest_all_done_is_completed():
    q = build_quest("Unit", [Task(id="a", title="A", description="", xp=10, is_completed=True)])
    assert q.status == "completed"


def test_empty_quest_is_active():
    assert build_quest("Empty", []).status == "active"


def test_task_from_dict_restores_generated_content():
    t = Task(
        id="t1", title="Quiz", description="", xp=25, type="Practice",
        quiz_content=[QuizQuestion(id="q1", question="2+2?", options=["3", "4"], correct_index=1)],
    )
    restored = Task.from_dict(t.to_dict())
    assert restored == t
    assert isinstance(restored.quiz_content[0], QuizQuestion)


def test_user_stats_from_dict():
    stats = UserStats(current_xp=120, level=2, next_level_xp=300,
                      daily_history=[DailyProgress(date="2026-10-17", xp_earned=120)])
    assert UserStats.from_dict(stats.to_dict()) == stats


def test_app_state_lookups():
    quest = build_quest("Unit", [])
    group = ClassGroup(id="c1", title="Class", year_id="y1")
    state = AppState(quests=[quest], classes=[group])
    assert state.find_quest(quest.id) is quest
    assert state.find_quest("missing") is None
    assert state.find_class("c1") is group
    assert isinstance(state.quests[0], Quest)
