"""Build the standard curriculum and demo rosters used when no saved state exists."""
import json
import random
import re
from pathlib import Path

from quest_hub.config import EMAIL_DOMAIN, LEVELS
from quest_hub.models import (
    XP_BY_TYPE, AppState, ClassGroup, Quest, Student, Task, UserStats, Year,
    build_quest, new_id, new_task, now_iso,
)

CONTENT_DIR = Path(__file__).parent / "content"


def load_curriculum_data() -> dict:
    return json.loads((CONTENT_DIR / "curriculum.json").read_text())


def build_lesson(entry) -> Task:
    """Turn a curriculum entry (a title, or a dict with title/type) into a task."""
    if isinstance(entry, str):
        return new_task(entry, "Lesson")
    task_type = entry.get("type", "Lesson")
    return new_task(entry["title"], task_type, xp=XP_BY_TYPE.get(task_type, 10))


def scaffold_tasks(tasks: list[Task]) -> list[Task]:
    """Mix activity types across a unit made only of plain lesson titles.

    Every fifth lesson becomes a mini-project, every third an activity.
    """
    scaffolded = []
    for index, task in enumerate(tasks):
        if index % 5 == 4:
            task = Task(id=task.id, title=f"{task.title} (Mini-Project)", description=task.description,
                        xp=150, type="Project")
        elif index % 3 == 2:
            task = Task(id=task.id, title=f"{task.title} (Activity)", description=task.description,
                        xp=100, type="Game")
        else:
            task = Task(id=task.id, title=task.title, description=task.description, xp=50, type="Lesson")
        scaffolded.append(task)
    return scaffolded


def build_unit(year_id: str, title: str, lessons: list, category: str = "Math") -> Quest:
    tasks = [build_lesson(entry) for entry in lessons]
    # Units given only as titles get the mixed-activity layout.
    if lessons and isinstance(lessons[0], str):
        tasks = scaffold_tasks(tasks)
    return build_quest(
        title,
        tasks,
        description=f"Comprehensive module covering {title}.",
        category=category,
        difficulty="Intermediate",
        year_id=year_id,
    )


def _demo_students(label: str, rng: random.Random, count: int = 2) -> list[Student]:
    slug = re.sub(r"\s", "", label).lower()
    return [
        Student(
            id=new_id(),
            name=f"Student {i + 1} ({label})",
            email=f"student{i}_{slug}@{EMAIL_DOMAIN}",
            xp=rng.randrange(2000),
            level=rng.randint(1, 3),
            streak=rng.randrange(5),
            completed_tasks=rng.randrange(10),
            last_active=now_iso(),
            status="active",
        )
        for i in range(count)
    ]


def initial_stats() -> UserStats:
    return UserStats(
        level=1,
        current_xp=0,
        next_level_xp=LEVELS[1],
        total_quests_completed=0,
        streak_days=0,
        earned_badges=[],
        daily_history=[],
    )


def get_standard_curriculum(rng: random.Random = None) -> AppState:
    """Return a fresh seed state: every year and unit, plus demo classes."""
    rng = rng or random.Random()
    data = load_curriculum_data()
    years, quests = [], []
    year_ids = {}
    for year in data["years"]:
        year_id = new_id()
        year_ids[year["title"]] = year_id
        years.append(Year(id=year_id, title=year["title"], description=year.get("description", "")))
        for unit in year["units"]:
            quests.append(build_unit(year_id, unit["title"], unit["lessons"], unit.get("category", "Math")))

    classes, students = [], []
    for demo in data.get("demo_classes", []):
        year_id = year_ids.get(demo["year"])
        if year_id is None:
            continue
        roster = _demo_students(demo["label"], rng)
        students.extend(roster)
        classes.append(ClassGroup(
            id=new_id(),
            title=f"{demo['label']} - Section A",
            year_id=year_id,
            student_ids=[s.id for s in roster],
        ))

    return AppState(quests=quests, years=years, classes=classes, students=students, stats=initial_stats())
