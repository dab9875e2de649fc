"""State transitions over classes, rosters and quests.

Every function here returns new collections and leaves its inputs
untouched. Operations that name an id which does not exist are no-ops:
they hand back the inputs unchanged rather than raising, since ids come
from the UI and are assumed valid.
"""
import re
from dataclasses import replace

from quest_hub.config import DAILY_QUEST_TITLE, EMAIL_DOMAIN
from quest_hub.models import ClassGroup, Quest, Student, Task, build_quest, new_id, now_iso


def add_class(classes: list[ClassGroup], title: str, year_id: str) -> list[ClassGroup]:
    # Duplicate titles are allowed.
    return [*classes, ClassGroup(id=new_id(), title=title, year_id=year_id, student_ids=[])]


def delete_class(classes: list[ClassGroup], class_id: str) -> list[ClassGroup]:
    """Remove a class. Its students are left in place, unassigned."""
    if not any(c.id == class_id for c in classes):
        return classes
    return [c for c in classes if c.id != class_id]


def derive_email(name: str) -> str:
    local = re.sub(r"\s+", ".", name.strip().lower())
    return f"{local}@{EMAIL_DOMAIN}"


def _new_student(name: str) -> Student:
    name = name.strip()
    return Student(
        id=new_id(),
        name=name,
        email=derive_email(name),
        xp=0,
        level=1,
        streak=0,
        completed_tasks=0,
        last_active=now_iso(),
        status="active",
    )


def _append_to_roster(classes: list[ClassGroup], class_id: str, student_ids: list[str]) -> list[ClassGroup]:
    updated = []
    for c in classes:
        if c.id == class_id:
            roster = list(c.student_ids)
            roster.extend(sid for sid in student_ids if sid not in roster)
            c = replace(c, student_ids=roster)
        updated.append(c)
    return updated


def enroll_students_bulk(
    students: list[Student],
    classes: list[ClassGroup],
    names: list[str],
    class_id: str,
) -> tuple[list[Student], list[ClassGroup]]:
    """Enroll each non-blank name into ``class_id``. Blank names are skipped."""
    if not any(c.id == class_id for c in classes):
        return students, classes
    new_students = [_new_student(n) for n in names if n and n.strip()]
    if not new_students:
        return students, classes
    return (
        [*students, *new_students],
        _append_to_roster(classes, class_id, [s.id for s in new_students]),
    )


def enroll_student(
    students: list[Student],
    classes: list[ClassGroup],
    name: str,
    class_id: str,
) -> tuple[list[Student], list[ClassGroup]]:
    return enroll_students_bulk(students, classes, [name], class_id)


def remove_student(
    students: list[Student],
    classes: list[ClassGroup],
    student_id: str,
    class_id: str,
) -> tuple[list[Student], list[ClassGroup]]:
    """Delete a student and drop its id from every roster.

    ``class_id`` names the roster the removal was issued from; the id is
    scrubbed from all classes so no roster can point at a deleted record.
    """
    if not any(s.id == student_id for s in students):
        return students, classes
    remaining = [s for s in students if s.id != student_id]
    rosters = [
        replace(c, student_ids=[sid for sid in c.student_ids if sid != student_id])
        if student_id in c.student_ids else c
        for c in classes
    ]
    return remaining, rosters


def upsert_quest(quests: list[Quest], quest: Quest) -> list[Quest]:
    """Replace the quest with the same id, or prepend it (newest first)."""
    if any(q.id == quest.id for q in quests):
        return [quest if q.id == quest.id else q for q in quests]
    return [quest, *quests]


def delete_quest(quests: list[Quest], quest_id: str) -> list[Quest]:
    if not any(q.id == quest_id for q in quests):
        return quests
    return [q for q in quests if q.id != quest_id]


def _quest_status(quest: Quest, tasks: list[Task]) -> str:
    if quest.status == "archived":
        return quest.status
    return "completed" if tasks and all(t.is_completed for t in tasks) else "active"


def toggle_task_completion(quest: Quest, task_id: str) -> tuple[Quest, int]:
    """Flip a task's completion and return the quest with the XP delta applied."""
    task = next((t for t in quest.tasks if t.id == task_id), None)
    if task is None:
        return quest, 0
    completing = not task.is_completed
    delta = task.xp if completing else -task.xp
    tasks = [replace(t, is_completed=completing) if t.id == task_id else t for t in quest.tasks]
    return replace(
        quest,
        tasks=tasks,
        earned_xp=quest.earned_xp + delta,
        status=_quest_status(quest, tasks),
    ), delta


def _with_tasks(quest: Quest, tasks: list[Task]) -> Quest:
    return replace(
        quest,
        tasks=tasks,
        total_xp=sum(t.xp for t in tasks),
        earned_xp=sum(t.xp for t in tasks if t.is_completed),
        status=_quest_status(quest, tasks),
    )


def add_task(quest: Quest, task: Task) -> Quest:
    return _with_tasks(quest, [*quest.tasks, task])


def update_task(quest: Quest, task: Task) -> Quest:
    """Swap in an edited task (e.g. with generated content attached)."""
    if not any(t.id == task.id for t in quest.tasks):
        return quest
    return _with_tasks(quest, [task if t.id == task.id else t for t in quest.tasks])


def accept_daily_challenge(quests: list[Quest], task: Task) -> tuple[list[Quest], str]:
    """File a daily challenge under the shared daily quest, creating it if needed.

    Returns the new quest list and the id of the daily quest.
    """
    daily = next((q for q in quests if q.title == DAILY_QUEST_TITLE), None)
    if daily is None:
        daily = build_quest(
            DAILY_QUEST_TITLE,
            [task],
            description="Quick tasks to keep your streak alive!",
            category="General",
            difficulty="Beginner",
        )
        return [daily, *quests], daily.id
    updated = _with_tasks(daily, [task, *daily.tasks])
    return upsert_quest(quests, updated), daily.id
