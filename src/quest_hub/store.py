"""Application state container.

``AppStore`` owns the current ``AppState`` snapshot. Each method applies
one pure transition from ``quest_hub.mutations``, refreshes the derived
progression fields, swaps in the new snapshot and writes it through the
repository.

Generated content arrives asynchronously. Requests are tagged with the
id and fingerprint of the entity they target, and a result is merged
only if that entity still exists unchanged.
"""
import hashlib
import json
import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

from quest_hub import mutations
from quest_hub.delegate import ContentDelegate
from quest_hub.models import AppState, Badge, Quest, Task
from quest_hub.persistence import LoadStatus, StateRepository
from quest_hub.progression import apply_xp_delta, refresh_stats

logger = logging.getLogger(__name__)


def fingerprint(quest: Quest) -> str:
    raw = json.dumps(quest.to_dict(), sort_keys=True)
    return hashlib.sha256(raw.encode()).hexdigest()


@dataclass(frozen=True)
class ContentRequest:
    target_id: str
    fingerprint: Optional[str] = None


class AppStore:
    def __init__(self, repository: StateRepository, state: AppState = None):
        self.repository = repository
        if state is None:
            state, status = repository.load()
        else:
            status = LoadStatus.RESTORED
        self.status = status
        self.state = state
        self.last_unlocked: list[Badge] = []

    @classmethod
    def open(cls, db_path: str) -> "AppStore":
        return cls(StateRepository(db_path))

    def _commit(self, state: AppState, today: date = None) -> list[Badge]:
        stats, unlocked = refresh_stats(state.stats, state.quests, today=today)
        self.state = replace(state, stats=stats)
        self.last_unlocked = unlocked
        self.repository.save(self.state)
        for badge in unlocked:
            logger.info("Badge unlocked: %s", badge.id)
        return unlocked

    # -- classes and rosters

    def add_class(self, title: str, year_id: str) -> str:
        classes = mutations.add_class(self.state.classes, title, year_id)
        self._commit(replace(self.state, classes=classes))
        return classes[-1].id

    def delete_class(self, class_id: str) -> None:
        self._commit(replace(self.state, classes=mutations.delete_class(self.state.classes, class_id)))

    def enroll_student(self, name: str, class_id: str) -> None:
        students, classes = mutations.enroll_student(self.state.students, self.state.classes, name, class_id)
        self._commit(replace(self.state, students=students, classes=classes))

    def enroll_students_bulk(self, names: list[str], class_id: str) -> int:
        before = len(self.state.students)
        students, classes = mutations.enroll_students_bulk(
            self.state.students, self.state.classes, names, class_id,
        )
        self._commit(replace(self.state, students=students, classes=classes))
        return len(students) - before

    def remove_student(self, student_id: str, class_id: str) -> None:
        students, classes = mutations.remove_student(
            self.state.students, self.state.classes, student_id, class_id,
        )
        self._commit(replace(self.state, students=students, classes=classes))

    # -- quests

    def upsert_quest(self, quest: Quest) -> None:
        self._commit(replace(self.state, quests=mutations.upsert_quest(self.state.quests, quest)))

    def delete_quest(self, quest_id: str) -> None:
        self._commit(replace(self.state, quests=mutations.delete_quest(self.state.quests, quest_id)))

    def _settle(self, original: Quest, updated: Quest, today: date = None) -> list[Badge]:
        """Store an edited quest and move global XP by the change in its earned XP."""
        stats = self.state.stats
        delta = updated.earned_xp - original.earned_xp
        if delta:
            stats = apply_xp_delta(stats, delta, today=today)
        state = replace(self.state, quests=mutations.upsert_quest(self.state.quests, updated), stats=stats)
        return self._commit(state, today=today)

    def update_task(self, quest_id: str, task: Task, today: date = None) -> None:
        quest = self.state.find_quest(quest_id)
        if quest is None:
            return
        updated = mutations.update_task(quest, task)
        if updated is not quest:
            self._settle(quest, updated, today)

    def toggle_task(self, quest_id: str, task_id: str, today: date = None) -> list[Badge]:
        """Toggle a task and settle its XP globally. Returns newly unlocked badges."""
        quest = self.state.find_quest(quest_id)
        if quest is None:
            return []
        updated, _ = mutations.toggle_task_completion(quest, task_id)
        if updated is quest:
            return []
        return self._settle(quest, updated, today)

    def reset(self) -> None:
        self.state = self.repository.reset()
        self.status = LoadStatus.SEEDED
        self.last_unlocked = []

    # -- generated content

    def begin_request(self, target_id: str) -> ContentRequest:
        quest = self.state.find_quest(target_id)
        return ContentRequest(target_id=target_id, fingerprint=fingerprint(quest) if quest else None)

    def is_current(self, request: ContentRequest) -> bool:
        quest = self.state.find_quest(request.target_id)
        if quest is None:
            return False
        return request.fingerprint is None or fingerprint(quest) == request.fingerprint

    def merge_generated_task(self, request: ContentRequest, task: Task) -> bool:
        """Attach or replace ``task`` on the request's quest, unless it went stale."""
        if not self.is_current(request):
            logger.info("Discarding generated content for changed quest %s", request.target_id)
            return False
        quest = self.state.find_quest(request.target_id)
        if any(t.id == task.id for t in quest.tasks):
            updated = mutations.update_task(quest, task)
        else:
            updated = mutations.add_task(quest, task)
        self._settle(quest, updated)
        return True

    async def create_quest(
        self,
        delegate: ContentDelegate,
        topic: str,
        difficulty: str,
        notes: Optional[str] = None,
        year_id: Optional[str] = None,
    ) -> Quest:
        quest = await delegate.generate_quest(topic, difficulty, notes)
        if year_id:
            quest = replace(quest, year_id=year_id)
        self.upsert_quest(quest)
        return quest

    async def add_generated_task(
        self, delegate: ContentDelegate, quest_id: str, title: str, task_type: str,
    ) -> Optional[Task]:
        quest = self.state.find_quest(quest_id)
        if quest is None:
            return None
        request = self.begin_request(quest_id)
        task = await delegate.generate_single_task(title, task_type, quest.title)
        return task if self.merge_generated_task(request, task) else None

    async def generate_task_content(
        self, delegate: ContentDelegate, quest_id: str, task_id: str, kind: Optional[str] = None,
    ) -> Optional[Task]:
        quest = self.state.find_quest(quest_id)
        task = next((t for t in quest.tasks if t.id == task_id), None) if quest else None
        if task is None:
            return None
        request = self.begin_request(quest_id)
        filled = await delegate.fill_task_content(task, kind)
        return filled if self.merge_generated_task(request, filled) else None

    async def offer_daily_challenge(self, delegate: ContentDelegate, today: date = None) -> Optional[Task]:
        """Generate today's challenge, or None if one was already accepted today."""
        today = today or date.today()
        if self.repository.get_last_challenge_date() == today.isoformat():
            return None
        return await delegate.generate_daily_challenge([q.title for q in self.state.quests])

    def accept_daily_challenge(self, task: Task, today: date = None) -> str:
        quests, daily_id = mutations.accept_daily_challenge(self.state.quests, task)
        self._commit(replace(self.state, quests=quests), today=today)
        self.repository.set_last_challenge_date(today)
        return daily_id
