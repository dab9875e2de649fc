"""Data classes for the curriculum, roster and progression model."""
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional

CONTENT_TYPES = ("Lesson", "Practice", "Project", "Game", "Quiz")
DIFFICULTIES = ("Beginner", "Intermediate", "Advanced")
STUDENT_STATUSES = ("active", "idle", "at-risk")
QUEST_STATUSES = ("active", "completed", "archived")
SLIDE_LAYOUTS = ("center", "split", "big-number")

XP_BY_TYPE = {
    "Project": 150,
    "Game": 100,
    "Lesson": 50,
    "Practice": 25,
    "Quiz": 10,
}


def new_id() -> str:
    return uuid.uuid4().hex


def now_iso() -> str:
    return datetime.now().isoformat()


@dataclass
class Year:
    id: str
    title: str
    description: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Year":
        return cls(id=data["id"], title=data["title"], description=data.get("description") or "")


@dataclass
class ClassGroup:
    id: str
    title: str
    year_id: str
    student_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ClassGroup":
        return cls(
            id=data["id"],
            title=data["title"],
            year_id=data["year_id"],
            student_ids=list(data.get("student_ids", [])),
        )


_STUDENT_FIELDS = ("id", "name", "email", "xp", "level", "streak", "completed_tasks", "last_active", "status")


@dataclass
class Student:
    id: str
    name: str
    email: Optional[str] = None
    xp: int = 0
    level: int = 1
    streak: int = 0
    completed_tasks: int = 0
    last_active: str = ""
    status: str = "active"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Student":
        return cls(**{k: data[k] for k in _STUDENT_FIELDS if k in data})


@dataclass
class QuizQuestion:
    id: str
    question: str
    options: list[str]
    correct_index: int
    explanation: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "QuizQuestion":
        return cls(
            id=data.get("id") or new_id(),
            question=data["question"],
            options=list(data["options"]),
            correct_index=int(data["correct_index"]),
            explanation=data.get("explanation", ""),
        )


@dataclass
class Flashcard:
    id: str
    front: str
    back: str

    @classmethod
    def from_dict(cls, data: dict) -> "Flashcard":
        return cls(id=data.get("id") or new_id(), front=data["front"], back=data["back"])


@dataclass
class Slide:
    id: str
    title: str
    content: list[str] = field(default_factory=list)  # bullet points
    visual_keyword: str = ""
    layout: str = "center"

    @classmethod
    def from_dict(cls, data: dict) -> "Slide":
        return cls(
            id=data.get("id") or new_id(),
            title=data["title"],
            content=list(data.get("content", [])),
            visual_keyword=data.get("visual_keyword", ""),
            layout=data.get("layout", "center"),
        )


@dataclass
class Task:
    id: str
    title: str
    description: str
    xp: int
    type: str = "Lesson"
    is_completed: bool = False
    resources: list[str] = field(default_factory=list)
    markdown_content: Optional[str] = None
    html_content: Optional[str] = None
    quiz_content: Optional[list[QuizQuestion]] = None
    flashcards: Optional[list[Flashcard]] = None
    slides: Optional[list[Slide]] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        def _items(key, item_cls):
            raw = data.get(key)
            return None if raw is None else [item_cls.from_dict(item) for item in raw]

        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description", ""),
            xp=int(data["xp"]),
            type=data.get("type", "Lesson"),
            is_completed=bool(data.get("is_completed", False)),
            resources=list(data.get("resources") or []),
            markdown_content=data.get("markdown_content"),
            html_content=data.get("html_content"),
            quiz_content=_items("quiz_content", QuizQuestion),
            flashcards=_items("flashcards", Flashcard),
            slides=_items("slides", Slide),
        )


@dataclass
class Quest:
    """A curriculum unit. ``total_xp`` and ``earned_xp`` are caches over ``tasks``."""
    id: str
    title: str
    description: str
    category: str
    difficulty: str
    total_xp: int
    earned_xp: int
    tasks: list[Task] = field(default_factory=list)
    created_at: str = ""
    status: str = "active"
    year_id: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Quest":
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description", ""),
            category=data.get("category", "General"),
            difficulty=data.get("difficulty", "Beginner"),
            total_xp=int(data["total_xp"]),
            earned_xp=int(data["earned_xp"]),
            tasks=[Task.from_dict(t) for t in data.get("tasks", [])],
            created_at=data.get("created_at", ""),
            status=data.get("status", "active"),
            year_id=data.get("year_id"),
        )


def build_quest(
    title: str,
    tasks: list[Task],
    description: str = "",
    category: str = "General",
    difficulty: str = "Beginner",
    year_id: Optional[str] = None,
    quest_id: Optional[str] = None,
) -> Quest:
    """Create a quest with its XP caches computed from ``tasks``."""
    return Quest(
        id=quest_id or new_id(),
        title=title,
        description=description,
        category=category,
        difficulty=difficulty,
        total_xp=sum(t.xp for t in tasks),
        earned_xp=sum(t.xp for t in tasks if t.is_completed),
        tasks=list(tasks),
        created_at=now_iso(),
        status="completed" if tasks and all(t.is_completed for t in tasks) else "active",
        year_id=year_id,
    )


def new_task(title: str, type: str = "Lesson", description: str = "", xp: Optional[int] = None) -> Task:
    return Task(
        id=new_id(),
        title=title,
        description=description or f"Master the concepts of {title}.",
        xp=XP_BY_TYPE.get(type, 10) if xp is None else xp,
        type=type,
    )


@dataclass
class DailyProgress:
    date: str  # YYYY-MM-DD
    xp_earned: int


@dataclass(frozen=True)
class BadgeCriteria:
    type: str  # xp | quests_completed | streak
    threshold: int


@dataclass(frozen=True)
class Badge:
    id: str
    title: str
    description: str
    criteria: BadgeCriteria


@dataclass
class UserStats:
    level: int = 1
    current_xp: int = 0
    next_level_xp: int = 100
    total_quests_completed: int = 0
    streak_days: int = 0
    earned_badges: list[str] = field(default_factory=list)
    daily_history: list[DailyProgress] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "UserStats":
        return cls(
            level=int(data.get("level", 1)),
            current_xp=int(data.get("current_xp", 0)),
            next_level_xp=int(data.get("next_level_xp", 100)),
            total_quests_completed=int(data.get("total_quests_completed", 0)),
            streak_days=int(data.get("streak_days", 0)),
            earned_badges=list(data.get("earned_badges", [])),
            daily_history=[
                DailyProgress(date=h["date"], xp_earned=int(h["xp_earned"]))
                for h in data.get("daily_history", [])
            ],
        )


@dataclass
class AppState:
    quests: list[Quest] = field(default_factory=list)
    years: list[Year] = field(default_factory=list)
    classes: list[ClassGroup] = field(default_factory=list)
    students: list[Student] = field(default_factory=list)
    stats: UserStats = field(default_factory=UserStats)

    def to_dict(self) -> dict:
        return {
            "quests": [q.to_dict() for q in self.quests],
            "stats": self.stats.to_dict(),
            "years": [y.to_dict() for y in self.years],
            "classes": [c.to_dict() for c in self.classes],
            "students": [s.to_dict() for s in self.students],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppState":
        return cls(
            quests=[Quest.from_dict(q) for q in data["quests"]],
            years=[Year.from_dict(y) for y in data["years"]],
            classes=[ClassGroup.from_dict(c) for c in data["classes"]],
            students=[Student.from_dict(s) for s in data["students"]],
            stats=UserStats.from_dict(data["stats"]),
        )

    def find_quest(self, quest_id: str) -> Optional[Quest]:
        return next((q for q in self.quests if q.id == quest_id), None)

    def find_class(self, class_id: str) -> Optional[ClassGroup]:
        return next((c for c in self.classes if c.id == class_id), None)
