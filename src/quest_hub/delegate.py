"""Generative content for units, tasks, quizzes, slides and simulations.

All calls go through Gemini. Any failure (no API key, network error,
unparseable response) is logged and answered with clearly marked demo
content, so callers always get something they can show.
"""
import json
import logging
import random
import re
from dataclasses import dataclass, replace
from typing import Optional

import google.generativeai as genai

from quest_hub import config
from quest_hub.models import (
    CONTENT_TYPES, DIFFICULTIES, Flashcard, Quest, QuizQuestion, Slide, Task,
    build_quest, new_id, new_task,
)

logger = logging.getLogger(__name__)

OFFLINE_SUFFIX = "(Offline/Demo)"

MOCK_QUEST_DATA = {
    "description": "Explore the basics of AI, machine learning, and how neural networks "
                   "mimic the human brain. (Offline/Demo Mode)",
    "category": "Technology",
    "tasks": [
        {"title": "What is AI?", "description": "Learn the definition and history of AI.", "xp": 50, "type": "Lesson"},
        {"title": "Neural Networks Interactive", "description": "Visualize a simple neural network.", "xp": 100, "type": "Game"},
        {"title": "Ethics in AI", "description": "Discuss the moral implications.", "xp": 150, "type": "Project"},
        {"title": "Quiz: AI Basics", "description": "Test your knowledge.", "xp": 25, "type": "Practice"},
    ],
}

MOCK_LESSON_CONTENT = """
# Interactive Lesson: The Topic You Requested (Offline)

**Note:** We couldn't connect to the AI Tutor right now (check your API key), but here is a primer on the subject!

## 1. Core Concepts
*   **Definition:** Understanding the fundamental building blocks.
*   **Significance:** Why this matters in the real world.
*   **Application:** How professionals use this knowledge.

## 2. Summary
Mastering this topic opens doors to advanced fields. Keep practicing!
"""

MOCK_QUIZ = [
    {"question": "What is the primary goal of this topic?",
     "options": ["To confuse you", "To solve problems", "To waste time", "None of the above"],
     "correct_index": 1, "explanation": "Solving problems is the core purpose."},
    {"question": "Which is a key component?", "options": ["Magic", "Logic", "Luck", "Chaos"],
     "correct_index": 1, "explanation": "Logic is essential."},
    {"question": "How do you apply this?", "options": ["Randomly", "Systematically", "Never", "Once"],
     "correct_index": 1, "explanation": "Systematic application yields results."},
]

MOCK_FLASHCARDS = [
    {"front": "Key Term 1", "back": "Definition of the first key term."},
    {"front": "Important Date", "back": "The year this concept was discovered."},
    {"front": "Main Formula", "back": "A + B = C"},
    {"front": "Key Figure", "back": "The person who invented this."},
    {"front": "Application", "back": "A real world example."},
]

SIMULATION_UNAVAILABLE = (
    '<!DOCTYPE html><html><body style="color:white; font-family:sans-serif; text-align:center; '
    'padding:2rem;"><h1>Simulation Unavailable</h1><p>We couldn\'t generate the simulation at this '
    "time.</p></body></html>"
)

QUEST_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "category": {"type": "string"},
        "difficulty": {"type": "string", "enum": list(DIFFICULTIES)},
        "tasks": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "xp": {"type": "integer"},
                    "type": {"type": "string", "enum": ["Lesson", "Practice", "Project", "Game"]},
                    "resources": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["title", "description", "xp", "type"],
            },
        },
    },
    "required": ["title", "description", "category", "difficulty", "tasks"],
}

TASK_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "xp": {"type": "integer"},
    },
    "required": ["title", "description", "xp"],
}

QUIZ_SCHEMA = {
    "type": "object",
    "properties": {
        "questions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "question": {"type": "string"},
                    "options": {"type": "array", "items": {"type": "string"}},
                    "correct_index": {"type": "integer"},
                    "explanation": {"type": "string"},
                },
                "required": ["question", "options", "correct_index", "explanation"],
            },
        },
    },
    "required": ["questions"],
}

FLASHCARD_SCHEMA = {
    "type": "object",
    "properties": {
        "cards": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"front": {"type": "string"}, "back": {"type": "string"}},
                "required": ["front", "back"],
            },
        },
    },
    "required": ["cards"],
}

SLIDES_SCHEMA = {
    "type": "object",
    "properties": {
        "slides": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "content": {"type": "array", "items": {"type": "string"}},
                    "visual_keyword": {"type": "string"},
                    "layout": {"type": "string", "enum": ["center", "split", "big-number"]},
                },
                "required": ["title", "content", "visual_keyword", "layout"],
            },
        },
    },
    "required": ["slides"],
}

LESSON_PLAN_SCHEMA = {
    "type": "object",
    "properties": {
        "student_edition": {"type": "string"},
        "exit_tickets": {"type": "string"},
        "teacher_pack": {"type": "string"},
    },
    "required": ["student_edition", "exit_tickets", "teacher_pack"],
}


@dataclass
class LessonPlan:
    student_edition: str
    exit_tickets: str
    teacher_pack: str


# Which generated payload each task type gets when its content is first opened.
CONTENT_HANDLERS = {
    "Lesson": "markdown",
    "Practice": "quiz",
    "Quiz": "quiz",
    "Game": "simulation",
    "Project": "simulation",
}

CONTENT_KINDS = ("markdown", "quiz", "simulation", "slides", "flashcards")


def _strip_code_fences(text: str) -> str:
    return re.sub(r"```(?:html|json)?", "", text).strip()


class ContentDelegate:
    """Async client for every kind of generated learning content."""

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None, model=None):
        api_key = config.GEMINI_API_KEY if api_key is None else api_key
        model_name = model_name or config.GEMINI_MODEL
        self.model_name = model_name
        if model is not None:
            self.model = model
        elif api_key:
            genai.configure(api_key=api_key)
            self.model = genai.GenerativeModel(model_name)
        else:
            self.model = None

    @property
    def is_configured(self) -> bool:
        return self.model is not None

    async def _generate_text(self, prompt: str, system: str = "") -> str:
        if self.model is None:
            raise RuntimeError("No Gemini API key configured")
        contents = f"{system}\n\n{prompt}" if system else prompt
        response = await self.model.generate_content_async(contents)
        return response.text or ""

    async def _generate_json(self, prompt: str, schema: dict, system: str = "") -> dict:
        if self.model is None:
            raise RuntimeError("No Gemini API key configured")
        contents = f"{system}\n\n{prompt}" if system else prompt
        response = await self.model.generate_content_async(
            contents,
            generation_config={"response_mime_type": "application/json", "response_schema": schema},
        )
        return json.loads(_strip_code_fences(response.text or "{}"))

    async def generate_quest(self, topic: str, difficulty: str, notes: Optional[str] = None) -> Quest:
        prompt = (
            f'Create a structured learning unit (Quest) for the topic: "{topic}".\n'
            f"Difficulty Level: {difficulty}.\n"
            f"Additional Context: {notes or 'None'}.\n"
            "Break the topic down into 5-8 actionable learning items, mixing Lessons, "
            "Practice, Projects and Games. Give each task an XP reward suited to the effort."
        )
        try:
            data = await self._generate_json(
                prompt, QUEST_SCHEMA,
                system="You are an expert curriculum designer and gamification specialist.",
            )
            tasks = [
                Task(
                    id=new_id(),
                    title=t["title"],
                    description=t.get("description", ""),
                    xp=int(t.get("xp") or 0),
                    type=t.get("type") if t.get("type") in CONTENT_TYPES else "Lesson",
                    resources=list(t.get("resources") or []),
                )
                for t in data["tasks"]
            ]
            return build_quest(
                data["title"],
                tasks,
                description=data.get("description", ""),
                category=data.get("category", "General"),
                difficulty=data.get("difficulty", difficulty),
            )
        except Exception as e:
            logger.error("Quest generation failed for %r: %s", topic, e)
            return self.placeholder_quest(topic, difficulty)

    def placeholder_quest(self, topic: str, difficulty: str) -> Quest:
        tasks = [
            Task(id=new_id(), title=t["title"], description=t["description"], xp=t["xp"], type=t["type"])
            for t in MOCK_QUEST_DATA["tasks"]
        ]
        return build_quest(
            f"{topic} {OFFLINE_SUFFIX}",
            tasks,
            description=MOCK_QUEST_DATA["description"],
            category=MOCK_QUEST_DATA["category"],
            difficulty=difficulty if difficulty in DIFFICULTIES else "Beginner",
        )

    async def generate_single_task(self, title: str, task_type: str, context: str) -> Task:
        prompt = f'Generate a single {task_type} task metadata for the topic: "{title}". Context: "{context}".'
        try:
            data = await self._generate_json(prompt, TASK_SCHEMA)
            task = Task(
                id=new_id(),
                title=data.get("title") or title,
                description=data.get("description") or "Learn this concept.",
                xp=int(data.get("xp") or 50),
                type=task_type,
            )
        except Exception as e:
            logger.error("Task generation failed for %r: %s", title, e)
            return Task(
                id=new_id(), title=title, description=f"Generated {task_type} for {title}", xp=50, type=task_type,
            )
        kind = CONTENT_HANDLERS.get(task_type)
        if kind is not None:
            task = await self.fill_task_content(task, kind)
        return task

    async def generate_lesson_content(self, title: str, description: str) -> str:
        prompt = (
            f'Write a comprehensive, engaging educational lesson for the topic: "{title}".\n'
            f"Context: {description}.\n"
            "Format: Markdown. Structure: Introduction, Key Concepts, Deep Dive, "
            "Real-world Application, Summary. Keep it under 500 words."
        )
        try:
            text = await self._generate_text(
                prompt, system="You are a world-class teacher who explains complex topics simply and engagingly.",
            )
            return text or MOCK_LESSON_CONTENT
        except Exception as e:
            logger.error("Lesson content generation failed for %r: %s", title, e)
            return MOCK_LESSON_CONTENT

    async def generate_quiz(self, title: str) -> list[QuizQuestion]:
        prompt = f'Generate a 3-question multiple choice quiz to test knowledge about: "{title}".'
        try:
            data = await self._generate_json(prompt, QUIZ_SCHEMA)
            return [QuizQuestion.from_dict({**q, "id": new_id()}) for q in data["questions"]]
        except Exception as e:
            logger.error("Quiz generation failed for %r: %s", title, e)
            return [QuizQuestion.from_dict({**q, "id": new_id()}) for q in MOCK_QUIZ]

    async def generate_flashcards(self, title: str) -> list[Flashcard]:
        prompt = f'Generate 5 flashcards for active recall practice on the topic: "{title}".'
        try:
            data = await self._generate_json(prompt, FLASHCARD_SCHEMA)
            return [Flashcard.from_dict({**c, "id": new_id()}) for c in data["cards"]]
        except Exception as e:
            logger.error("Flashcard generation failed for %r: %s", title, e)
            return [Flashcard.from_dict({**c, "id": new_id()}) for c in MOCK_FLASHCARDS]

    async def generate_slides(self, title: str) -> list[Slide]:
        prompt = (
            f'Generate a visually engaging 5-7 slide presentation for: "{title}". '
            "Each slide needs a visual_keyword (a simple noun like 'sun' or 'atom'). "
            "Keep bullet points short."
        )
        try:
            data = await self._generate_json(
                prompt, SLIDES_SCHEMA,
                system="You are a visual communication expert who breaks topics into bite-sized cards.",
            )
            return [Slide.from_dict({**s, "id": new_id()}) for s in data["slides"]]
        except Exception as e:
            logger.error("Slide generation failed for %r: %s", title, e)
            return []

    async def generate_simulation(self, title: str, description: str) -> str:
        prompt = (
            f'Create a highly visual, interactive HTML5/Canvas simulation to demonstrate: "{title}".\n'
            f'Context: "{description}".\n'
            "Dark theme, vanilla JS only, fully self-contained. "
            "Return ONLY the raw HTML starting with <!DOCTYPE html>."
        )
        try:
            html = _strip_code_fences(await self._generate_text(prompt))
            return html or SIMULATION_UNAVAILABLE
        except Exception as e:
            logger.error("Simulation generation failed for %r: %s", title, e)
            return SIMULATION_UNAVAILABLE

    async def generate_daily_challenge(self, topics: list[str], rng: random.Random = None) -> Task:
        rng = rng or random.Random()
        topic = rng.choice(topics) if topics else "General Knowledge"
        prompt = f"Generate a quick, 5-minute daily challenge task for a student learning about: {topic}."
        try:
            data = await self._generate_json(prompt, TASK_SCHEMA)
            return Task(
                id=new_id(),
                title=f"Daily: {data['title']}",
                description=data.get("description", ""),
                xp=int(data.get("xp") or 50),
                type="Practice",
            )
        except Exception as e:
            logger.error("Daily challenge generation failed: %s", e)
            return new_task(
                "Daily: Quick Review", "Practice",
                description="Review your notes from the last lesson for 5 minutes.", xp=50,
            )

    async def generate_lesson_plan(self, grade: str, unit: str, week: str, topic: str) -> LessonPlan:
        prompt = (
            f'Generate three deliverables for Grade {grade} Math: Unit {unit}, Week {week}, Topic: "{topic}". '
            "1) a Student Edition with a narrative hook, learning targets, missions, practice and reflections; "
            "2) five daily Exit Tickets; "
            "3) a Teacher Pack with 5E scripts, misconceptions and differentiation."
        )
        try:
            data = await self._generate_json(
                prompt, LESSON_PLAN_SCHEMA, system="You are an expert K-12 curriculum architect.",
            )
            return LessonPlan(
                student_edition=data["student_edition"],
                exit_tickets=data["exit_tickets"],
                teacher_pack=data["teacher_pack"],
            )
        except Exception as e:
            logger.error("Lesson plan generation failed for %r: %s", topic, e)
            note = f"{OFFLINE_SUFFIX} Lesson plan for {topic} could not be generated."
            return LessonPlan(student_edition=note, exit_tickets=note, teacher_pack=note)

    async def fill_task_content(self, task: Task, kind: Optional[str] = None) -> Task:
        """Return ``task`` with one generated payload attached.

        ``kind`` defaults to the handler registered for the task's type.
        """
        kind = kind or CONTENT_HANDLERS.get(task.type, "markdown")
        if kind == "markdown":
            return replace(task, markdown_content=await self.generate_lesson_content(task.title, task.description))
        if kind == "quiz":
            return replace(task, quiz_content=await self.generate_quiz(task.title))
        if kind == "simulation":
            return replace(task, html_content=await self.generate_simulation(task.title, task.description))
        if kind == "slides":
            return replace(task, slides=await self.generate_slides(task.title))
        if kind == "flashcards":
            return replace(task, flashcards=await self.generate_flashcards(task.title))
        raise ValueError(f"Unknown content kind: {kind}")
