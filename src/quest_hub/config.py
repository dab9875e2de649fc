"""Application constants: storage keys, level table, badge catalog."""
import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from quest_hub.models import Badge, BadgeCriteria

# A .env in the working directory fills in anything the environment leaves unset.
load_dotenv(find_dotenv(usecwd=True))

DEFAULT_DB_PATH = os.getenv("QUEST_HUB_DB", str(Path.home() / ".quest_hub" / "quest_hub.db"))

# Bumping the version suffix invalidates every previously stored blob.
STORAGE_KEY_PREFIX = "learning_quest_hub_data_"
STORAGE_KEY = STORAGE_KEY_PREFIX + "v18"
DAILY_CHALLENGE_KEY = "daily_challenge_date"

MIN_VIABLE_YEARS = 5

EMAIL_DOMAIN = "school.edu"

LEVELS = [0, 100, 300, 600, 1000, 1500, 2100, 2800, 3600, 4500, 5500]

LEVEL_LABELS = {
    1: "Curious Learner",
    2: "Eager Student",
    3: "Knowledge Seeker",
    4: "Rising Scholar",
    5: "Dedicated Pupil",
    6: "Subject Explorer",
    7: "Academic Achiever",
    8: "Honor Student",
    9: "Distinguished Scholar",
    10: "Master Mind",
    11: "Legend",
}

BADGES = [
    Badge("novice", "Novice Learner", "Complete your first Unit", BadgeCriteria("quests_completed", 1)),
    Badge("scholar", "Dedicated Scholar", "Earn 500 XP", BadgeCriteria("xp", 500)),
    Badge("streak_3", "Consistency Is Key", "Reach a 3-day learning streak", BadgeCriteria("streak", 3)),
    Badge("expert", "Knowledge Master", "Earn 1500 XP", BadgeCriteria("xp", 1500)),
    Badge("veteran", "Quest Veteran", "Complete 5 Units", BadgeCriteria("quests_completed", 5)),
    Badge("legend", "Legendary", "Reach Level 11 (5500 XP)", BadgeCriteria("xp", 5500)),
]

CATEGORIES = [
    "Technology", "Science", "Arts", "Language", "Health",
    "Business", "Personal Development", "Math", "History",
]

DAILY_QUEST_TITLE = "Daily Challenges"

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
