"""Save and restore the whole application state as a single JSON blob."""
import json
import logging
import sqlite3
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Optional

from quest_hub.config import (
    DAILY_CHALLENGE_KEY, DEFAULT_DB_PATH, MIN_VIABLE_YEARS, STORAGE_KEY, STORAGE_KEY_PREFIX,
)
from quest_hub.db import delete_value, get_value, init_db, list_keys, set_value
from quest_hub.models import AppState, now_iso
from quest_hub.seed import get_standard_curriculum

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("quests", "years", "classes", "students", "stats")
LIST_KEYS = ("quests", "years", "classes", "students")


class LoadStatus(Enum):
    UNINITIALIZED = "uninitialized"
    RESTORED = "restored"
    SEEDED = "seeded"


def serialize(state: AppState) -> str:
    return json.dumps(state.to_dict())


def deserialize(blob: str) -> Optional[AppState]:
    """Parse a stored blob, or return None if it is unusable.

    A blob with no quests or fewer than ``MIN_VIABLE_YEARS`` years is
    treated as corrupt: reseeding beats running on a partial curriculum.
    """
    try:
        data = json.loads(blob)
    except (TypeError, ValueError):
        logger.warning("Stored state is not valid JSON")
        return None
    if not isinstance(data, dict) or any(key not in data for key in REQUIRED_KEYS):
        logger.warning("Stored state is missing required keys")
        return None
    if not all(isinstance(data[key], list) for key in LIST_KEYS) or not isinstance(data["stats"], dict):
        logger.warning("Stored state has collections of the wrong shape")
        return None
    if not data["quests"] or len(data["years"]) < MIN_VIABLE_YEARS:
        logger.warning(
            "Stored state below minimum size (%d quests, %d years)",
            len(data["quests"]), len(data["years"]),
        )
        return None
    try:
        return AppState.from_dict(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.warning("Stored state has malformed records: %s", e)
        return None


def export_backup(state: AppState, path: str) -> Path:
    """Write a human-readable JSON backup that ``deserialize`` can read back."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(state.to_dict(), indent=2))
    return target


class StateRepository:
    """Reads and writes the state blob in the local SQLite key/value table."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH, storage_key: str = STORAGE_KEY):
        self.db_path = db_path
        self.storage_key = storage_key
        self.status = LoadStatus.UNINITIALIZED
        init_db(db_path)

    def _drop_stale_versions(self) -> None:
        for key in list_keys(self.db_path, STORAGE_KEY_PREFIX):
            if key != self.storage_key:
                logger.info("Discarding state saved under old key %s", key)
                delete_value(self.db_path, key)

    def load(self) -> tuple[AppState, LoadStatus]:
        self._drop_stale_versions()
        blob = get_value(self.db_path, self.storage_key)
        state = deserialize(blob) if blob is not None else None
        if state is not None:
            self.status = LoadStatus.RESTORED
            return state, self.status
        if blob is not None:
            logger.warning("Falling back to the standard curriculum")
        state = get_standard_curriculum()
        self.status = LoadStatus.SEEDED
        return state, self.status

    def save(self, state: AppState) -> bool:
        """Persist ``state``. Failures are logged; in-memory state stays authoritative."""
        try:
            set_value(self.db_path, self.storage_key, serialize(state), now_iso())
        except sqlite3.Error as e:
            logger.error("Could not save state: %s", e)
            return False
        return True

    def reset(self) -> AppState:
        state = get_standard_curriculum()
        try:
            delete_value(self.db_path, DAILY_CHALLENGE_KEY)
        except sqlite3.Error as e:
            logger.error("Could not clear daily challenge date: %s", e)
        self.save(state)
        self.status = LoadStatus.SEEDED
        return state

    def get_last_challenge_date(self) -> Optional[str]:
        try:
            return get_value(self.db_path, DAILY_CHALLENGE_KEY)
        except sqlite3.Error as e:
            logger.error("Could not read daily challenge date: %s", e)
            return None

    def set_last_challenge_date(self, day: Optional[date] = None) -> None:
        try:
            set_value(self.db_path, DAILY_CHALLENGE_KEY, (day or date.today()).isoformat(), now_iso())
        except sqlite3.Error as e:
            logger.error("Could not record daily challenge date: %s", e)
