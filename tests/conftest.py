import json
import random
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from quest_hub.seed import get_standard_curriculum


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_quest_hub.db")
    return db_path


@pytest.fixture
def seed_state():
    """A standard curriculum built with a fixed RNG."""
    return get_standard_curriculum(random.Random(0))


@pytest.fixture
def fake_model():
    """Factory for a stand-in Gemini model answering each call with the next payload.

    Dicts are returned as JSON text; exceptions are raised.
    """
    def make(*payloads):
        responses = []
        for p in payloads:
            if isinstance(p, Exception):
                responses.append(p)
            else:
                responses.append(SimpleNamespace(text=json.dumps(p) if isinstance(p, dict) else p))
        return SimpleNamespace(generate_content_async=AsyncMock(side_effect=responses))
    return make
