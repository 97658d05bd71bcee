# tests/conftest.py
from typing import Any, Dict

import pytest

from prompt_library.database.session import Database
from prompt_library.services.prompt_store import PromptStore

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


def make_prompt(**overrides: Any) -> Dict[str, Any]:
    """Minimal valid prompt payload; overrides use snake_case field names."""
    data: Dict[str, Any] = {
        "title": "Summarizer",
        "description": "Summarizes long documents",
        "content": "Summarize the following text in three sentences.",
        "tags": ["summary", "writing"],
    }
    data.update(overrides)
    return data


def make_update(**overrides: Any) -> Dict[str, Any]:
    """Complete update payload; every mutable field must be present."""
    data = make_prompt(is_active=True, history_id=None, rating=0, rating_count=0, is_favorite=False)
    data.update(overrides)
    return data


# --- Database Fixtures ---

@pytest.fixture
async def database():
    """An open in-memory database with no schema."""
    db = Database(MEMORY_URL)
    await db.open()
    yield db
    await db.close()


@pytest.fixture
async def store():
    """An opened, empty in-memory store."""
    prompt_store = PromptStore(Database(MEMORY_URL))
    await prompt_store.open()
    yield prompt_store
    await prompt_store.close()


@pytest.fixture
async def seeded_store(store):
    """An in-memory store holding the built-in starter data."""
    await store.seed_if_empty()
    return store


@pytest.fixture
def db_file(tmp_path):
    """Path for a file-backed database inside a per-test temporary directory."""
    return tmp_path / "data" / "prompts.db"
