# tests/test_seed.py

import pytest

from prompt_library.core.exceptions import SeedDataException
from prompt_library.database.seed import SEED_HISTORY, SEED_PROMPTS
from prompt_library.repositories import upload_history_db_repository
from conftest import make_prompt


async def test_empty_store_is_seeded_once(store):
    assert await store.seed_if_empty() == len(SEED_PROMPTS)
    assert await store.seed_if_empty() == 0

    prompts = await store.list_prompts()
    history = await store.list_history()
    assert len(prompts) == 3
    assert len(history) == 3


async def test_seed_contents(seeded_store):
    prompts = await seeded_store.list_prompts()

    # Newest first
    assert [p.id for p in prompts] == ["3", "2", "1"]
    by_id = {p.id: p for p in prompts}
    assert by_id["1"].title == "Creative Writing Assistant"
    assert by_id["1"].tags == ["writing", "creative", "story"]
    assert by_id["2"].tags == ["coding", "review", "programming"]
    assert by_id["3"].is_active is False
    for prompt in prompts:
        assert prompt.history_id is None
        assert prompt.rating == 0
        assert prompt.rating_count == 0
        assert prompt.is_favorite is False
        assert prompt.last_modified == prompt.created

    history = await seeded_store.list_history()
    assert [h.file_name for h in history] == [
        "study_prompts.txt", "coding_prompts.txt", "writing_prompts.txt"
    ]
    assert {h.id: h.is_active for h in history} == {"1": True, "2": True, "3": False}
    assert all(h.prompt_count == 1 for h in history)
    assert len(SEED_HISTORY) == 3


async def test_seed_skipped_when_prompts_exist(store):
    await store.create_prompt(make_prompt())

    assert await store.seed_if_empty() == 0
    assert len(await store.list_prompts()) == 1
    assert await store.list_history() == []


async def test_failed_seed_keeps_nothing(store, monkeypatch):
    async def failing_create(session, **fields):
        raise RuntimeError("history insert failed")

    monkeypatch.setattr(upload_history_db_repository, "create", failing_create)

    with pytest.raises(SeedDataException, match="history insert failed"):
        await store.seed_if_empty()

    monkeypatch.undo()
    assert await store.list_prompts() == []
    assert await store.list_history() == []
