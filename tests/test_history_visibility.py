# tests/test_history_visibility.py
#
# Upload history, the source-level active switch and the two listing policies.

import asyncio
from types import SimpleNamespace

import pytest

from prompt_library.core.exceptions import DuplicateRecordException, HistoryNotFoundException
from prompt_library.models.domain import HistoryStatus, VisibilityMode
from prompt_library.services.visibility import effective_active, filter_visible, is_visible
from conftest import make_prompt


def _management_ids(prompts):
    return {p.id for p in filter_visible(prompts, VisibilityMode.MANAGEMENT)}


def _dashboard_ids(prompts):
    return {p.id for p in filter_visible(prompts, VisibilityMode.DASHBOARD)}


# --- effective_active / is_visible ---

def test_effective_active_truth_table():
    active_source = SimpleNamespace(id="h", is_active=True)
    inactive_source = SimpleNamespace(id="h", is_active=False)

    assert effective_active(SimpleNamespace(is_active=True, history_id=None)) is True
    assert effective_active(SimpleNamespace(is_active=False, history_id=None)) is False
    assert effective_active(SimpleNamespace(is_active=True, history_id="h"), active_source) is True
    assert effective_active(SimpleNamespace(is_active=True, history_id="h"), inactive_source) is False
    assert effective_active(SimpleNamespace(is_active=False, history_id="h"), active_source) is False


def test_effective_active_with_missing_source_is_inactive():
    prompt = SimpleNamespace(is_active=True, history_id="gone")

    assert effective_active(prompt) is False
    assert effective_active(prompt, SimpleNamespace(id="other", is_active=True)) is False


def test_is_visible_rejects_unknown_mode():
    prompt = SimpleNamespace(is_active=True, history_is_active=True)

    with pytest.raises(ValueError):
        is_visible(prompt, "sidebar")


# --- Upload history CRUD ---

async def test_create_history_defaults(store):
    entries = await store.create_history({"file_name": "batch.csv"})

    assert len(entries) == 1
    entry = entries[0]
    assert len(entry.id) == 32
    assert entry.status == HistoryStatus.SUCCESS
    assert entry.is_active is True
    assert entry.prompt_count == 0
    assert entry.error_message is None
    assert entry.upload_date.endswith("Z")


async def test_create_history_records_errors(store):
    entries = await store.create_history(
        {"id": "bad", "fileName": "broken.txt", "status": "error", "errorMessage": "unparseable line 3"}
    )

    assert entries[0].status == HistoryStatus.ERROR
    assert entries[0].error_message == "unparseable line 3"


async def test_history_listed_newest_first(store):
    await store.create_history({"id": "a", "file_name": "a.txt", "upload_date": "2024-01-01T00:00:00.000Z"})
    await store.create_history({"id": "c", "file_name": "c.txt", "upload_date": "2024-03-01T00:00:00.000Z"})
    entries = await store.create_history(
        {"id": "b", "file_name": "b.txt", "upload_date": "2024-02-01T00:00:00.000Z"}
    )

    assert [e.id for e in entries] == ["c", "b", "a"]


async def test_create_history_duplicate_id_conflicts(seeded_store):
    with pytest.raises(DuplicateRecordException):
        await seeded_store.create_history({"id": "1", "file_name": "again.txt"})


async def test_toggle_missing_history(seeded_store):
    with pytest.raises(HistoryNotFoundException):
        await seeded_store.toggle_history_active("nope")


# --- Source switch drives management visibility ---

async def test_deactivating_source_hides_its_prompts_in_management(store):
    await store.create_history({"id": "H", "file_name": "batch.txt"})
    await store.create_prompt(make_prompt(id="a", history_id="H"))
    prompts = await store.create_prompt(make_prompt(id="b", history_id="H"))

    assert _management_ids(prompts) == {"a", "b"}

    entries = await store.toggle_history_active("H")
    assert entries[0].is_active is False

    prompts = await store.list_prompts()
    assert _management_ids(prompts) == set()
    assert _dashboard_ids(prompts) == {"a", "b"}
    assert all(p.is_active for p in prompts)
    assert all(p.history_is_active is False for p in prompts)

    await store.toggle_history_active("H")
    assert _management_ids(await store.list_prompts()) == {"a", "b"}


async def test_source_switch_with_mixed_prompt_flags(store):
    await store.create_history({"id": "H", "file_name": "mixed.txt"})
    for prompt_id, active in (("p1", True), ("p2", False), ("p3", True)):
        await store.create_prompt(make_prompt(id=prompt_id, history_id="H", is_active=active))
    own_flags = {p.id: p.is_active for p in await store.list_prompts()}

    assert len(await store.list_visible_prompts(VisibilityMode.MANAGEMENT)) == 2

    await store.toggle_history_active("H")
    assert await store.list_visible_prompts(VisibilityMode.MANAGEMENT) == []
    assert {p.id: p.is_active for p in await store.list_prompts()} == own_flags

    await store.toggle_history_active("H")
    assert len(await store.list_visible_prompts(VisibilityMode.MANAGEMENT)) == 2


async def test_list_visible_prompts_modes(store):
    await store.create_history({"id": "H", "file_name": "batch.txt", "is_active": False})
    await store.create_prompt(make_prompt(id="own-off", is_active=False))
    await store.create_prompt(make_prompt(id="source-off", history_id="H"))
    await store.create_prompt(make_prompt(id="plain"))

    dashboard = await store.list_visible_prompts(VisibilityMode.DASHBOARD)
    management = await store.list_visible_prompts("management")

    assert {p.id for p in dashboard} == {"source-off", "plain"}
    assert {p.id for p in management} == {"plain"}


async def test_dangling_history_id_counts_as_inactive_source(store):
    await store.create_prompt(make_prompt(id="orphan", history_id="never-uploaded"))

    prompt = await store.get_prompt("orphan")
    assert prompt.history_id == "never-uploaded"
    assert prompt.history_is_active is False
    assert _management_ids([prompt]) == set()
    assert _dashboard_ids([prompt]) == {"orphan"}


async def test_seed_visibility(seeded_store):
    prompts = await seeded_store.list_prompts()

    assert _dashboard_ids(prompts) == {"1", "2"}
    assert _management_ids(prompts) == {"1", "2"}


async def test_concurrent_history_toggles_compose(seeded_store):
    await asyncio.gather(
        seeded_store.toggle_history_active("3"),
        seeded_store.toggle_history_active("3"),
    )

    entries = await seeded_store.list_history()
    assert next(e for e in entries if e.id == "3").is_active is False
