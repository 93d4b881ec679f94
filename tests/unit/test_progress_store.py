"""Unit tests for durable workflow progress."""

from __future__ import annotations

from pathlib import Path

import pytest

from pages_workflow.config import WorkflowSettings
from pages_workflow.workflow.progress import (
    InMemoryStorage,
    JsonFileStorage,
    ProgressStore,
    create_storage,
)


class _BrokenStorage(InMemoryStorage):
    async def get_item(self, key: str) -> str | None:
        raise OSError("storage offline")

    async def set_item(self, key: str, value: str) -> None:
        raise OSError("storage offline")


@pytest.mark.asyncio
async def test_progress_defaults_to_zero(progress_store: ProgressStore) -> None:
    assert await progress_store.get_progress("demo") == 0
    assert await progress_store.get_progress("seller-onboarding") == 0


@pytest.mark.asyncio
async def test_save_keeps_the_furthest_step(
    progress_store: ProgressStore, storage: InMemoryStorage
) -> None:
    await progress_store.save_progress("demo", 3)
    await progress_store.save_progress("demo", 1)
    assert await progress_store.get_progress("demo") == 3

    await progress_store.save_progress("demo", 5)
    assert await progress_store.get_progress("demo") == 5
    assert await storage.get_item("workflow_progress_demo") == "5"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    ["", "abc", "-2", "1.5", "3abc", pytest.param("9" * 5000, id="too-many-digits")],
)
async def test_malformed_records_read_as_zero(raw: str) -> None:
    store = ProgressStore(InMemoryStorage({"workflow_progress_demo": raw}))
    assert await store.get_progress("demo") == 0


@pytest.mark.asyncio
async def test_save_overwrites_malformed_record() -> None:
    storage = InMemoryStorage({"workflow_progress_demo": "garbage"})
    store = ProgressStore(storage)

    await store.save_progress("demo", 2)
    assert await storage.get_item("workflow_progress_demo") == "2"


@pytest.mark.asyncio
async def test_negative_candidate_is_rejected(progress_store: ProgressStore) -> None:
    with pytest.raises(ValueError):
        await progress_store.save_progress("demo", -1)


@pytest.mark.asyncio
async def test_read_failures_are_masked_but_write_failures_are_not() -> None:
    store = ProgressStore(_BrokenStorage())

    assert await store.get_progress("demo") == 0
    with pytest.raises(OSError):
        await store.save_progress("demo", 1)


@pytest.mark.asyncio
async def test_list_and_clear_only_touch_prefixed_records() -> None:
    storage = InMemoryStorage({"theme": "dark"})
    store = ProgressStore(storage)
    await store.save_progress("demo", 2)
    await store.save_progress("seller-onboarding", 1)

    assert await store.list_progress() == {"demo": 2, "seller-onboarding": 1}

    await store.clear_progress("demo")
    assert await store.get_progress("demo") == 0
    assert await store.list_progress() == {"seller-onboarding": 1}
    assert await storage.get_item("theme") == "dark"


@pytest.mark.asyncio
async def test_json_file_storage_survives_restart(tmp_path: Path) -> None:
    path = tmp_path / "workflow_state" / "progress.json"
    await ProgressStore(JsonFileStorage(path)).save_progress("demo", 2)

    reopened = ProgressStore(JsonFileStorage(path))
    assert await reopened.get_progress("demo") == 2
    assert path.exists()


@pytest.mark.asyncio
async def test_json_file_storage_treats_corrupt_file_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "progress.json"
    path.write_text("{not json", encoding="utf-8")
    store = ProgressStore(JsonFileStorage(path))

    assert await store.get_progress("demo") == 0
    await store.save_progress("demo", 1)
    assert await store.get_progress("demo") == 1


@pytest.mark.asyncio
async def test_json_file_storage_remove_missing_key_is_noop(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "progress.json")
    await storage.remove_item("workflow_progress_demo")

    assert await storage.keys() == []
    assert not (tmp_path / "progress.json").exists()


def test_create_storage_follows_backend_setting(settings: WorkflowSettings) -> None:
    assert isinstance(create_storage(settings), InMemoryStorage)

    file_settings = settings.model_copy(update={"storage_backend": "file"})
    storage = create_storage(file_settings)
    assert isinstance(storage, JsonFileStorage)
    assert storage.path == settings.workflow_state_file
