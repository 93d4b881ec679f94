"""Durable resume points for workflows.

Each workflow keeps a single record: the highest step index ever reached,
stored as decimal text under ``"workflow_progress_" + workflow_id``.

The read path is fail-safe (anything unreadable is "no progress"); the write
path is not, so a lost save is always visible to the caller.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from pages_workflow.config import WorkflowSettings

logger = logging.getLogger(__name__)

WORKFLOW_PROGRESS_PREFIX = "workflow_progress_"


class KeyValueStorage(Protocol):
    """String key/value storage backend."""

    async def get_item(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""

    async def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    async def remove_item(self, key: str) -> None:
        """Delete a key. Missing keys are not an error."""

    async def keys(self) -> list[str]:
        """Return every stored key."""


class InMemoryStorage(KeyValueStorage):
    """Keep records in local memory.

    Useful for tests and for runs that must not touch disk. Nothing survives
    the process.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    async def keys(self) -> list[str]:
        return list(self._items)


@dataclass
class JsonFileStorage(KeyValueStorage):
    """Persist all records in a single JSON object file.

    The file is created on first write. Blocking file IO runs in a worker
    thread; the lock serializes read-modify-write cycles across threads.
    """

    path: Path
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def _load_unlocked(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt storage file", extra={"path": str(self.path)})
            return {}
        if not isinstance(raw, dict):
            return {}
        return {k: v for k, v in raw.items() if isinstance(k, str) and isinstance(v, str)}

    def _save_unlocked(self, items: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(items, indent=2, ensure_ascii=False, sort_keys=True) + "\n",
            encoding="utf-8",
        )

    def _get(self, key: str) -> str | None:
        with self._lock:
            return self._load_unlocked().get(key)

    def _set(self, key: str, value: str) -> None:
        with self._lock:
            items = self._load_unlocked()
            items[key] = value
            self._save_unlocked(items)

    def _remove(self, key: str) -> None:
        with self._lock:
            items = self._load_unlocked()
            if items.pop(key, None) is not None:
                self._save_unlocked(items)

    def _keys(self) -> list[str]:
        with self._lock:
            return list(self._load_unlocked())

    async def get_item(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get, key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)

    async def keys(self) -> list[str]:
        return await asyncio.to_thread(self._keys)


def _parse_progress(raw: str | None) -> int:
    if raw is None:
        return 0
    text = raw.strip()
    if not text.isdecimal():
        return 0
    try:
        return int(text)
    except ValueError:
        # Past the interpreter's int digit limit.
        return 0


class ProgressStore:
    """Namespaced furthest-step records on top of a :class:`KeyValueStorage`.

    Stored values only ever grow: saves merge with ``max(current, candidate)``.
    There is no locking; a workflow instance issues its saves one at a time.
    """

    def __init__(self, storage: KeyValueStorage, prefix: str = WORKFLOW_PROGRESS_PREFIX) -> None:
        self.storage = storage
        self.prefix = prefix

    def key_for(self, workflow_id: str) -> str:
        return f"{self.prefix}{workflow_id}"

    async def get_progress(self, workflow_id: str) -> int:
        """Return the furthest reached step index, or 0.

        Absent, malformed and unreadable records all read as 0.
        """
        try:
            raw = await self.storage.get_item(self.key_for(workflow_id))
        except Exception as e:
            logger.warning(
                f"Failed to read workflow progress: {e}", extra={"workflow_id": workflow_id}
            )
            return 0
        return _parse_progress(raw)

    async def save_progress(self, workflow_id: str, candidate_index: int) -> None:
        """Raise the stored progress to ``candidate_index`` if it is further.

        Storage errors propagate, including on the read half of the merge, so
        a failed read can never lower a stored value.
        """
        if candidate_index < 0:
            raise ValueError(f"Progress index must be non-negative, got {candidate_index}")
        key = self.key_for(workflow_id)
        current = _parse_progress(await self.storage.get_item(key))
        merged = max(current, candidate_index)
        await self.storage.set_item(key, str(merged))
        logger.debug(
            "Workflow progress saved",
            extra={"workflow_id": workflow_id, "progress": merged, "candidate": candidate_index},
        )

    async def clear_progress(self, workflow_id: str) -> None:
        await self.storage.remove_item(self.key_for(workflow_id))
        logger.info("Workflow progress cleared", extra={"workflow_id": workflow_id})

    async def list_progress(self) -> dict[str, int]:
        out: dict[str, int] = {}
        for key in sorted(await self.storage.keys()):
            if not key.startswith(self.prefix):
                continue
            workflow_id = key[len(self.prefix) :]
            out[workflow_id] = await self.get_progress(workflow_id)
        return out


def create_storage(settings: WorkflowSettings) -> KeyValueStorage:
    if settings.storage_backend == "memory":
        return InMemoryStorage()
    return JsonFileStorage(settings.workflow_state_file)


def create_progress_store(settings: WorkflowSettings) -> ProgressStore:
    return ProgressStore(create_storage(settings), prefix=settings.key_prefix)
