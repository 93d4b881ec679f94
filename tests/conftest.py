"""Test configuration and fixtures."""

from pathlib import Path

import pytest

from pages_workflow.config import WorkflowSettings
from pages_workflow.workflow.navigation import RecordingNavigator
from pages_workflow.workflow.progress import InMemoryStorage, ProgressStore


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> WorkflowSettings:
    """Provide settings that never touch the working directory."""
    monkeypatch.chdir(tmp_path)
    return WorkflowSettings(
        storage_backend="memory",
        workflow_state_path=tmp_path / "workflow_state" / "progress.json",
        demo_init_delay_seconds=0.0,
    )


@pytest.fixture
def storage() -> InMemoryStorage:
    """Provide empty in-memory key/value storage."""
    return InMemoryStorage()


@pytest.fixture
def progress_store(storage: InMemoryStorage) -> ProgressStore:
    """Provide a progress store over the in-memory storage."""
    return ProgressStore(storage)


@pytest.fixture
def navigator() -> RecordingNavigator:
    """Provide a navigator that records exit destinations."""
    return RecordingNavigator()
