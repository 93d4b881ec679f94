"""Paginated workflow engine.

This package holds the engine-side concepts:
- Navigation signals emitted by pages
- The page contract (definitions, props, views)
- Namespaced, monotonic progress persistence
- The engine state machine itself

Page content and routing live outside, in `pages_workflow.page_sets` and
`pages_workflow.host`.
"""

from pages_workflow.workflow.engine import (
    WorkflowConfiguration,
    WorkflowEngine,
    WorkflowPhase,
    WorkflowSnapshot,
)
from pages_workflow.workflow.errors import (
    InvalidWorkflowError,
    UnknownSignalError,
    WorkflowStateError,
)
from pages_workflow.workflow.events import WorkflowSignal
from pages_workflow.workflow.navigation import Navigator, RecordingNavigator
from pages_workflow.workflow.pages import PageView, WorkflowPageDefinition, WorkflowPageProps
from pages_workflow.workflow.progress import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorage,
    ProgressStore,
)

__all__ = [
    "InMemoryStorage",
    "InvalidWorkflowError",
    "JsonFileStorage",
    "KeyValueStorage",
    "Navigator",
    "PageView",
    "ProgressStore",
    "RecordingNavigator",
    "UnknownSignalError",
    "WorkflowConfiguration",
    "WorkflowEngine",
    "WorkflowPageDefinition",
    "WorkflowPageProps",
    "WorkflowPhase",
    "WorkflowSignal",
    "WorkflowSnapshot",
    "WorkflowStateError",
]
