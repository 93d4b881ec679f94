"""Workflow entry point: routes, page set resolution and engine wiring."""

from pages_workflow.host.host import WorkflowHost
from pages_workflow.host.registry import PageSet, PageSetRegistry, default_registry
from pages_workflow.host.route import WorkflowRoute

__all__ = [
    "PageSet",
    "PageSetRegistry",
    "WorkflowHost",
    "WorkflowRoute",
    "default_registry",
]
