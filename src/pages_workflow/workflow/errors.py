from __future__ import annotations


class InvalidWorkflowError(ValueError):
    """The workflow configuration cannot be run (no pages, duplicate ids, missing store)."""


class WorkflowStateError(RuntimeError):
    """An engine operation was called in a phase that does not allow it."""


class UnknownSignalError(ValueError):
    """A signal outside the closed next/back protocol."""
