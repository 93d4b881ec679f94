from __future__ import annotations

from enum import Enum

from .errors import UnknownSignalError


class WorkflowSignal(str, Enum):
    """A navigation request emitted by a page.

    Pages never move the workflow themselves; they emit one of these and the
    engine decides the transition.
    """

    NEXT = "next"
    BACK = "back"

    @classmethod
    def parse(cls, value: WorkflowSignal | str) -> WorkflowSignal:
        if isinstance(value, WorkflowSignal):
            return value
        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError):
            raise UnknownSignalError(f"Unknown workflow signal: {value!r}") from None
