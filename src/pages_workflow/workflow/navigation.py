from __future__ import annotations

from typing import Protocol


class Navigator(Protocol):
    """Hands control to a destination outside the workflow."""

    def replace(self, target: str) -> None: ...


class RecordingNavigator(Navigator):
    """Navigator that only remembers where it was sent."""

    def __init__(self) -> None:
        self.history: list[str] = []

    def replace(self, target: str) -> None:
        self.history.append(target)

    @property
    def current(self) -> str | None:
        return self.history[-1] if self.history else None
