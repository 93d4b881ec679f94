"""The paginated workflow engine.

A workflow is an ordered, linear list of pages. The engine owns the current
step, runs each step's optional initializer on entry, hands the active page a
single `emit` function and turns emitted signals into transitions:

    start -> [enter step -> initialize -> ready -> emit] -> ... -> exit

Moving past the last page, or back from the first one, hands control to an
exit target through the :class:`Navigator`. Forward transitions are persisted
through the injected :class:`ProgressStore` before they become visible, so a
restart can never resume behind what the user already saw.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import assert_never

from .errors import InvalidWorkflowError, WorkflowStateError
from .events import WorkflowSignal
from .navigation import Navigator
from .pages import WorkflowPageDefinition, WorkflowPageProps
from .progress import ProgressStore

logger = logging.getLogger(__name__)

AdvanceHook = Callable[[int, int], Awaitable[None] | None]
ExitHook = Callable[[], Awaitable[None] | None]
SnapshotListener = Callable[["WorkflowSnapshot"], None]


class WorkflowPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EXITED = "exited"
    CLOSED = "closed"


_ACTIVE_PHASES = frozenset({WorkflowPhase.LOADING, WorkflowPhase.READY})


@dataclass(frozen=True, slots=True)
class WorkflowConfiguration:
    """Per-invocation options of one workflow run."""

    workflow_id: str
    pages: Sequence[WorkflowPageDefinition]
    exit_target: str
    first_page_back_target: str | None = None
    persistence_enabled: bool = True

    def __post_init__(self) -> None:
        pages = tuple(self.pages)
        if not pages:
            raise InvalidWorkflowError(f"Workflow {self.workflow_id!r} has no pages")
        seen: set[str] = set()
        for page in pages:
            if page.id in seen:
                raise InvalidWorkflowError(
                    f"Duplicate page id {page.id!r} in workflow {self.workflow_id!r}"
                )
            seen.add(page.id)
        object.__setattr__(self, "pages", pages)


@dataclass(frozen=True, slots=True)
class WorkflowSnapshot:
    workflow_id: str
    phase: WorkflowPhase
    current_index: int
    total_pages: int
    page_id: str | None
    is_initializing: bool
    exit_target: str | None = None

    def to_json(self) -> dict[str, object]:
        return {
            "workflow_id": self.workflow_id,
            "phase": self.phase.value,
            "current_index": self.current_index,
            "total_pages": self.total_pages,
            "page_id": self.page_id,
            "is_initializing": self.is_initializing,
            "exit_target": self.exit_target,
        }


async def _maybe_await(value: Awaitable[None] | None) -> None:
    if inspect.isawaitable(value):
        await value


class WorkflowEngine:
    """Run one workflow instance.

    All transitions are serialized through a single lock. Every step entry
    gets a fresh entry id; initializer results and page emits are tagged with
    the entry they belong to and dropped once that entry is no longer current.
    """

    def __init__(
        self,
        config: WorkflowConfiguration,
        *,
        navigator: Navigator,
        progress_store: ProgressStore | None = None,
        on_advance: AdvanceHook | None = None,
        on_exit: ExitHook | None = None,
    ) -> None:
        if config.persistence_enabled and progress_store is None:
            raise InvalidWorkflowError(
                f"Workflow {config.workflow_id!r} enables persistence but has no progress store"
            )
        self.config = config
        self._navigator = navigator
        self._progress_store = progress_store
        self._on_advance = on_advance
        self._on_exit = on_exit

        self._phase = WorkflowPhase.IDLE
        self._index = 0
        self._entry_id = 0
        self._is_initializing = False
        self._exit_target: str | None = None
        self._init_task: asyncio.Task[None] | None = None
        self._lock = asyncio.Lock()
        self._listeners: list[SnapshotListener] = []

    # ------------------------------------------------------------------
    # State accessors
    @property
    def phase(self) -> WorkflowPhase:
        return self._phase

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def is_initializing(self) -> bool:
        return self._is_initializing

    @property
    def total_pages(self) -> int:
        return len(self.config.pages)

    @property
    def current_page(self) -> WorkflowPageDefinition:
        return self.config.pages[self._index]

    @property
    def exit_target(self) -> str | None:
        return self._exit_target

    def snapshot(self) -> WorkflowSnapshot:
        return WorkflowSnapshot(
            workflow_id=self.config.workflow_id,
            phase=self._phase,
            current_index=self._index,
            total_pages=self.total_pages,
            page_id=self.current_page.id if self._phase in _ACTIVE_PHASES else None,
            is_initializing=self._is_initializing,
            exit_target=self._exit_target,
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Call `listener` with a fresh snapshot after every state change."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Lifecycle
    async def start(self) -> WorkflowSnapshot:
        """Resolve the starting step and enter it."""

        async with self._lock:
            if self._phase is not WorkflowPhase.IDLE:
                raise WorkflowStateError(
                    f"Workflow {self.config.workflow_id!r} already started ({self._phase.value})"
                )
            index = await self._resolve_initial_index()
            logger.info(
                "Workflow started",
                extra={"workflow_id": self.config.workflow_id, "step": index},
            )
            self._enter_step(index)
        return self.snapshot()

    async def wait_until_ready(self) -> None:
        """Wait for the current step's initializer, if one is outstanding."""

        while self._init_task is not None and not self._init_task.done():
            await asyncio.wait({self._init_task})

    async def close(self) -> None:
        """Tear the engine down without navigating anywhere."""

        async with self._lock:
            if self._phase in (WorkflowPhase.EXITED, WorkflowPhase.CLOSED):
                return
            task = self._abandon_step()
            self._phase = WorkflowPhase.CLOSED
            if task is not None:
                await asyncio.wait({task})
            self._notify()

    def render(self) -> object:
        if self._phase not in _ACTIVE_PHASES:
            raise WorkflowStateError(
                f"Workflow {self.config.workflow_id!r} has nothing to render ({self._phase.value})"
            )
        props = WorkflowPageProps(
            emit=partial(self._dispatch, entry_id=self._entry_id),
            is_initializing=self._is_initializing,
        )
        return self.current_page.render(props)

    # ------------------------------------------------------------------
    # Transitions
    async def emit(self, signal: WorkflowSignal | str) -> None:
        """Apply a navigation signal to the current step."""

        await self._dispatch(signal, entry_id=self._entry_id)

    async def exit(self, target: str | None = None) -> None:
        """Abandon the workflow from any step."""

        async with self._lock:
            if self._phase not in _ACTIVE_PHASES:
                logger.debug(
                    "Ignoring exit of inactive workflow",
                    extra={"workflow_id": self.config.workflow_id, "phase": self._phase.value},
                )
                return
            await self._exit(target or self.config.exit_target)

    async def _dispatch(self, signal: WorkflowSignal | str, entry_id: int) -> None:
        signal = WorkflowSignal.parse(signal)
        if self._phase is WorkflowPhase.IDLE:
            raise WorkflowStateError(f"Workflow {self.config.workflow_id!r} is not started")
        if not self._accepts(signal, entry_id):
            return

        async with self._lock:
            # Re-check: a transition may have committed while we waited.
            if not self._accepts(signal, entry_id):
                return
            if signal is WorkflowSignal.NEXT:
                await self._go_next()
            elif signal is WorkflowSignal.BACK:
                await self._go_back()
            else:
                assert_never(signal)

    def _accepts(self, signal: WorkflowSignal, entry_id: int) -> bool:
        reason: str | None = None
        if self._phase not in _ACTIVE_PHASES:
            reason = f"workflow is {self._phase.value}"
        elif entry_id != self._entry_id:
            reason = "step entry is no longer current"
        elif self._is_initializing and signal is WorkflowSignal.NEXT:
            reason = "step is initializing"
        if reason is None:
            return True
        logger.debug(
            f"Ignoring {signal.value!r} signal: {reason}",
            extra={"workflow_id": self.config.workflow_id, "step": self._index},
        )
        return False

    async def _go_next(self) -> None:
        from_index = self._index
        if from_index >= self.total_pages - 1:
            await self._notify_advance(from_index, self.total_pages)
            await self._exit(self.config.exit_target)
            return

        to_index = from_index + 1
        if self.config.persistence_enabled:
            assert self._progress_store is not None
            await self._progress_store.save_progress(self.config.workflow_id, to_index)
        await self._notify_advance(from_index, to_index)

        logger.info(
            "Workflow advanced",
            extra={
                "workflow_id": self.config.workflow_id,
                "from_index": from_index,
                "to_index": to_index,
            },
        )
        self._enter_step(to_index)

    async def _go_back(self) -> None:
        if self._index == 0:
            await self._exit(self.config.first_page_back_target or self.config.exit_target)
            return

        from_index = self._index
        logger.info(
            "Workflow moved back",
            extra={
                "workflow_id": self.config.workflow_id,
                "from_index": from_index,
                "to_index": from_index - 1,
            },
        )
        self._enter_step(from_index - 1)

    async def _notify_advance(self, from_index: int, to_index: int) -> None:
        if self._on_advance is not None:
            await _maybe_await(self._on_advance(from_index, to_index))

    async def _exit(self, target: str) -> None:
        if self._on_exit is not None:
            await _maybe_await(self._on_exit())
        self._abandon_step()
        self._phase = WorkflowPhase.EXITED
        self._exit_target = target
        logger.info(
            "Workflow exited",
            extra={"workflow_id": self.config.workflow_id, "step": self._index, "target": target},
        )
        self._navigator.replace(target)
        self._notify()

    # ------------------------------------------------------------------
    # Step entry
    async def _resolve_initial_index(self) -> int:
        if not self.config.persistence_enabled:
            return 0
        assert self._progress_store is not None
        stored = await self._progress_store.get_progress(self.config.workflow_id)
        index = max(0, min(stored, self.total_pages - 1))
        if index != stored:
            logger.info(
                "Clamped resumed progress to the page set",
                extra={"workflow_id": self.config.workflow_id, "stored": stored, "step": index},
            )
        return index

    def _enter_step(self, index: int) -> None:
        self._abandon_step()
        self._index = index
        page = self.current_page

        if page.initialize is None:
            self._is_initializing = False
            self._phase = WorkflowPhase.READY
        else:
            self._is_initializing = True
            self._phase = WorkflowPhase.LOADING
            self._init_task = asyncio.create_task(
                self._run_initializer(self._entry_id, page),
                name=f"workflow-init-{self.config.workflow_id}-{page.id}",
            )
        self._notify()

    def _abandon_step(self) -> asyncio.Task[None] | None:
        """Invalidate the current step entry and cancel its initializer."""

        self._entry_id += 1
        self._is_initializing = False
        task, self._init_task = self._init_task, None
        if task is not None and not task.done():
            task.cancel()
            return task
        return None

    async def _run_initializer(self, entry_id: int, page: WorkflowPageDefinition) -> None:
        assert page.initialize is not None
        try:
            await _maybe_await(page.initialize())
        except Exception:
            # The step still becomes ready; the page decides whether to retry.
            logger.exception(
                "Page initializer failed",
                extra={"workflow_id": self.config.workflow_id, "page_id": page.id},
            )

        if entry_id != self._entry_id:
            logger.debug(
                "Discarding result of abandoned initializer",
                extra={"workflow_id": self.config.workflow_id, "page_id": page.id},
            )
            return
        self._is_initializing = False
        self._phase = WorkflowPhase.READY
        self._notify()

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception(
                    "Workflow listener failed", extra={"workflow_id": self.config.workflow_id}
                )
