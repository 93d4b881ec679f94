"""FastAPI app factory.

Endpoints are thin wrappers over the host and engine: a session is one mounted
workflow, and events are the same next/back signals pages emit.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from pages_workflow import __version__
from pages_workflow.config import WorkflowSettings
from pages_workflow.host import WorkflowRoute, default_registry
from pages_workflow.server.config import ServerSettings
from pages_workflow.server.models import (
    ApiSnapshot,
    EventRequest,
    OpenSessionRequest,
    ProgressResponse,
    SessionResponse,
)
from pages_workflow.server.session_store import SessionStore, WorkflowSession
from pages_workflow.workflow.errors import UnknownSignalError
from pages_workflow.workflow.events import WorkflowSignal
from pages_workflow.workflow.pages import PageView
from pages_workflow.workflow.progress import ProgressStore, create_progress_store

logger = logging.getLogger(__name__)


def _to_response(session: WorkflowSession) -> SessionResponse:
    engine = session.engine
    snapshot = ApiSnapshot.model_validate(engine.snapshot().to_json())
    view: PageView | None = None
    if snapshot.page_id is not None:
        rendered = engine.render()
        if isinstance(rendered, PageView):
            view = rendered
    return SessionResponse(session_id=session.session_id, snapshot=snapshot, view=view)


def create_app(
    settings: WorkflowSettings | None = None,
    progress_store: ProgressStore | None = None,
) -> FastAPI:
    settings = settings or WorkflowSettings()
    server_settings = ServerSettings()
    progress_store = progress_store or create_progress_store(settings)
    registry = default_registry()
    sessions = SessionStore(
        settings,
        progress_store,
        max_sessions=server_settings.max_sessions,
        registry=registry,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        await sessions.close_all()

    app = FastAPI(
        title="Pages Workflow",
        version=__version__,
        description="REST API over resumable multi-step workflows.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    # Expose settings for request handlers that want to read it.
    app.state.settings = settings
    app.state.sessions = sessions

    app.add_middleware(
        CORSMiddleware,
        allow_origins=server_settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _session_or_404(session_id: str) -> WorkflowSession:
        session = sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Workflow session not found")
        return session

    @app.get("/api/health")
    def health() -> dict[str, object]:
        return {"status": "ok", "version": __version__, "sessions": len(sessions)}

    @app.get("/api/workflows")
    def list_workflows() -> dict[str, object]:
        return {"workflows": registry.ids(), "default": registry.default_id}

    @app.post("/api/workflows/{workflow_id}/sessions", response_model=SessionResponse)
    async def open_session(
        workflow_id: str, req: OpenSessionRequest | None = None
    ) -> SessionResponse:
        req = req or OpenSessionRequest()
        route = WorkflowRoute(
            workflow_id=workflow_id,
            exit_to=req.exit_to,
            persist=req.persist,
            first_back_to=req.first_back_to,
        )
        session = await sessions.open(route)
        await session.engine.wait_until_ready()
        return _to_response(session)

    @app.get("/api/sessions/{session_id}", response_model=SessionResponse)
    async def get_session(session_id: str) -> SessionResponse:
        return _to_response(_session_or_404(session_id))

    @app.post("/api/sessions/{session_id}/events", response_model=SessionResponse)
    async def post_event(session_id: str, req: EventRequest) -> SessionResponse:
        session = _session_or_404(session_id)
        try:
            signal = WorkflowSignal.parse(req.signal)
        except UnknownSignalError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e

        try:
            await session.engine.emit(signal)
        except Exception as e:
            logger.exception(
                "Workflow transition failed",
                extra={"session_id": session_id, "workflow_id": session.route.workflow_id},
            )
            raise HTTPException(status_code=500, detail=f"Transition failed: {e}") from e

        await session.engine.wait_until_ready()
        return _to_response(session)

    @app.delete("/api/sessions/{session_id}")
    async def close_session(session_id: str) -> dict[str, object]:
        if not await sessions.close(session_id):
            raise HTTPException(status_code=404, detail="Workflow session not found")
        return {"closed": True}

    @app.get("/api/progress")
    async def list_progress() -> list[ProgressResponse]:
        records = await progress_store.list_progress()
        return [ProgressResponse(workflow_id=k, progress=v) for k, v in records.items()]

    @app.get("/api/progress/{workflow_id}", response_model=ProgressResponse)
    async def get_progress(workflow_id: str) -> ProgressResponse:
        return ProgressResponse(
            workflow_id=workflow_id, progress=await progress_store.get_progress(workflow_id)
        )

    @app.delete("/api/progress/{workflow_id}")
    async def clear_progress(workflow_id: str) -> dict[str, object]:
        await progress_store.clear_progress(workflow_id)
        return {"cleared": True}

    return app
