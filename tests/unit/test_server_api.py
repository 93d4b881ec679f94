from __future__ import annotations

from fastapi.testclient import TestClient

from pages_workflow.config import WorkflowSettings
from pages_workflow.server.app import create_app
from pages_workflow.workflow.progress import InMemoryStorage, ProgressStore


def test_health_and_workflow_listing(settings: WorkflowSettings) -> None:
    with TestClient(create_app(settings)) as client:
        health = client.get("/api/health").json()
        assert health["status"] == "ok"
        assert health["sessions"] == 0

        listing = client.get("/api/workflows").json()
        assert listing == {"workflows": ["demo", "seller-onboarding"], "default": "demo"}


def test_session_walks_demo_and_persists(settings: WorkflowSettings) -> None:
    store = ProgressStore(InMemoryStorage())
    with TestClient(create_app(settings, progress_store=store)) as client:
        opened = client.post("/api/workflows/demo/sessions", json={}).json()
        session_id = opened["session_id"]
        assert opened["snapshot"]["current_index"] == 0
        assert opened["snapshot"]["phase"] == "ready"
        assert opened["view"]["page_id"] == "demo-step-1"
        assert opened["view"]["is_initializing"] is False

        advanced = client.post(f"/api/sessions/{session_id}/events", json={"signal": "next"})
        assert advanced.status_code == 200
        assert advanced.json()["snapshot"]["current_index"] == 1
        assert client.get("/api/progress/demo").json() == {"workflow_id": "demo", "progress": 1}

        back = client.post(f"/api/sessions/{session_id}/events", json={"signal": "back"}).json()
        assert back["snapshot"]["current_index"] == 0
        assert client.get("/api/progress").json() == [{"workflow_id": "demo", "progress": 1}]

        resumed = client.post("/api/workflows/demo/sessions", json={}).json()
        assert resumed["snapshot"]["current_index"] == 1


def test_first_page_back_exits_to_override(settings: WorkflowSettings) -> None:
    with TestClient(create_app(settings)) as client:
        opened = client.post(
            "/api/workflows/seller-onboarding/sessions",
            json={"firstBackTo": "/settings", "persist": "0"},
        ).json()
        session_id = opened["session_id"]

        exited = client.post(f"/api/sessions/{session_id}/events", json={"signal": "back"}).json()
        assert exited["snapshot"]["phase"] == "exited"
        assert exited["snapshot"]["exit_target"] == "/settings"
        assert exited["view"] is None


def test_unknown_signal_and_missing_session(settings: WorkflowSettings) -> None:
    with TestClient(create_app(settings)) as client:
        session_id = client.post("/api/workflows/demo/sessions").json()["session_id"]

        bad = client.post(f"/api/sessions/{session_id}/events", json={"signal": "sideways"})
        assert bad.status_code == 422

        assert client.delete(f"/api/sessions/{session_id}").json() == {"closed": True}
        assert client.get(f"/api/sessions/{session_id}").status_code == 404
        assert client.delete(f"/api/sessions/{session_id}").status_code == 404


def test_unknown_workflow_falls_back_to_demo_pages(settings: WorkflowSettings) -> None:
    with TestClient(create_app(settings)) as client:
        opened = client.post("/api/workflows/not-a-workflow/sessions", json={}).json()

        assert opened["snapshot"]["workflow_id"] == "not-a-workflow"
        assert opened["view"]["page_id"] == "demo-step-1"


def test_failed_progress_write_returns_500(settings: WorkflowSettings) -> None:
    class ReadOnlyStorage(InMemoryStorage):
        async def set_item(self, key: str, value: str) -> None:
            raise OSError("read-only storage")

    store = ProgressStore(ReadOnlyStorage())
    with TestClient(create_app(settings, progress_store=store)) as client:
        session_id = client.post("/api/workflows/demo/sessions", json={}).json()["session_id"]

        failed = client.post(f"/api/sessions/{session_id}/events", json={"signal": "next"})
        assert failed.status_code == 500
        assert "read-only storage" in failed.json()["detail"]
        assert client.get(f"/api/sessions/{session_id}").json()["snapshot"]["current_index"] == 0


def test_clear_progress_endpoint(settings: WorkflowSettings) -> None:
    store = ProgressStore(InMemoryStorage({"workflow_progress_demo": "2"}))
    with TestClient(create_app(settings, progress_store=store)) as client:
        assert client.delete("/api/progress/demo").json() == {"cleared": True}
        assert client.get("/api/progress/demo").json()["progress"] == 0
