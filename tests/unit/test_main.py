"""Unit tests for the CLI."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from pages_workflow.main import main


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    state_file = tmp_path / "workflow_state" / "progress.json"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("WORKFLOW_STATE_PATH", str(state_file))
    monkeypatch.setenv("WORKFLOW_STORAGE_BACKEND", "file")
    monkeypatch.setenv("WORKFLOW_DEMO_INIT_DELAY_SECONDS", "0")
    monkeypatch.delenv("WORKFLOW_DEFAULT_EXIT_TO", raising=False)
    monkeypatch.delenv("WORKFLOW_KEY_PREFIX", raising=False)
    return state_file


def test_run_walks_demo_to_completion(
    cli_env: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("n\nnext\nn\n"))

    assert main(["run", "demo"]) == 0

    out = capsys.readouterr().out
    assert "[1/3] Test workflow - Step 1 of 3" in out
    assert "[3/3] Test workflow - Step 3 of 3" in out
    assert "Workflow finished; continuing to /(tabs)/(home)" in out


def test_run_resumes_where_the_user_left(
    cli_env: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("n\nn\nb\nq\n"))
    assert main(["run", "demo"]) == 0
    assert "Workflow left open; progress kept" in capsys.readouterr().out

    assert main(["progress", "demo"]) == 0
    assert capsys.readouterr().out.strip() == "demo: 2"

    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    assert main(["run", "demo"]) == 0
    assert "[3/3]" in capsys.readouterr().out


def test_run_first_step_back_uses_override(
    cli_env: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("sideways\nb\n"))

    assert main(["run", "demo", "--no-persist", "--first-back-to", "/settings"]) == 0

    out = capsys.readouterr().out
    assert "unknown command 'sideways'" in out
    assert "Workflow finished; continuing to /settings" in out
    assert not cli_env.exists()


def test_progress_lists_and_reset_clears(
    cli_env: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["progress"]) == 0
    assert "No workflow progress recorded" in capsys.readouterr().out

    monkeypatch.setattr("sys.stdin", io.StringIO("n\nq\n"))
    assert main(["run", "seller-onboarding"]) == 0
    capsys.readouterr()

    assert main(["progress"]) == 0
    assert "seller-onboarding: 1" in capsys.readouterr().out

    assert main(["reset", "seller-onboarding"]) == 0
    assert main(["progress", "seller-onboarding"]) == 0
    assert capsys.readouterr().out.strip().endswith("seller-onboarding: 0")


def test_invalid_configuration_exits_with_code_2(
    cli_env: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("WORKFLOW_STORAGE_BACKEND", "redis")

    assert main(["progress"]) == 2
