#!/usr/bin/env python3
"""Programmatic workflow example.

This demonstrates using the workflow components directly:

* load settings from `.env`
* open a workflow through the host (page set + persisted progress)
* advance a few steps and report where a restart would resume

The workflow id is passed as an argument (not read from `.env`).
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Sequence

from pages_workflow.config import WorkflowSettings
from pages_workflow.host import WorkflowHost, WorkflowRoute
from pages_workflow.logging import configure_logging
from pages_workflow.workflow import RecordingNavigator, WorkflowPhase, WorkflowSignal
from pages_workflow.workflow.progress import create_progress_store


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Advance a workflow (programmatic example).")
    parser.add_argument("--workflow", default="demo", help='Workflow id, e.g. "seller-onboarding"')
    parser.add_argument("--steps", type=int, default=1, help="How many times to emit 'next'")
    return parser.parse_args(argv)


async def _advance(settings: WorkflowSettings, workflow_id: str, steps: int) -> None:
    store = create_progress_store(settings)
    navigator = RecordingNavigator()
    host = WorkflowHost(settings, progress_store=store, navigator=navigator)

    async with host.open(WorkflowRoute(workflow_id=workflow_id)) as engine:
        print(f"Started at step {engine.current_index + 1} of {engine.total_pages}")
        for _ in range(steps):
            await engine.wait_until_ready()
            if engine.phase is not WorkflowPhase.READY:
                break
            await engine.emit(WorkflowSignal.NEXT)

        if engine.exit_target is not None:
            print(f"Completed; continuing to {engine.exit_target}")
        else:
            print(f"Now at step {engine.current_index + 1} of {engine.total_pages}")

    print(f"A restart resumes at index {await store.get_progress(workflow_id)}")
    print(f"Persisted to: {settings.workflow_state_file}")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = WorkflowSettings()
    configure_logging(settings.log_level)

    asyncio.run(_advance(settings, args.workflow, args.steps))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
