"""CLI entrypoint for the workflow runner.

Walks a workflow in the terminal and manages persisted progress records.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TextIO

from pydantic import ValidationError

from pages_workflow import __version__
from pages_workflow.config import WorkflowSettings
from pages_workflow.host import WorkflowHost, WorkflowRoute
from pages_workflow.host.route import PERSISTENCE_DISABLED_VALUE
from pages_workflow.logging import configure_logging
from pages_workflow.workflow.engine import WorkflowEngine, WorkflowPhase
from pages_workflow.workflow.errors import UnknownSignalError
from pages_workflow.workflow.events import WorkflowSignal
from pages_workflow.workflow.navigation import RecordingNavigator
from pages_workflow.workflow.pages import PageView
from pages_workflow.workflow.progress import ProgressStore, create_progress_store

logger = logging.getLogger(__name__)

_COMMAND_ALIASES: dict[str, str] = {"n": "next", "b": "back"}
_QUIT_COMMANDS = {"q", "quit"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pages-workflow",
        description="Run resumable multi-step workflows and manage their progress",
    )
    parser.add_argument("--version", action="version", version=f"pages-workflow {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Walk a workflow interactively in the terminal")
    run.add_argument("workflow_id", help="Workflow identifier, e.g. 'demo' or 'seller-onboarding'")
    run.add_argument(
        "--exit-to",
        default=None,
        help="Destination after completion (defaults to WORKFLOW_DEFAULT_EXIT_TO)",
    )
    run.add_argument(
        "--no-persist",
        action="store_true",
        help="Keep progress in memory only; always start at the first step",
    )
    run.add_argument(
        "--first-back-to",
        default=None,
        help="Destination for 'back' on the first step (defaults to the exit destination)",
    )

    progress = subparsers.add_parser("progress", help="Show persisted workflow progress")
    progress.add_argument(
        "workflow_id",
        nargs="?",
        default=None,
        help="Workflow identifier (all records when omitted)",
    )

    reset = subparsers.add_parser("reset", help="Forget the persisted progress of a workflow")
    reset.add_argument("workflow_id", help="Workflow identifier")

    return parser


def _print_view(view: object, engine: WorkflowEngine, out: TextIO) -> None:
    position = f"[{engine.current_index + 1}/{engine.total_pages}]"
    if not isinstance(view, PageView):
        print(f"{position} {view}", file=out)
        return
    header = f"{position} {view.title}"
    if view.step_label:
        header += f" - {view.step_label}"
    print(header, file=out)
    if view.description:
        print(f"  {view.description}", file=out)
    actions = ", ".join(
        a.value for a in view.actions if a is not WorkflowSignal.BACK or view.can_go_back
    )
    print(f"  actions: {actions} (q to quit)", file=out)


async def run_workflow(
    host: WorkflowHost, route: WorkflowRoute, *, stdin: TextIO, stdout: TextIO
) -> str | None:
    """Drive a workflow from line-based input.

    Returns the exit destination, or None when the user quit (or input ended)
    before the workflow handed control back.
    """

    async with host.open(route) as engine:
        while engine.phase in (WorkflowPhase.LOADING, WorkflowPhase.READY):
            await engine.wait_until_ready()
            _print_view(engine.render(), engine, stdout)

            line = stdin.readline()
            if not line:
                break
            command = line.strip().lower()
            if command in _QUIT_COMMANDS:
                break
            try:
                signal = WorkflowSignal.parse(_COMMAND_ALIASES.get(command, command))
            except UnknownSignalError:
                print(f"  unknown command {command!r}; use n, b or q", file=stdout)
                continue
            await engine.emit(signal)

        return engine.exit_target


async def _show_progress(store: ProgressStore, workflow_id: str | None, out: TextIO) -> None:
    if workflow_id is not None:
        print(f"{workflow_id}: {await store.get_progress(workflow_id)}", file=out)
        return
    records = await store.list_progress()
    if not records:
        print("No workflow progress recorded", file=out)
        return
    for key, value in records.items():
        print(f"{key}: {value}", file=out)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = WorkflowSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)
    store = create_progress_store(settings)

    try:
        if args.command == "run":
            route = WorkflowRoute(
                workflow_id=args.workflow_id,
                exit_to=args.exit_to,
                persist=PERSISTENCE_DISABLED_VALUE if args.no_persist else None,
                first_back_to=args.first_back_to,
            )
            host = WorkflowHost(settings, progress_store=store, navigator=RecordingNavigator())
            target = asyncio.run(run_workflow(host, route, stdin=sys.stdin, stdout=sys.stdout))
            if target is None:
                print("Workflow left open; progress kept")
            else:
                print(f"Workflow finished; continuing to {target}")
            return 0

        if args.command == "progress":
            asyncio.run(_show_progress(store, args.workflow_id, sys.stdout))
            return 0

        if args.command == "reset":
            asyncio.run(store.clear_progress(args.workflow_id))
            print(f"Cleared progress for {args.workflow_id}")
            return 0

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
