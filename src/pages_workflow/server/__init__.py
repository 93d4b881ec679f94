"""FastAPI server adapter for pages-workflow.

This module exposes a REST API over the workflow host.

Design intent:
- Keep workflow semantics in `pages_workflow.workflow.*` and `pages_workflow.host`
- Keep server-specific concerns (sessions, CORS, status codes) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from pages_workflow.server.app import create_app
