"""Pages Workflow.

A resumable, linear multi-step workflow runner:
- ordered pages with optional async initializers
- a closed next/back signal protocol
- durable, monotonic resume points across restarts
"""

__version__ = "0.1.0"

from pages_workflow.config import WorkflowSettings

__all__ = ["__version__", "WorkflowSettings"]
