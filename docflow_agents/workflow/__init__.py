"""Workflow-scoped helpers."""

from .cleanup import CleanupableWorkflowResult, WorkflowCleanup

__all__ = ["CleanupableWorkflowResult", "WorkflowCleanup"]
