"""Bulk, best-effort cleanup of platform resources."""

from .fanout import FanoutResult, best_effort_delete
from .service import ResourceCleanupService

__all__ = ["FanoutResult", "ResourceCleanupService", "best_effort_delete"]
