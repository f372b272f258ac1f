"""Vector store lifecycle: per-workflow stores, file uploads and indexing readiness."""

from .indexing import backoff_delays, wait_for_index
from .manager import VectorStoreManager
from .models import StoreHandle

__all__ = ["StoreHandle", "VectorStoreManager", "backoff_delays", "wait_for_index"]
