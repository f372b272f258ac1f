"""Provider integrations used by the agent system.

The ``info_provider`` package supplies configuration-derived collaborators to
the vector store, cleanup and agent layers:

- ``info_provider.registry``: resolves provider names to platform clients.
- ``info_provider.lookup``: the ``"{key}_agent"``-then-``key`` lookup shared
  by agent definitions and prompt templates.
- ``info_provider.prompt``: prompt rendering and template validation.
"""

from .lookup import candidate_keys, resolve_by_candidates
from .registry import ProviderRegistry

__all__ = ["ProviderRegistry", "candidate_keys", "resolve_by_candidates"]
