"""Ordered-candidate key resolution shared by every agent-keyed lookup.

Agent definitions and prompt templates are configured under either
``"{key}_agent"`` or the bare ``key``. Every lookup goes through
:func:`resolve_by_candidates` so the precedence is defined in one place.
"""

from __future__ import annotations

from typing import Mapping, Optional, Tuple, TypeVar

AGENT_KEY_SUFFIX = "_agent"

V = TypeVar("V")


def candidate_keys(agent_key: str) -> Tuple[str, ...]:
    """Keys tried for ``agent_key``, most specific first."""
    return (f"{agent_key}{AGENT_KEY_SUFFIX}", agent_key)


def resolve_by_candidates(mapping: Mapping[str, V], agent_key: str) -> Optional[Tuple[str, V]]:
    """Return ``(matched_key, value)`` for the first candidate present in ``mapping``.

    Returns None when no candidate matches.
    """
    for candidate in candidate_keys(agent_key):
        if candidate in mapping:
            return candidate, mapping[candidate]
    return None
