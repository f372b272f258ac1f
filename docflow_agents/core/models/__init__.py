"""Core models and schemas for provider, agent and cleanup configuration."""

from __future__ import annotations

from .agent import AgentDefinition, AgentMetadata, AgentOptions, FrameworkConfig
from .base import BaseSchema
from .cleanup import CleanupStatistics, ProtectedResourcePolicy
from .provider import (
    KEY_AUTH_PROVIDER_TYPES,
    IndexingPolicy,
    ModelProviderOptions,
    ProviderDefinition,
    ProviderType,
)

__all__ = [
    "BaseSchema",
    "AgentDefinition",
    "AgentMetadata",
    "AgentOptions",
    "FrameworkConfig",
    "CleanupStatistics",
    "ProtectedResourcePolicy",
    "IndexingPolicy",
    "KEY_AUTH_PROVIDER_TYPES",
    "ModelProviderOptions",
    "ProviderDefinition",
    "ProviderType",
]
