"""
Async client for the remote agent-hosting platform.

Wraps the platform's REST API (files, vector stores, threads, agents, runs)
behind :class:`AgentsApiClient`, and provides the credential kinds used to
authenticate against it.
"""

from .client import AgentsApiClient
from .credentials import (
    AmbientIdentityCredential,
    CredentialKind,
    CredentialProvider,
    StaticKeyCredential,
    select_credential,
)
from .models import ClientCapabilities, IndexingStatus, RunStatus

__all__ = [
    "AgentsApiClient",
    "AmbientIdentityCredential",
    "ClientCapabilities",
    "CredentialKind",
    "CredentialProvider",
    "IndexingStatus",
    "RunStatus",
    "StaticKeyCredential",
    "select_credential",
]
