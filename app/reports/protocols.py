"""
Protocols for the reports module.

These let the upload pipeline depend on behaviour rather than on the IPFS
proxy and in-memory index directly, so tests can swap in fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from reportvault_core.domain.models import StoredArtifact
from reportvault_core.runtime.context import RunContext


@runtime_checkable
class ContentStore(Protocol):
    """A content-addressable store: add bytes, get back a content identifier."""

    async def add(self, filename: str, content: bytes, context: RunContext) -> str:
        """
        Store content and return its content identifier.

        Raises:
            UpstreamUnavailableError, UpstreamRejectedError, UpstreamMalformedError
        """
        ...


@runtime_checkable
class ReportLedger(Protocol):
    """Per-owner history of stored artifacts."""

    def record(self, owner: str, content_id: str, filename: str) -> StoredArtifact:
        """Append an artifact to the owner's history."""
        ...

    def lookup(self, owner: str) -> list[StoredArtifact]:
        """Return the owner's artifacts in insertion order (empty if unknown)."""
        ...

    def __len__(self) -> int:
        """Number of owners with at least one artifact."""
        ...
