"""
In-memory index of stored reports per owner.

Stands in for on-chain persistence: the mapping lives for the life of the
process, is append-only and is lost on restart.
"""

from __future__ import annotations

import threading

from loguru import logger

from reportvault_core.domain.models import StoredArtifact


class ReportIndex:
    """
    Append-only map from owner identifier to its stored artifacts.

    All access goes through one lock. The lock only ever guards the dict
    operation itself, never an await, so it is safe to use from the event
    loop and from threadpool handlers alike.

    Usage:
        index = ReportIndex()
        index.record("Wallet1", "Qm123", "a.pdf")
        index.lookup("Wallet1")  # [StoredArtifact(content_id="Qm123", ...)]
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._reports: dict[str, list[StoredArtifact]] = {}

    def record(self, owner: str, content_id: str, filename: str) -> StoredArtifact:
        """
        Append an artifact to the owner's history.

        Args:
            owner: Owner identifier (non-empty, validated at ingest).
            content_id: Content identifier confirmed by the storage backend.
            filename: Client-supplied filename.

        Returns:
            StoredArtifact: The recorded artifact.
        """
        artifact = StoredArtifact(content_id=content_id, filename=filename)
        with self._lock:
            self._reports.setdefault(owner, []).append(artifact)
            count = len(self._reports[owner])
        logger.info(f"Recorded ({content_id}, {filename}) for {owner} ({count} total)")
        return artifact

    def lookup(self, owner: str) -> list[StoredArtifact]:
        """
        Return the owner's artifacts in insertion order.

        An owner that was never recorded yields an empty list.
        """
        with self._lock:
            return list(self._reports.get(owner, ()))

    def owners(self) -> list[str]:
        with self._lock:
            return list(self._reports)

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)
