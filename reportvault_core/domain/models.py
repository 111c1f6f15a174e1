"""
Domain models for uploaded reports.

These models are the values that flow between the ingest, storage and index
layers. Both are frozen: once built they are never mutated.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UploadRequest(BaseModel):
    """A fully decoded upload: who it belongs to, what it is called, its bytes."""

    owner: str = Field(description="Owner identifier (wallet address), used verbatim")
    filename: str = Field(description="Client-supplied filename")
    content: bytes = Field(repr=False)

    model_config = ConfigDict(frozen=True)

    @property
    def size(self) -> int:
        return len(self.content)


class StoredArtifact(BaseModel):
    """A report confirmed by the storage backend and recorded for its owner."""

    content_id: str = Field(description="Content identifier returned by the storage backend")
    filename: str

    model_config = ConfigDict(frozen=True)
