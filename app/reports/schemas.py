"""
Pydantic schemas for the reports module.

This module contains the request/response models for the reports API,
keeping route handlers clean and enabling schema reuse.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from reportvault_core.domain.models import StoredArtifact

UPLOAD_SUCCESS_MESSAGE = "File uploaded to IPFS and recorded (simulated)"
NO_REPORTS_MESSAGE = "No reports found for this wallet"


class UploadResponse(BaseModel):
    """Response model for `POST /api/upload-report`, success or failure."""

    success: bool
    message: str
    cid: str | None = None
    file_name: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": UPLOAD_SUCCESS_MESSAGE,
                "cid": "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG",
                "file_name": "report.pdf",
            }
        }
    )


class ReportEntry(BaseModel):
    """A single stored report."""

    cid: str = Field(description="Content identifier of the stored file")
    file_name: str

    @classmethod
    def from_artifact(cls, artifact: StoredArtifact) -> "ReportEntry":
        return cls(cid=artifact.content_id, file_name=artifact.filename)


class GetReportsResponse(BaseModel):
    """Response model for `GET /api/get-reports/{walletAddress}`."""

    success: bool
    reports: list[ReportEntry]
    message: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "reports": [{"cid": "Qm123", "file_name": "a.pdf"}],
                "message": None,
            }
        }
    )
