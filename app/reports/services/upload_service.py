"""
ReportUploadService: the upload pipeline.

Decodes the multipart body, hands the bytes to the content store and records
the returned content identifier against the owner. The index is only touched
after the store has confirmed the upload.
"""

from __future__ import annotations

from typing import AsyncIterator

from loguru import logger

from app.reports.errors import MissingFieldError, ReportUploadError
from app.reports.protocols import ContentStore, ReportLedger
from app.reports.services.multipart_ingest import read_upload
from reportvault_core.domain.models import StoredArtifact
from reportvault_core.runtime.context import RunContext


class ReportUploadService:
    """
    Orchestrates ingest → store → record for one upload.

    Usage:
        service = ReportUploadService(content_store, report_index)
        artifact = await service.upload(content_type, request.stream(), context)
    """

    def __init__(self, content_store: ContentStore, report_index: ReportLedger):
        self.content_store = content_store
        self.report_index = report_index

    async def upload(
        self,
        content_type: str | None,
        stream: AsyncIterator[bytes],
        context: RunContext,
    ) -> StoredArtifact:
        """
        Run the full upload pipeline.

        Args:
            content_type: The request's Content-Type header.
            stream: Request body chunks.
            context: Request context for correlation.

        Returns:
            StoredArtifact: The artifact recorded for the owner.

        Raises:
            ReportUploadError: Any ingest or storage failure; nothing is
                recorded in that case.
        """
        try:
            upload = await read_upload(content_type, stream, context)
        except MissingFieldError as e:
            e.request_id = context.request_id
            logger.warning(
                f"[{context.request_id}] Rejected upload ({e.field}) "
                f"owner={e.owner!r} file_name={e.file_name!r}: {e.message_safe}"
            )
            raise
        except ReportUploadError as e:
            e.request_id = context.request_id
            raise

        context = context.with_owner(upload.owner)
        logger.info(
            f"[{context.request_id}] Received upload {upload.filename} "
            f"({upload.size} bytes) for {upload.owner}"
        )

        try:
            content_id = await self.content_store.add(upload.filename, upload.content, context)
        except ReportUploadError as e:
            e.request_id = context.request_id
            e.owner = e.owner or upload.owner
            raise

        # TODO: mirror the (owner, content_id) link to the on-chain registry once it exists
        return self.report_index.record(upload.owner, content_id, upload.filename)
