"""
Report upload and listing routes.

- POST /api/upload-report - store a file in IPFS and record its CID for a wallet
- GET /api/get-reports/{walletAddress} - list the CIDs recorded for a wallet
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from loguru import logger

from app.reports.factory import get_report_index, get_upload_service
from app.reports.protocols import ReportLedger
from app.reports.schemas import (
    NO_REPORTS_MESSAGE,
    UPLOAD_SUCCESS_MESSAGE,
    GetReportsResponse,
    ReportEntry,
    UploadResponse,
)
from app.reports.services.upload_service import ReportUploadService
from reportvault_core.runtime.context import RunContext

router = APIRouter(prefix="/api")


@router.post(
    "/upload-report",
    response_model=UploadResponse,
    responses={400: {"model": UploadResponse}, 500: {"model": UploadResponse}},
)
async def upload_report(
    request: Request,
    service: ReportUploadService = Depends(get_upload_service),
):
    """
    Upload a report for a wallet.

    Expects multipart/form-data with a `targetWalletAddress` text field and a
    `file` field. The body is streamed and decoded here rather than through
    FastAPI's Form/File parameters so that field order is free and missing
    fields produce the documented 400 responses.

    Returns:
        UploadResponse: The CID assigned by IPFS and the stored filename.
    """
    context = RunContext.new()
    artifact = await service.upload(
        request.headers.get("content-type"),
        request.stream(),
        context,
    )
    return UploadResponse(
        success=True,
        message=UPLOAD_SUCCESS_MESSAGE,
        cid=artifact.content_id,
        file_name=artifact.filename,
    )


@router.get("/get-reports/{wallet_address}", response_model=GetReportsResponse)
def get_reports(
    wallet_address: str,
    report_index: ReportLedger = Depends(get_report_index),
):
    """
    List the reports recorded for a wallet.

    An unknown wallet is not an error: it returns an empty list with an
    informational message.
    """
    logger.info(f"Received request for reports for wallet: {wallet_address}")
    artifacts = report_index.lookup(wallet_address)

    if not artifacts:
        logger.info(f"No reports found for wallet: {wallet_address}")
        return GetReportsResponse(success=True, reports=[], message=NO_REPORTS_MESSAGE)

    logger.info(f"Found {len(artifacts)} reports for wallet: {wallet_address}")
    return GetReportsResponse(
        success=True,
        reports=[ReportEntry.from_artifact(a) for a in artifacts],
        message=None,
    )
