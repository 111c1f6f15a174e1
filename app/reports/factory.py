"""
Reports module factory.

Builds the report services once per application and exposes them to route
handlers as FastAPI dependencies read from `app.state`.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from app.reports.protocols import ContentStore, ReportLedger
from app.reports.services.report_index import ReportIndex
from app.reports.services.storage_proxy import IpfsStorageProxy
from app.reports.services.upload_service import ReportUploadService
from reportvault_core.config import Settings
from reportvault_core.runtime.http_client import ServiceHttpClient


@dataclass
class ReportServices:
    """Services shared by every request of one application instance."""

    http_client: ServiceHttpClient
    content_store: ContentStore
    report_index: ReportLedger


def build_report_services(settings: Settings) -> ReportServices:
    """Wire the IPFS proxy and a fresh, empty report index."""
    http_client = ServiceHttpClient(
        base_url=settings.IPFS_API_URL,
        timeout=settings.STORAGE_TIMEOUT_SECONDS,
        max_connections=settings.STORAGE_MAX_CONNECTIONS,
    )
    return ReportServices(
        http_client=http_client,
        content_store=IpfsStorageProxy(http_client, add_path=settings.IPFS_ADD_PATH),
        report_index=ReportIndex(),
    )


def get_report_index(request: Request) -> ReportLedger:
    """Get the application's report index."""
    return request.app.state.report_services.report_index


def get_upload_service(request: Request) -> ReportUploadService:
    """Get an upload pipeline bound to the application's store and index."""
    services: ReportServices = request.app.state.report_services
    return ReportUploadService(
        content_store=services.content_store,
        report_index=services.report_index,
    )
