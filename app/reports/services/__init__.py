"""
Services for the reports module.

- multipart_ingest: streaming decode of upload bodies
- storage_proxy: IPFS content store
- report_index: in-memory per-owner history
- upload_service: the ingest → store → record pipeline
"""

from .report_index import ReportIndex
from .storage_proxy import IpfsStorageProxy
from .upload_service import ReportUploadService

__all__ = ["ReportIndex", "IpfsStorageProxy", "ReportUploadService"]
