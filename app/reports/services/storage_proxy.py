"""
Storage proxy for the IPFS HTTP API.

Submits a file to `POST /api/v0/add` as a single multipart part named "file"
and extracts the content identifier from the `Hash` field of the response.
Nothing is retried.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from app.reports.errors import (
    UpstreamMalformedError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
)
from reportvault_core.runtime.context import RunContext
from reportvault_core.runtime.errors import ServiceError
from reportvault_core.runtime.http_client import ServiceHttpClient


class IpfsStorageProxy:
    """
    Content store backed by an IPFS node.

    Implements the ContentStore protocol.

    Usage:
        proxy = IpfsStorageProxy(ServiceHttpClient("http://127.0.0.1:5001"))
        cid = await proxy.add("a.pdf", b"...", context)
    """

    def __init__(self, http_client: ServiceHttpClient, add_path: str = "/api/v0/add"):
        self._http = http_client
        self.add_path = add_path

    async def add(self, filename: str, content: bytes, context: RunContext) -> str:
        """
        Upload content to IPFS.

        Args:
            filename: Filename sent with the multipart part.
            content: File bytes.
            context: Request context for correlation.

        Returns:
            str: The content identifier reported by IPFS.

        Raises:
            UpstreamUnavailableError: IPFS could not be reached.
            UpstreamRejectedError: IPFS answered with a non-success status.
            UpstreamMalformedError: IPFS answered without a usable `Hash`.
        """
        files = {"file": (filename, content, "application/octet-stream")}

        logger.info(f"[{context.request_id}] Uploading {filename} ({len(content)} bytes) to IPFS")

        try:
            response = await self._http.post(self.add_path, context, files=files)
        except ServiceError as e:
            logger.error(f"[{context.request_id}] Failed to send request to IPFS API: {e.message_debug}")
            raise UpstreamUnavailableError(
                f"Failed to upload to IPFS: {e.message_safe}",
                message_debug=e.message_debug,
                file_name=filename,
                owner=context.owner,
                cause=e,
            )

        if not response.is_success:
            body = response.text
            logger.error(
                f"[{context.request_id}] IPFS upload failed with status {response.status_code}: {body}"
            )
            raise UpstreamRejectedError(
                upstream_status=response.status_code,
                upstream_body=body,
                file_name=filename,
                owner=context.owner,
            )

        try:
            payload: Any = response.json()
        except ValueError as e:
            logger.error(f"[{context.request_id}] Failed to parse IPFS response JSON: {e}")
            payload = None

        cid = extract_content_id(payload)
        if not cid:
            logger.error(f"[{context.request_id}] CID not found in IPFS response: {payload!r}")
            raise UpstreamMalformedError(
                "Failed to get CID from IPFS response.",
                message_debug=repr(payload),
                file_name=filename,
                owner=context.owner,
            )

        logger.info(f"[{context.request_id}] Successfully uploaded to IPFS, CID: {cid}")
        return cid


def extract_content_id(payload: Any) -> str:
    """Return the `Hash` string from a decoded IPFS add response, or ""."""
    if not isinstance(payload, dict):
        return ""
    cid = payload.get("Hash")
    return cid if isinstance(cid, str) else ""
