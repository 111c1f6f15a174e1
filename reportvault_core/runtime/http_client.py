"""
Shared async HTTP client for calls to upstream services.

This module provides a pooled HTTP client that injects correlation headers
and converts transport-level failures into ServiceError. It never retries:
a failed call is reported once and left to the caller.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from .context import RunContext
from .errors import ErrorCode, ServiceError


class ServiceHttpClient:
    """Shared HTTP client for service-to-service communication.

    Features:
    - Connection pooling via httpx.AsyncClient (uncapped unless max_connections is set)
    - Automatic header injection (X-Request-Id)
    - Optional timeout (None disables it entirely)
    - Structured error conversion for transport failures

    Status codes are not interpreted here; the response is returned as-is.

    Example:
        client = ServiceHttpClient("http://127.0.0.1:5001")
        response = await client.post("/api/v0/add", context, files=...)
        await client.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        max_connections: int | None = None,
        max_keepalive: int = 20,
    ):
        """Initialize the HTTP client.

        Args:
            base_url: Base URL for all requests.
            timeout: Timeout in seconds, or None for no timeout.
            max_connections: Maximum total connections in pool, or None for
                no cap. A capped pool makes extra requests wait for a slot.
            max_keepalive: Maximum keepalive connections.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive,
            keepalive_expiry=30.0,
        )
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client.

        Returns:
            The shared httpx.AsyncClient instance.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                limits=self._limits,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _build_url(self, path: str) -> str:
        """Build full URL from path.

        Args:
            path: Request path (with or without leading slash).

        Returns:
            Full URL including base_url.
        """
        path = path.lstrip("/")
        return f"{self.base_url}/{path}"

    async def request(
        self,
        method: str,
        path: str,
        context: RunContext,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make a single HTTP request with header injection.

        Args:
            method: HTTP method (GET, POST, etc.).
            path: Request path.
            context: RunContext for header injection and correlation.
            **kwargs: Additional arguments passed to httpx.

        Returns:
            The HTTP response, whatever its status.

        Raises:
            ServiceError: TIMEOUT or CONNECTION_ERROR when the request could
                not complete at the transport level.
        """
        client = await self._get_client()
        url = self._build_url(path)

        headers = kwargs.pop("headers", {})
        headers.update(context.get_headers())

        try:
            return await client.request(
                method=method,
                url=url,
                headers=headers,
                **kwargs,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"[{context.request_id}] {method} {url} timed out after {self.timeout}s")
            raise ServiceError(
                code=ErrorCode.TIMEOUT,
                message_safe=f"Request timed out after {self.timeout}s",
                message_debug=repr(e),
                retryable=True,
                cause=e,
            )
        except httpx.RequestError as e:
            logger.warning(f"[{context.request_id}] {method} {url} failed: {type(e).__name__}")
            raise ServiceError(
                code=ErrorCode.CONNECTION_ERROR,
                message_safe=str(e) or type(e).__name__,
                message_debug=repr(e),
                retryable=True,
                cause=e,
            )

    async def post(
        self,
        path: str,
        context: RunContext,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make a POST request.

        Args:
            path: Request path.
            context: RunContext for correlation.
            **kwargs: Additional arguments (json, data, files, headers, etc.).

        Returns:
            The HTTP response.
        """
        return await self.request("POST", path, context, **kwargs)
