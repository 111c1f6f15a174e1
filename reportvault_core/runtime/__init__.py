"""
Service runtime layer for reportvault.

This package provides shared infrastructure for reliability and observability:
- RunContext: Request-scoped context with correlation IDs
- ServiceError: Standardized errors with retry semantics
- ServiceHttpClient: Pooled async HTTP client with automatic headers
"""

from .context import RunContext
from .errors import ErrorCode, ServiceError
from .http_client import ServiceHttpClient

__all__ = [
    "RunContext",
    "ErrorCode",
    "ServiceError",
    "ServiceHttpClient",
]
