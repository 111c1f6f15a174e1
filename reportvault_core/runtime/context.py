"""
Request-scoped context for service operations.

RunContext carries the correlation ID for one inbound request so that every
log line and outbound call made on its behalf can be tied back together.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel


class RunContext(BaseModel):
    """Request-scoped context for service operations.

    Attributes:
        request_id: Unique identifier for request tracing.
        owner: Owner identifier, once it is known.
    """

    request_id: str
    owner: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def new(cls) -> "RunContext":
        """Create a context with a fresh request ID."""
        return cls(request_id=str(uuid.uuid4())[:8])

    def with_owner(self, owner: str) -> "RunContext":
        """Return a new context bound to the given owner."""
        return self.model_copy(update={"owner": owner})

    def get_headers(self) -> dict[str, str]:
        """Get HTTP headers for propagating context.

        Returns:
            Dictionary of headers to inject into outbound requests.
        """
        return {"X-Request-Id": self.request_id}
