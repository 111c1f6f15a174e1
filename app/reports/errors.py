"""
Errors raised by the report upload pipeline.

Every failure of POST /api/upload-report is a ReportUploadError. Each subclass
fixes its error code and HTTP status; the exception handler in app.main turns
any of them into the standard upload response body.
"""

from __future__ import annotations

from reportvault_core.runtime.errors import ErrorCode, ServiceError


class ReportUploadError(ServiceError):
    """Base class for upload failures.

    Attributes:
        http_status: Status code returned to the client.
        file_name: Filename already decoded when the failure happened, echoed
            back in the response.
        owner: Owner already decoded when the failure happened. Logged only.
        request_id: Set by the upload pipeline so the failure can be matched
            to the request's other log lines.
    """

    code: str = ErrorCode.INTERNAL_ERROR
    http_status: int = 500
    retryable: bool = False

    def __init__(
        self,
        message_safe: str,
        message_debug: str | None = None,
        file_name: str | None = None,
        owner: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(
            code=type(self).code,
            message_safe=message_safe,
            message_debug=message_debug,
            retryable=type(self).retryable,
            cause=cause,
        )
        self.file_name = file_name
        self.owner = owner
        self.request_id: str | None = None


class MalformedRequestError(ReportUploadError):
    """Multipart framing was invalid or the body could not be read."""

    code = ErrorCode.MALFORMED_REQUEST
    http_status = 400


class MissingFieldError(ReportUploadError):
    """A required form field was absent once the body was fully decoded."""

    code = ErrorCode.MISSING_FIELD
    http_status = 400

    def __init__(
        self,
        field: str,
        message_safe: str,
        file_name: str | None = None,
        owner: str | None = None,
    ):
        super().__init__(
            message_safe,
            message_debug=f"missing field: {field}",
            file_name=file_name,
            owner=owner,
        )
        self.field = field


class UpstreamUnavailableError(ReportUploadError):
    """The storage backend could not be reached."""

    code = ErrorCode.UPSTREAM_UNAVAILABLE
    http_status = 500
    retryable = True


class UpstreamRejectedError(ReportUploadError):
    """The storage backend answered with a non-success status."""

    code = ErrorCode.UPSTREAM_REJECTED
    http_status = 500

    def __init__(
        self,
        upstream_status: int,
        upstream_body: str,
        file_name: str | None = None,
        owner: str | None = None,
    ):
        super().__init__(
            f"IPFS upload failed with status: {upstream_status}",
            message_debug=upstream_body,
            file_name=file_name,
            owner=owner,
        )
        self.upstream_status = upstream_status


class UpstreamMalformedError(ReportUploadError):
    """The storage backend succeeded but returned no usable content identifier."""

    code = ErrorCode.UPSTREAM_MALFORMED
    http_status = 500
