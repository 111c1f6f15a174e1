"""
Streaming multipart decoding for report uploads.

The request body is fed chunk by chunk into python-multipart's callback
parser. Each recognised part is buffered in memory and committed to an
UploadAccumulator when it ends. Parts may arrive in any order, so required
fields are only checked once the stream has been fully drained. Text before
the first boundary (a MIME preamble) is discarded.

Recognised fields:
- targetWalletAddress: owner identifier (text, lossy UTF-8)
- file: report payload plus its client-supplied filename

Anything else is skipped.
"""

from __future__ import annotations

from typing import AsyncIterator

from loguru import logger
from python_multipart import MultipartParser
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import parse_options_header
from starlette.requests import ClientDisconnect

from app.reports.errors import MalformedRequestError, MissingFieldError
from reportvault_core.domain.models import UploadRequest
from reportvault_core.runtime.context import RunContext

IDENTIFIER_FIELD = "targetWalletAddress"
FILE_FIELD = "file"


class UploadAccumulator:
    """Optional slot per expected field, filled in whatever order parts arrive."""

    def __init__(self):
        self.owner: str | None = None
        self.filename: str | None = None
        self.content: bytes | None = None

    def set_owner(self, raw: bytes) -> None:
        # An empty part leaves the previous value in place.
        if raw:
            self.owner = raw.decode("utf-8", errors="replace")

    def set_file(self, filename: str | None, content: bytes) -> None:
        self.filename = filename
        self.content = content

    def validate(self) -> UploadRequest:
        """
        Turn the accumulated slots into an UploadRequest.

        Checks filename, then file bytes, then owner.

        Raises:
            MissingFieldError: For the first slot still empty.
        """
        if self.filename is None:
            raise MissingFieldError("filename", "File name is missing.", owner=self.owner)
        if self.content is None:
            raise MissingFieldError(
                "file", "File data is missing.", file_name=self.filename, owner=self.owner
            )
        if self.owner is None:
            raise MissingFieldError(
                IDENTIFIER_FIELD,
                "Target wallet address is required.",
                file_name=self.filename,
            )
        return UploadRequest(owner=self.owner, filename=self.filename, content=self.content)


class MultipartUploadDecoder:
    """
    Push-style decoder wrapping python_multipart.MultipartParser.

    Usage:
        decoder = MultipartUploadDecoder(boundary)
        for chunk in body:
            decoder.feed(chunk)
        decoder.close()
        request = decoder.accumulator.validate()
    """

    def __init__(self, boundary: bytes, context: RunContext | None = None):
        self.accumulator = UploadAccumulator()
        self._request_id = context.request_id if context else "-"
        self._finished = False
        self._delimiter = b"--" + boundary
        self._preamble: bytearray | None = bytearray()
        self._preamble_trimmed = False

        self._header_field = bytearray()
        self._header_value = bytearray()
        self._headers: dict[bytes, bytes] = {}
        self._field_name = ""
        self._filename: str | None = None
        self._buffer = bytearray()

        self._parser = MultipartParser(
            boundary,
            callbacks={
                "on_part_begin": self._on_part_begin,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
                "on_end": self._on_end,
            },
        )

    def feed(self, chunk: bytes) -> None:
        """Feed the next body chunk. Raises MultipartParseError on bad framing."""
        if not chunk:
            return
        if self._preamble is not None:
            chunk = self._skip_preamble(chunk)
            if not chunk:
                return
        self._parser.write(chunk)

    def _skip_preamble(self, chunk: bytes) -> bytes:
        """
        Drop any text before the first boundary line (RFC 2046 preamble).

        Returns the body from the first delimiter on, or b"" while still
        inside the preamble.
        """
        self._preamble += chunk
        if not self._preamble_trimmed and self._preamble.startswith(self._delimiter):
            start = 0
        else:
            start = self._preamble.find(b"\n" + self._delimiter)
            if start < 0:
                # Keep just enough to match a delimiter split across chunks.
                if len(self._preamble) > len(self._delimiter):
                    del self._preamble[:-len(self._delimiter)]
                    self._preamble_trimmed = True
                return b""
            start += 1
        body = bytes(self._preamble[start:])
        self._preamble = None
        return body

    def close(self) -> None:
        """Signal end of body. Raises MultipartParseError if it ended early."""
        self._parser.finalize()
        if not self._finished:
            raise MultipartParseError("Unexpected end of multipart body")

    # --- parser callbacks ---

    def _on_part_begin(self) -> None:
        self._headers = {}
        self._field_name = ""
        self._filename = None
        self._buffer = bytearray()

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._headers[bytes(self._header_field).lower()] = bytes(self._header_value)
        self._header_field = bytearray()
        self._header_value = bytearray()

    def _on_headers_finished(self) -> None:
        _, options = parse_options_header(self._headers.get(b"content-disposition"))
        self._field_name = options.get(b"name", b"").decode("utf-8", errors="replace")
        filename = options.get(b"filename")
        self._filename = filename.decode("utf-8", errors="replace") if filename is not None else None

        if self._field_name not in (IDENTIFIER_FIELD, FILE_FIELD):
            logger.debug(f"[{self._request_id}] Ignoring unknown field: {self._field_name!r}")

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        if self._field_name in (IDENTIFIER_FIELD, FILE_FIELD):
            self._buffer += data[start:end]

    def _on_part_end(self) -> None:
        if self._field_name == IDENTIFIER_FIELD:
            self.accumulator.set_owner(bytes(self._buffer))
        elif self._field_name == FILE_FIELD:
            self.accumulator.set_file(self._filename, bytes(self._buffer))
        self._buffer = bytearray()

    def _on_end(self) -> None:
        self._finished = True


def boundary_from_content_type(content_type: str | None) -> bytes:
    """
    Extract the multipart boundary from a Content-Type header.

    Raises:
        MalformedRequestError: Not multipart/form-data, or no boundary.
    """
    mime, options = parse_options_header(content_type)
    if mime.lower() != b"multipart/form-data":
        raise MalformedRequestError(
            "Error parsing field: expected multipart/form-data content type",
            message_debug=f"content-type: {content_type!r}",
        )
    boundary = options.get(b"boundary")
    if not boundary:
        raise MalformedRequestError(
            "Error parsing field: multipart boundary is missing",
            message_debug=f"content-type: {content_type!r}",
        )
    return boundary


async def read_upload(
    content_type: str | None,
    stream: AsyncIterator[bytes],
    context: RunContext,
) -> UploadRequest:
    """
    Decode an upload body into an UploadRequest.

    Args:
        content_type: The request's Content-Type header.
        stream: Body chunks as they arrive from the client.
        context: Request context for correlation.

    Returns:
        UploadRequest: The validated (owner, filename, content) triple.

    Raises:
        MalformedRequestError: Bad framing or the body could not be read.
        MissingFieldError: A required field was absent after decoding.
    """
    boundary = boundary_from_content_type(content_type)
    decoder = MultipartUploadDecoder(boundary, context)

    try:
        async for chunk in stream:
            decoder.feed(chunk)
        decoder.close()
    except MultipartParseError as e:
        logger.error(
            f"[{context.request_id}] Error parsing field: {e} "
            f"(owner={decoder.accumulator.owner!r}, file_name={decoder.accumulator.filename!r})"
        )
        raise MalformedRequestError(
            f"Error parsing field: {e}",
            message_debug=repr(e),
            owner=decoder.accumulator.owner,
            cause=e,
        )
    except ClientDisconnect as e:
        logger.error(
            f"[{context.request_id}] Client disconnected while sending upload body "
            f"(owner={decoder.accumulator.owner!r})"
        )
        raise MalformedRequestError(
            "Error parsing field: client disconnected before the body was complete",
            owner=decoder.accumulator.owner,
            cause=e,
        )

    return decoder.accumulator.validate()
