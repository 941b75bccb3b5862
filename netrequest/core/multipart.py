"""Single-part multipart/form-data encoding.

Frame layout (CRLF line endings):

    --<boundary>
    Content-Disposition: form-data; name="<parameter>"; filename="<file>"
    Content-Type: <mime>

    <raw bytes>
    --<boundary>--

Security notes:
- The whole body is built in memory. `max_upload_bytes` caps file reads.
- File names are user input; they are encoded strictly as UTF-8 and never logged.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from .descriptor import RequestDescriptor
from .errors import InvalidFile, UnableToEncode
from .wire import CONTENT_LENGTH_HEADER, CONTENT_TYPE_HEADER, ContentType

DEFAULT_PARAMETER_NAME = "image"
DEFAULT_MAX_UPLOAD_BYTES = 25 * 1024 * 1024

_MARKER = "--"
_CRLF = "\r\n"


def new_boundary() -> str:
    """Return a boundary unique to one body."""

    return "----netrequest-" + uuid.uuid4().hex


def _utf8(text: str, what: str) -> bytes:
    try:
        return text.encode("utf-8", errors="strict")
    except UnicodeEncodeError as e:
        raise UnableToEncode(f"{what} is not representable as UTF-8") from e


def encode_multipart(
    boundary: str,
    parameter_name: str,
    file_bytes: bytes,
    file_name: str,
    content_type: str,
) -> bytes:
    """Encode one file part as a complete multipart/form-data body.

    Deterministic: equal arguments give byte-identical output. `file_bytes` is
    copied unmodified (no transfer encoding).

    Raises:
      UnableToEncode: a string component cannot be represented as UTF-8.
    """

    parts = [
        _utf8(f"{_MARKER}{boundary}{_CRLF}", "boundary"),
        _utf8(
            f'Content-Disposition: form-data; name="{parameter_name}"; filename="{file_name}"{_CRLF}',
            "content disposition",
        ),
        _utf8(f"Content-Type: {content_type}{_CRLF}{_CRLF}", "content type"),
        bytes(file_bytes),
        _CRLF.encode("ascii"),
        _utf8(f"{_MARKER}{boundary}{_MARKER}{_CRLF}", "boundary"),
    ]
    return b"".join(parts)


def read_file_bounded(path: str, max_bytes: int) -> bytes:
    """Read file bytes up to a maximum.

    Raises:
      InvalidFile: the file is missing, unreadable or larger than `max_bytes`.
    """

    try:
        st = os.stat(path)
        if st.st_size > max_bytes:
            raise InvalidFile(f"file too large for upload cap: {st.st_size} > {max_bytes}")
        with open(path, "rb") as f:
            data = f.read(max_bytes + 1)
    except OSError as e:
        raise InvalidFile(f"cannot read upload file: {e.strerror or e}") from e
    if len(data) > max_bytes:
        raise InvalidFile("file too large for upload cap")
    return data


@dataclass(frozen=True, slots=True)
class MultipartBody:
    """An encoded body plus the boundary it was framed with."""

    body: bytes
    boundary: str

    @property
    def content_type(self) -> ContentType:
        return ContentType.multipart_form(self.boundary)

    @property
    def headers(self) -> Dict[str, str]:
        return {
            CONTENT_TYPE_HEADER: self.content_type.raw_value,
            CONTENT_LENGTH_HEADER: str(len(self.body)),
        }


@dataclass(frozen=True, slots=True)
class MultipartFormEncoder:
    """Immutable multipart encoder configuration.

    With `boundary=None` (the default) every call frames its body with a fresh
    boundary, so one encoder can serve concurrent uploads. A fixed boundary is
    only safe when one upload at a time uses it.
    """

    parameter_name: str = DEFAULT_PARAMETER_NAME
    boundary: Optional[str] = None
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    def encode(
        self,
        file_bytes: bytes,
        file_name: str,
        content_type: str,
        *,
        boundary: Optional[str] = None,
    ) -> MultipartBody:
        b = boundary or self.boundary or new_boundary()
        body = encode_multipart(b, self.parameter_name, file_bytes, file_name, content_type)
        return MultipartBody(body=body, boundary=b)

    def encode_file(
        self, path: str, content_type: str, *, boundary: Optional[str] = None
    ) -> MultipartBody:
        """Read `path` and encode it; the part's filename is the last path component."""

        data = read_file_bounded(path, self.max_upload_bytes)
        return self.encode(data, os.path.basename(path), content_type, boundary=boundary)

    def configure(
        self,
        descriptor: RequestDescriptor,
        path: str,
        content_type: str,
        *,
        boundary: Optional[str] = None,
    ) -> RequestDescriptor:
        """Return a copy of `descriptor` carrying the encoded file and its headers."""

        encoded = self.encode_file(path, content_type, boundary=boundary)
        headers = encoded.headers
        headers["Accept"] = ContentType.ANY.raw_value
        return descriptor.with_headers(headers).with_body(encoded.body)
