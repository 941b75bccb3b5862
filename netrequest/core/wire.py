"""Wire-level constants: HTTP verbs, URL schemes, MIME types, cache policies."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Optional

CONTENT_TYPE_HEADER = "Content-Type"
CONTENT_LENGTH_HEADER = "Content-Length"


class Method(str, Enum):
    """
    HTTP method used for a request.

    Using str Enum ensures stable serialization and safe comparisons.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class Scheme(Enum):
    """URL scheme for a request.

    `NONE` has no wire value and produces a scheme-relative URL.
    """

    HTTP = "http"
    HTTPS = "https"
    WEBSOCKET = "ws"
    NONE = None

    @property
    def value_or_none(self) -> Optional[str]:
        return self.value


class CachePolicy(str, Enum):
    """Cache behaviour requested from the transport."""

    USE_PROTOCOL_CACHE_POLICY = "use_protocol_cache_policy"
    RELOAD_IGNORING_LOCAL_CACHE_DATA = "reload_ignoring_local_cache_data"
    RETURN_CACHE_DATA_ELSE_LOAD = "return_cache_data_else_load"
    RETURN_CACHE_DATA_DONT_LOAD = "return_cache_data_dont_load"

    def cache_control(self) -> Optional[str]:
        """Cache-Control request header value, or None to leave it unset."""

        return _CACHE_CONTROL[self]


_CACHE_CONTROL: Dict[CachePolicy, Optional[str]] = {
    CachePolicy.USE_PROTOCOL_CACHE_POLICY: None,
    CachePolicy.RELOAD_IGNORING_LOCAL_CACHE_DATA: "no-cache",
    CachePolicy.RETURN_CACHE_DATA_ELSE_LOAD: "max-stale",
    CachePolicy.RETURN_CACHE_DATA_DONT_LOAD: "only-if-cached",
}


@dataclass(frozen=True)
class ContentType:
    """
    A MIME type as sent in the Content-Type header.

    Well-known values are available as class attributes; any other MIME string
    can be wrapped directly.
    """

    raw_value: str

    header_key: ClassVar[str] = CONTENT_TYPE_HEADER

    APPLICATION_FORM_URLENCODED: ClassVar["ContentType"]
    APPLICATION_OCTET_STREAM: ClassVar["ContentType"]
    APPLICATION_JSON: ClassVar["ContentType"]
    APPLICATION_ZIP: ClassVar["ContentType"]
    IMAGE_JPEG: ClassVar["ContentType"]
    IMAGE_PNG: ClassVar["ContentType"]
    TEXT_HTML: ClassVar["ContentType"]
    ANY: ClassVar["ContentType"]

    def __post_init__(self) -> None:
        if not isinstance(self.raw_value, str):
            raise TypeError("raw_value must be a string")

    def __str__(self) -> str:
        return self.raw_value

    @classmethod
    def multipart_form(cls, boundary: str) -> "ContentType":
        return cls(f"multipart/form-data; boundary={boundary}")

    @classmethod
    def from_wire(cls, raw_value: str) -> "ContentType":
        """Return the catalog constant for `raw_value`, or a new value if unknown."""

        return _CATALOG.get(raw_value) or cls(raw_value)


ContentType.APPLICATION_FORM_URLENCODED = ContentType("application/x-www-form-urlencoded")
ContentType.APPLICATION_OCTET_STREAM = ContentType("application/octet-stream")
ContentType.APPLICATION_JSON = ContentType("application/json")
ContentType.APPLICATION_ZIP = ContentType("application/zip")
ContentType.IMAGE_JPEG = ContentType("image/jpeg")
ContentType.IMAGE_PNG = ContentType("image/png")
ContentType.TEXT_HTML = ContentType("text/html;charset=utf-8")
ContentType.ANY = ContentType("*/*")

_CATALOG: Dict[str, ContentType] = {
    ct.raw_value: ct
    for ct in (
        ContentType.APPLICATION_FORM_URLENCODED,
        ContentType.APPLICATION_OCTET_STREAM,
        ContentType.APPLICATION_JSON,
        ContentType.APPLICATION_ZIP,
        ContentType.IMAGE_JPEG,
        ContentType.IMAGE_PNG,
        ContentType.TEXT_HTML,
        ContentType.ANY,
    )
}
