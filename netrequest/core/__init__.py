"""Pure request-construction primitives: paths, wire constants, multipart framing."""

from .descriptor import RequestDescriptor
from .errors import (
    DecodeError,
    InvalidFile,
    InvalidOriginalPath,
    InvalidPathArgument,
    MissingData,
    MultipartError,
    NetRequestError,
    NetworkError,
    PathError,
    ResponseError,
    UnableToEncode,
    UnsuccessfulStatusCode,
)
from .multipart import MultipartBody, MultipartFormEncoder, encode_multipart, new_boundary
from .path import Endpoint, PathTemplate
from .wire import (
    CONTENT_LENGTH_HEADER,
    CONTENT_TYPE_HEADER,
    CachePolicy,
    ContentType,
    Method,
    Scheme,
)

__all__ = [
    "CONTENT_LENGTH_HEADER",
    "CONTENT_TYPE_HEADER",
    "CachePolicy",
    "ContentType",
    "DecodeError",
    "Endpoint",
    "InvalidFile",
    "InvalidOriginalPath",
    "InvalidPathArgument",
    "Method",
    "MissingData",
    "MultipartBody",
    "MultipartError",
    "MultipartFormEncoder",
    "NetRequestError",
    "NetworkError",
    "PathError",
    "PathTemplate",
    "RequestDescriptor",
    "ResponseError",
    "Scheme",
    "UnableToEncode",
    "UnsuccessfulStatusCode",
    "encode_multipart",
    "new_boundary",
]
