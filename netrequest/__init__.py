"""netrequest: request descriptors, path templates and multipart encoding over HTTP."""

from netrequest.client import ClientConfig, JsonDecoder, Outcome, RequestClient
from netrequest.core import (
    ContentType,
    Endpoint,
    Method,
    MultipartFormEncoder,
    PathTemplate,
    RequestDescriptor,
    Scheme,
)

__all__ = [
    "ClientConfig",
    "ContentType",
    "Endpoint",
    "JsonDecoder",
    "Method",
    "MultipartFormEncoder",
    "Outcome",
    "PathTemplate",
    "RequestClient",
    "RequestDescriptor",
    "Scheme",
]

__version__ = "0.1.0"
