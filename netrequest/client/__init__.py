"""Request building, sending and response dispatch.

Security notes:
- Treat server responses as untrusted input.
- Avoid printing or logging raw file bytes.
"""

from .builder import RequestBuilder, encode_query
from .config import ClientConfig
from .decoding import Decoder, JsonDecoder
from .dispatch import Outcome, ResponseDispatcher
from .request_client import RequestClient, RequestTask
from .transport import Transport, TransportResponse, TransportTask, UrllibTransport

__all__ = [
    "ClientConfig",
    "Decoder",
    "JsonDecoder",
    "Outcome",
    "RequestBuilder",
    "RequestClient",
    "RequestTask",
    "ResponseDispatcher",
    "Transport",
    "TransportResponse",
    "TransportTask",
    "UrllibTransport",
    "encode_query",
]
