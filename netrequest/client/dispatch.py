"""Classify completed transport results into Outcomes.

Every response error (network, status, decode, missing data) is returned in
the Outcome; nothing here raises or retries.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Generic, Optional, Tuple, TypeVar

from netrequest.core.errors import DecodeError, MissingData, UnsuccessfulStatusCode

from .decoding import Decoder
from .transport import TransportResponse

log = logging.getLogger("netrequest.dispatch")

T = TypeVar("T")

_DIAGNOSTIC_MAX_BYTES = 4096


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Final result of one request: a value, an error, or (raw calls) both."""

    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Optional[T]:
        """Return the value or raise the error."""

        if self.error is not None:
            raise self.error
        return self.value


class ResponseDispatcher:
    """Status checking and typed completion for transport results."""

    @staticmethod
    def check_status(
        payload: Optional[Any],
        response: Optional[TransportResponse],
        error: Optional[BaseException],
    ) -> Tuple[Optional[Any], Optional[BaseException]]:
        """Attach an UnsuccessfulStatusCode to non-2xx responses.

        A transport error, when present, wins over the status error.
        """

        if response is None or response.ok:
            return payload, error
        status_error = UnsuccessfulStatusCode(
            response.status, f"Error status code: {response.status}"
        )
        return payload, error or status_error

    @staticmethod
    def complete(
        data: Optional[bytes], error: Optional[BaseException], decoder: Decoder
    ) -> Outcome[Any]:
        """Decode `data` unless an error is already known or there is no data."""

        if error is not None:
            return Outcome(error=error)
        if not data:
            return Outcome(error=MissingData())
        try:
            value = decoder(data)
        except DecodeError as e:
            _log_decode_failure(decoder, data, e)
            return Outcome(error=e)
        except Exception as e:
            wrapped = DecodeError(f"decoder {decoder!r} failed: {e}", cause=e, raw=data)
            _log_decode_failure(decoder, data, wrapped)
            return Outcome(error=wrapped)
        return Outcome(value=value)

    def dispatch(
        self,
        data: Optional[bytes],
        response: Optional[TransportResponse],
        error: Optional[BaseException],
        decoder: Optional[Decoder] = None,
    ) -> Outcome[Any]:
        data, error = self.check_status(data, response, error)
        if decoder is None:
            return Outcome(value=data, error=error)
        return self.complete(data, error, decoder)


def _log_decode_failure(decoder: Decoder, data: bytes, error: DecodeError) -> None:
    """Debug-only diagnostics; never changes the Outcome."""

    if not log.isEnabledFor(logging.DEBUG):
        return
    snippet = data[:_DIAGNOSTIC_MAX_BYTES]
    try:
        raw_json: Any = json.loads(snippet.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raw_json = None
    log.debug(
        "decode_failed",
        extra={"decoder": repr(decoder), "error": str(error), "json": raw_json},
    )
