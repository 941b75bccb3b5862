"""HTTP transport capability and its standard-library implementation.

Security notes:
- Treat response bodies as untrusted input.
- Uses the default SSL context (verification ON).
"""

from __future__ import annotations

import logging
import os
import shutil
import ssl
import tempfile
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from http.client import HTTPException
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from netrequest.core.descriptor import RequestDescriptor
from netrequest.core.errors import NetworkError
from netrequest.core.wire import CONTENT_LENGTH_HEADER

log = logging.getLogger("netrequest.transport")


@dataclass(frozen=True, slots=True)
class TransportResponse:
    """Status line and headers of a completed exchange."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


# (payload, response, error); payload is bytes for send, a file path for downloads.
Completion = Callable[[Optional[Any], Optional[TransportResponse], Optional[BaseException]], None]


class TransportTask:
    """Cancellable handle for one in-flight transport call."""

    def __init__(self, future: "Future[Any]"):
        self._future = future

    def cancel(self) -> bool:
        """Cancel if not yet started. A cancelled task never completes."""

        return self._future.cancel()

    def cancelled(self) -> bool:
        return self._future.cancelled()

    def done(self) -> bool:
        return self._future.done()

    def add_done_callback(self, fn: Callable[["TransportTask"], None]) -> None:
        """Call `fn(self)` once the task finishes or is cancelled."""

        self._future.add_done_callback(lambda _f: fn(self))


class Transport(ABC):
    """
    The HTTP capability a RequestClient sends through.

    Implementations call `on_complete` exactly once per task unless the task
    is cancelled before it starts.
    """

    @abstractmethod
    def send(self, descriptor: RequestDescriptor, on_complete: Completion) -> TransportTask:
        raise NotImplementedError

    @abstractmethod
    def send_for_download(
        self, descriptor: RequestDescriptor, on_complete: Completion
    ) -> TransportTask:
        raise NotImplementedError

    def close(self) -> None:
        """Release resources held by the transport."""


class UrllibTransport(Transport):
    """Transport backed by urllib and a worker thread pool.

    Non-2xx responses are delivered as responses (status + body), not errors.
    Connectivity failures are delivered as NetworkError.
    """

    def __init__(self, *, max_workers: int = 4, download_dir: Optional[str] = None):
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, int(max_workers)), thread_name_prefix="netrequest"
        )
        self._download_dir = download_dir
        self._ctx = ssl.create_default_context()

    def send(self, descriptor: RequestDescriptor, on_complete: Completion) -> TransportTask:
        return self._submit(descriptor, on_complete, self._fetch)

    def send_for_download(
        self, descriptor: RequestDescriptor, on_complete: Completion
    ) -> TransportTask:
        return self._submit(descriptor, on_complete, self._fetch_to_file)

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _submit(
        self,
        descriptor: RequestDescriptor,
        on_complete: Completion,
        perform: Callable[[RequestDescriptor], Tuple[Any, Optional[TransportResponse]]],
    ) -> TransportTask:
        def run() -> None:
            try:
                payload, response = perform(descriptor)
            except Exception as e:
                error = e
                if not isinstance(e, NetworkError):
                    error = NetworkError(f"transport failure: {e}", cause=e)
                log.info(
                    "transport_failed",
                    extra={
                        "method": descriptor.method.value,
                        "url": descriptor.url,
                        "error": str(error),
                    },
                )
                on_complete(None, None, error)
                return
            on_complete(payload, response, None)

        return TransportTask(self._executor.submit(run))

    def _open(self, descriptor: RequestDescriptor):
        """Open the URL; HTTPError is returned as a response-like object."""

        headers = dict(descriptor.headers)
        cache_control = descriptor.cache_policy.cache_control()
        if cache_control and "Cache-Control" not in headers:
            headers["Cache-Control"] = cache_control

        body_handle = None
        data: Any = descriptor.body
        if descriptor.body_file is not None:
            try:
                size = os.stat(descriptor.body_file).st_size
                body_handle = open(descriptor.body_file, "rb")
            except OSError as e:
                raise NetworkError(f"cannot open upload file: {e.strerror or e}", cause=e) from e
            headers.setdefault(CONTENT_LENGTH_HEADER, str(size))
            data = body_handle

        try:
            req = Request(
                url=descriptor.url, data=data, headers=headers, method=descriptor.method.value
            )
            return urlopen(req, timeout=descriptor.timeout, context=self._ctx)
        except HTTPError as e:
            return e
        except (URLError, OSError, ValueError, HTTPException) as e:
            raise NetworkError(f"network error: {e}", cause=e) from e
        finally:
            if body_handle is not None:
                body_handle.close()

    def _fetch(self, descriptor: RequestDescriptor) -> Tuple[bytes, TransportResponse]:
        resp = self._open(descriptor)
        try:
            with resp:
                body = resp.read()
                return body, _response_of(resp)
        except (OSError, HTTPException) as e:
            raise NetworkError(f"network error: {e}", cause=e) from e

    def _fetch_to_file(self, descriptor: RequestDescriptor) -> Tuple[str, TransportResponse]:
        resp = self._open(descriptor)
        with resp:
            try:
                out = tempfile.NamedTemporaryFile(
                    prefix="netrequest-", suffix=".download", dir=self._download_dir, delete=False
                )
            except OSError as e:
                raise NetworkError(f"cannot create download file: {e}", cause=e) from e
            try:
                with out:
                    shutil.copyfileobj(resp, out)
            except (OSError, HTTPException) as e:
                # No partial downloads are left behind.
                os.unlink(out.name)
                raise NetworkError(f"network error: {e}", cause=e) from e
            return out.name, _response_of(resp)


def _response_of(resp) -> TransportResponse:
    status = int(getattr(resp, "status", None) or getattr(resp, "code", 0) or 0)
    headers = {k: v for k, v in (resp.headers.items() if resp.headers else [])}
    return TransportResponse(status=status, headers=headers)
