from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, Callable, Optional

from netrequest.core.descriptor import RequestDescriptor
from netrequest.core.multipart import DEFAULT_PARAMETER_NAME, MultipartFormEncoder

from .builder import RequestBuilder
from .config import ClientConfig
from .decoding import Decoder
from .dispatch import Outcome, ResponseDispatcher
from .transport import Completion, Transport, TransportResponse, TransportTask, UrllibTransport

log = logging.getLogger("netrequest.client")

OutcomeCallback = Callable[[Outcome[Any]], None]


class RequestTask:
    """Handle for one issued request.

    The outcome is delivered once: to the completion callback and to
    `result()`. A cancelled task delivers nothing; work dropped by a closed
    transport cancels the task.
    """

    def __init__(self) -> None:
        self._future: "Future[Outcome[Any]]" = Future()
        self._transport_task: Optional[TransportTask] = None

    @property
    def transport_task(self) -> Optional[TransportTask]:
        return self._transport_task

    def cancel(self) -> bool:
        if self._transport_task is not None:
            self._transport_task.cancel()
        return self._future.cancel()

    def cancelled(self) -> bool:
        return self._future.cancelled()

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> Outcome[Any]:
        return self._future.result(timeout=timeout)

    def _attach(self, transport_task: TransportTask) -> None:
        self._transport_task = transport_task
        transport_task.add_done_callback(self._on_transport_done)

    def _on_transport_done(self, transport_task: TransportTask) -> None:
        # Work dropped by the transport (e.g. on close) will never complete.
        if transport_task.cancelled():
            self._future.cancel()

    def _resolve(self, outcome: Outcome[Any], callback: Optional[OutcomeCallback]) -> None:
        if not self._future.set_running_or_notify_cancel():
            return
        self._future.set_result(outcome)
        if callback is not None:
            callback(outcome)


class RequestClient(RequestBuilder):
    """Builds and sends requests for one domain.

    `domain` is fixed; `timeout`, `default_scheme`, `port` and `cache_policy`
    may be changed but are meant to be set once, before requests are in flight.

    Security notes:
    - Response bodies are untrusted; typed calls validate them with a decoder.
    - File bytes are never logged.
    """

    def __init__(
        self,
        domain: str,
        *,
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
    ):
        cfg = config or ClientConfig()
        super().__init__(
            domain,
            timeout=cfg.timeout,
            default_scheme=cfg.default_scheme,
            port=cfg.port,
            cache_policy=cfg.cache_policy,
        )
        self.max_upload_bytes = cfg.max_upload_bytes
        self._transport = transport or UrllibTransport(max_workers=cfg.max_workers)
        self._dispatcher = ResponseDispatcher()

    @property
    def transport(self) -> Transport:
        return self._transport

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "RequestClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def send_raw(self, descriptor: RequestDescriptor, completion: Completion) -> TransportTask:
        """Send without any status check; `completion(data, response, error)`."""

        log.debug("request_sent", extra={"method": descriptor.method.value, "url": descriptor.url})
        return self._transport.send(descriptor, completion)

    def send(
        self,
        descriptor: RequestDescriptor,
        decoder: Optional[Decoder] = None,
        completion: Optional[OutcomeCallback] = None,
    ) -> RequestTask:
        """Send and classify the result.

        Without a decoder the Outcome value is the raw body (possibly alongside
        a status error). With a decoder the value is the decoded body.
        """

        task = RequestTask()

        def on_complete(
            data: Optional[bytes],
            response: Optional[TransportResponse],
            error: Optional[BaseException],
        ) -> None:
            outcome = self._dispatcher.dispatch(data, response, error, decoder)
            _log_outcome(descriptor, response, outcome)
            task._resolve(outcome, completion)

        task._attach(self.send_raw(descriptor, on_complete))
        return task

    def send_download(
        self, descriptor: RequestDescriptor, completion: Optional[OutcomeCallback] = None
    ) -> RequestTask:
        """Download to a temporary file; the Outcome value is its path."""

        task = RequestTask()

        def on_complete(
            location: Optional[str],
            response: Optional[TransportResponse],
            error: Optional[BaseException],
        ) -> None:
            location, error = self._dispatcher.check_status(location, response, error)
            outcome: Outcome[Any] = Outcome(value=location, error=error)
            _log_outcome(descriptor, response, outcome)
            task._resolve(outcome, completion)

        log.debug("download_sent", extra={"url": descriptor.url})
        task._attach(self._transport.send_for_download(descriptor, on_complete))
        return task

    def send_upload(
        self,
        descriptor: RequestDescriptor,
        file_path: str,
        decoder: Optional[Decoder] = None,
        completion: Optional[OutcomeCallback] = None,
    ) -> RequestTask:
        """Stream `file_path` as the raw request body."""

        return self.send(descriptor.with_body(body_file=file_path), decoder, completion)

    def send_multipart_upload(
        self,
        descriptor: RequestDescriptor,
        file_path: str,
        content_type: str,
        *,
        parameter_name: str = DEFAULT_PARAMETER_NAME,
        boundary: Optional[str] = None,
        decoder: Optional[Decoder] = None,
        completion: Optional[OutcomeCallback] = None,
    ) -> RequestTask:
        """Encode `file_path` as a multipart/form-data body and send it.

        Raises:
          InvalidFile, UnableToEncode: before anything is sent.
        """

        encoder = MultipartFormEncoder(
            parameter_name=parameter_name, max_upload_bytes=self.max_upload_bytes
        )
        prepared = encoder.configure(descriptor, file_path, content_type, boundary=boundary)
        return self.send(prepared, decoder, completion)


def _log_outcome(
    descriptor: RequestDescriptor, response: Optional[TransportResponse], outcome: Outcome[Any]
) -> None:
    log.info(
        "request_completed",
        extra={
            "method": descriptor.method.value,
            "url": descriptor.url,
            "status_code": response.status if response is not None else None,
            "error": type(outcome.error).__name__ if outcome.error is not None else None,
        },
    )
