"""End-to-end tests against a local stdlib HTTP server."""

from __future__ import annotations

import json
import os
import threading
import time
from concurrent.futures import CancelledError
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
from pydantic import BaseModel

from netrequest.client.config import ClientConfig
from netrequest.client.decoding import JsonDecoder
from netrequest.client.request_client import RequestClient
from netrequest.client.transport import UrllibTransport
from netrequest.core.errors import NetworkError, UnsuccessfulStatusCode
from netrequest.core.path import PathTemplate
from netrequest.core.wire import Scheme


class Echo(BaseModel):
    method: str
    path: str
    content_type: str = ""
    cache_control: str = ""
    body_len: int


class _Handler(BaseHTTPRequestHandler):
    def log_message(self, format, *args):  # noqa: A002
        pass

    slow_started = threading.Event()

    def _echo(self) -> None:
        if self.path.startswith("/slow"):
            _Handler.slow_started.set()
            time.sleep(0.3)
        if self.path.startswith("/missing"):
            self.send_response(404)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return
        if self.path.startswith("/empty"):
            self.send_response(204)
            self.end_headers()
            return
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        payload = json.dumps(
            {
                "method": self.command,
                "path": self.path,
                "content_type": self.headers.get("Content-Type") or "",
                "cache_control": self.headers.get("Cache-Control") or "",
                "body_len": len(body),
            }
        ).encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    do_GET = _echo
    do_POST = _echo
    do_PUT = _echo
    do_PATCH = _echo
    do_DELETE = _echo


@pytest.fixture
def server():
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    t = threading.Thread(target=httpd.serve_forever, daemon=True)
    t.start()
    try:
        yield httpd
    finally:
        httpd.shutdown()
        httpd.server_close()


@pytest.fixture
def client(server):
    cfg = ClientConfig(timeout=5, default_scheme=Scheme.HTTP, port=server.server_address[1])
    with RequestClient("127.0.0.1", config=cfg) as c:
        yield c


def test_get_with_template_and_query(client):
    desc = client.get(PathTemplate("/users/{id}", {"id": "7"}), {"full": "1"})

    outcome = client.send(desc, JsonDecoder(Echo)).result(timeout=10)

    assert outcome.ok, outcome.error
    assert outcome.value.method == "GET"
    assert outcome.value.path == "/users/7?full=1"
    assert outcome.value.cache_control == "no-cache"


def test_post_body(client):
    outcome = client.send(client.post("/things", b'{"a": 1}'), JsonDecoder(Echo)).result(timeout=10)

    assert outcome.value.method == "POST"
    assert outcome.value.content_type == "application/json"
    assert outcome.value.body_len == 8


def test_multipart_upload_round_trip(client, tmp_path):
    f = tmp_path / "a.png"
    f.write_bytes(b"\x89PNG" * 10)

    task = client.send_multipart_upload(
        client.multipart_form_data_post("/upload"), str(f), "image/png", decoder=JsonDecoder(Echo)
    )
    outcome = task.result(timeout=10)

    assert outcome.value.content_type.startswith("multipart/form-data; boundary=")
    assert outcome.value.body_len > 40


def test_streamed_upload_sends_file(client, tmp_path):
    f = tmp_path / "raw.bin"
    f.write_bytes(b"z" * 123)

    desc = client.put("/blob", content_type="application/octet-stream")
    outcome = client.send_upload(desc, str(f), JsonDecoder(Echo)).result(timeout=10)

    assert outcome.value.body_len == 123


def test_status_error(client):
    outcome = client.send(client.get("/missing"), JsonDecoder(Echo)).result(timeout=10)

    assert isinstance(outcome.error, UnsuccessfulStatusCode)
    assert outcome.error.status_code == 404


def test_success_without_body_is_missing_data(client):
    outcome = client.send(client.get("/empty"), JsonDecoder(Echo)).result(timeout=10)

    assert outcome.error is not None
    assert isinstance(outcome.error, NetworkError)


def test_download_writes_a_file(client):
    outcome = client.send_download(client.download("/files/a.json")).result(timeout=10)

    try:
        assert outcome.ok
        with open(outcome.value, "rb") as f:
            assert json.loads(f.read())["path"] == "/files/a.json"
    finally:
        os.unlink(outcome.value)


def test_connection_refused_is_network_error():
    cfg = ClientConfig(timeout=2, default_scheme=Scheme.HTTP, port=1)
    with RequestClient("127.0.0.1", config=cfg) as c:
        outcome = c.send(c.get("/x")).result(timeout=10)

    assert isinstance(outcome.error, NetworkError)
    assert outcome.error.cause is not None


def test_scheme_relative_url_completes_with_network_error(client):
    seen = []

    desc = client.get("/x", scheme=Scheme.NONE)
    outcome = client.send(desc, completion=seen.append).result(timeout=10)

    assert desc.url.startswith("//127.0.0.1:")
    assert isinstance(outcome.error, NetworkError)
    assert isinstance(outcome.error.cause, ValueError)
    assert seen == [outcome]


def test_close_cancels_queued_requests(server):
    _Handler.slow_started.clear()
    cfg = ClientConfig(timeout=5, default_scheme=Scheme.HTTP, port=server.server_address[1])
    client = RequestClient("127.0.0.1", config=cfg, transport=UrllibTransport(max_workers=1))

    first = client.send(client.get("/slow"))
    second = client.send(client.get("/x"))
    assert _Handler.slow_started.wait(5)
    client.close()

    assert first.result(timeout=10).ok
    assert second.cancelled()
    with pytest.raises(CancelledError):
        second.result(timeout=1)


def test_failed_download_leaves_no_partial_file(server, tmp_path, monkeypatch):
    def broken_copy(src, dst, *args, **kwargs):
        dst.write(b"partial")
        raise OSError("connection reset while reading")

    monkeypatch.setattr("netrequest.client.transport.shutil.copyfileobj", broken_copy)
    cfg = ClientConfig(timeout=5, default_scheme=Scheme.HTTP, port=server.server_address[1])
    transport = UrllibTransport(max_workers=1, download_dir=str(tmp_path))

    with RequestClient("127.0.0.1", config=cfg, transport=transport) as c:
        outcome = c.send_download(c.download("/files/a.json")).result(timeout=10)

    assert isinstance(outcome.error, NetworkError)
    assert list(tmp_path.iterdir()) == []
