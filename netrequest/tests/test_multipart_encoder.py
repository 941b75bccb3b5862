from __future__ import annotations

import pytest
from fastapi import FastAPI, File, UploadFile
from fastapi.testclient import TestClient

from netrequest.core.descriptor import RequestDescriptor
from netrequest.core.errors import InvalidFile, UnableToEncode
from netrequest.core.multipart import MultipartFormEncoder, encode_multipart, new_boundary
from netrequest.core.wire import Method


def test_single_part_frame_is_exact():
    body = encode_multipart("XXX", "file", bytes([0x89, 0x50]), "a.png", "image/png")

    assert body == (
        b"--XXX\r\n"
        b'Content-Disposition: form-data; name="file"; filename="a.png"\r\n'
        b"Content-Type: image/png\r\n\r\n"
        b"\x89\x50\r\n"
        b"--XXX--\r\n"
    )


def test_encoding_is_deterministic():
    args = ("b0undary", "doc", b"\x00\x01payload", "résumé.pdf", "application/pdf")

    assert encode_multipart(*args) == encode_multipart(*args)


def test_unencodable_file_name_fails():
    with pytest.raises(UnableToEncode):
        encode_multipart("XXX", "file", b"x", "bad\udc80name", "text/plain")


def test_content_length_matches_body_for_empty_file():
    encoded = MultipartFormEncoder(boundary="XXX").encode(b"", "empty.bin", "application/octet-stream")

    assert encoded.headers["Content-Length"] == str(len(encoded.body))
    assert encoded.headers["Content-Type"] == "multipart/form-data; boundary=XXX"
    assert b"\r\n\r\n\r\n--XXX--\r\n" in encoded.body


def test_fresh_boundary_per_call_without_fixed_boundary():
    encoder = MultipartFormEncoder()
    first = encoder.encode(b"a", "a.txt", "text/plain")
    second = encoder.encode(b"a", "a.txt", "text/plain")

    assert first.boundary != second.boundary
    assert new_boundary() != new_boundary()


def test_encode_file_uses_last_path_component(tmp_path):
    f = tmp_path / "photo.jpg"
    f.write_bytes(b"\xff\xd8\xff")

    encoded = MultipartFormEncoder(boundary="B").encode_file(str(f), "image/jpeg")

    assert b'name="image"; filename="photo.jpg"' in encoded.body
    assert encoded.body.endswith(b"\xff\xd8\xff\r\n--B--\r\n")


def test_missing_file_fails(tmp_path):
    with pytest.raises(InvalidFile):
        MultipartFormEncoder().encode_file(str(tmp_path / "nope.png"), "image/png")


def test_oversize_file_fails(tmp_path):
    f = tmp_path / "big.bin"
    f.write_bytes(b"x" * 32)

    with pytest.raises(InvalidFile):
        MultipartFormEncoder(max_upload_bytes=16).encode_file(str(f), "application/octet-stream")


def test_configure_returns_a_new_descriptor(tmp_path):
    f = tmp_path / "a.png"
    f.write_bytes(b"\x89PNG")
    desc = RequestDescriptor(method=Method.POST, url="https://example.com/upload")

    configured = MultipartFormEncoder(parameter_name="file", boundary="XXX").configure(
        desc, str(f), "image/png"
    )

    assert desc.body is None
    assert configured.body.startswith(b"--XXX\r\n")
    assert configured.content_type == "multipart/form-data; boundary=XXX"
    assert configured.content_length == len(configured.body)
    assert configured.headers["Accept"] == "*/*"


def _echo_app() -> FastAPI:
    app = FastAPI()

    @app.post("/upload")
    async def upload(file: UploadFile = File(...)):
        data = await file.read()
        return {"filename": file.filename, "content_type": file.content_type, "hex": data.hex()}

    return app


@pytest.mark.parametrize("payload", [b"", b"\x89PNG\r\n\x1a\n\x00\xff", b"--XXX--\r\n" * 3])
def test_body_parses_with_a_real_multipart_parser(payload):
    """The encoded body is accepted by python-multipart (via FastAPI)."""

    encoded = MultipartFormEncoder(parameter_name="file").encode(payload, "pic.png", "image/png")
    client = TestClient(_echo_app())

    r = client.post("/upload", content=encoded.body, headers=encoded.headers)

    assert r.status_code == 200
    data = r.json()
    assert data["filename"] == "pic.png"
    assert data["content_type"] == "image/png"
    assert bytes.fromhex(data["hex"]) == payload
