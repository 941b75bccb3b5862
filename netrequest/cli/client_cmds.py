from __future__ import annotations

import argparse
import json
import mimetypes
import os
import shutil
import sys
from concurrent.futures import CancelledError
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Dict, List, Optional

from netrequest.client import ClientConfig, Outcome, RequestClient
from netrequest.core.descriptor import RequestDescriptor
from netrequest.core.errors import MultipartError, PathError, UnsuccessfulStatusCode
from netrequest.core.multipart import MultipartFormEncoder
from netrequest.core.path import PathTemplate
from netrequest.core.wire import Method, Scheme


def _print_json(obj: object) -> None:
    """Print JSON to stdout."""
    print(json.dumps(obj, indent=2, sort_keys=True, default=str))


def _parse_pairs(values: Optional[List[str]], what: str) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for item in values or []:
        if "=" not in item:
            raise ValueError(f"{what} must look like name=value: {item!r}")
        k, v = item.split("=", 1)
        out[k] = v
    return out


def _client(args: argparse.Namespace) -> RequestClient:
    base = ClientConfig.from_env()
    cfg = ClientConfig(
        timeout=args.timeout or base.timeout,
        default_scheme=Scheme(args.scheme) if args.scheme else base.default_scheme,
        port=args.port if args.port is not None else base.port,
        cache_policy=base.cache_policy,
        max_upload_bytes=args.max_upload_bytes or base.max_upload_bytes,
        max_workers=1,
    )
    return RequestClient(args.domain, config=cfg)


def _path(args: argparse.Namespace):
    path_args = _parse_pairs(args.path_arg, "--path-arg")
    if path_args:
        return PathTemplate(args.path, path_args)
    return args.path


def _fail(outcome: Outcome) -> int:
    err = outcome.error
    if isinstance(err, UnsuccessfulStatusCode) and isinstance(outcome.value, bytes):
        print(outcome.value.decode("utf-8", errors="replace"), file=sys.stderr)
    print(f"error: {err}", file=sys.stderr)
    return 2


def _print_body(body: Optional[bytes]) -> None:
    if not body:
        return
    try:
        _print_json(json.loads(body.decode("utf-8")))
    except (UnicodeDecodeError, ValueError):
        sys.stdout.write(body.decode("utf-8", errors="replace"))


def _build(client: RequestClient, args: argparse.Namespace) -> Optional[RequestDescriptor]:
    method = Method(args.method.upper())
    path = _path(args)
    query = _parse_pairs(args.query, "--query")
    body = args.data.encode("utf-8") if getattr(args, "data", None) is not None else None
    if method is Method.GET:
        return client.get(path, query, content_type=args.content_type)
    builder = {
        Method.POST: client.post,
        Method.PUT: client.put,
        Method.PATCH: client.patch,
        Method.DELETE: client.delete,
    }[method]
    return builder(path, body, query, content_type=args.content_type)


def cmd_build(args: argparse.Namespace) -> int:
    """Print the descriptor a request would use, without sending it."""
    with _client(args) as c:
        desc = _build(c, args)
    if desc is None:
        print("error: could not build a request URL", file=sys.stderr)
        return 2
    _print_json(desc.to_dict())
    return 0


def cmd_send(args: argparse.Namespace) -> int:
    """Send a request and print the response body."""
    with _client(args) as c:
        desc = _build(c, args)
        if desc is None:
            print("error: could not build a request URL", file=sys.stderr)
            return 2
        outcome = c.send(desc).result(timeout=desc.timeout + 5)
    if not outcome.ok:
        return _fail(outcome)
    _print_body(outcome.value)
    return 0


def cmd_download(args: argparse.Namespace) -> int:
    """Download a resource and save it to --out."""
    with _client(args) as c:
        desc = c.download(_path(args), _parse_pairs(args.query, "--query"))
        if desc is None:
            print("error: could not build a request URL", file=sys.stderr)
            return 2
        outcome = c.send_download(desc).result(timeout=desc.timeout + 5)
    if not outcome.ok:
        if outcome.value:
            os.unlink(outcome.value)
        return _fail(outcome)
    out_path = args.out or os.path.basename(desc.url.split("?", 1)[0]) or "download.bin"
    shutil.move(outcome.value, out_path)
    _print_json({"saved_to": os.path.abspath(out_path)})
    return 0


def cmd_upload(args: argparse.Namespace) -> int:
    """Upload a file as multipart/form-data."""
    content_type = (
        args.content_type or mimetypes.guess_type(args.file)[0] or "application/octet-stream"
    )
    with _client(args) as c:
        desc = c.multipart_form_data_post(_path(args), _parse_pairs(args.query, "--query"))
        if desc is None:
            print("error: could not build a request URL", file=sys.stderr)
            return 2
        task = c.send_multipart_upload(
            desc, args.file, content_type, parameter_name=args.parameter_name
        )
        outcome = task.result(timeout=desc.timeout + 5)
    if not outcome.ok:
        return _fail(outcome)
    _print_body(outcome.value)
    return 0


def cmd_encode(args: argparse.Namespace) -> int:
    """Write a multipart/form-data body to a file and print its headers.

    No network access.
    """
    content_type = (
        args.content_type or mimetypes.guess_type(args.file)[0] or "application/octet-stream"
    )
    encoder = MultipartFormEncoder(parameter_name=args.parameter_name, boundary=args.boundary)
    encoded = encoder.encode_file(args.file, content_type)
    with open(args.out, "wb") as f:
        f.write(encoded.body)
    _print_json({"saved_to": os.path.abspath(args.out), "headers": encoded.headers})
    return 0


def _add_connection_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--domain", required=True, help="Host name to send requests to")
    p.add_argument("--scheme", choices=["http", "https", "ws"], default=None, help="URL scheme")
    p.add_argument("--port", type=int, default=None, help="Port")
    p.add_argument("--timeout", type=float, default=None, help="Per-request timeout (seconds)")
    p.add_argument("--max-upload-bytes", type=int, default=None, help="Client-side upload cap")


def _add_path_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("path", help="Request path, may contain {name} placeholders")
    p.add_argument(
        "--path-arg", action="append", default=None, help="Placeholder value name=value"
    )
    p.add_argument("--query", action="append", default=None, help="Query item name=value")


def register_client_commands(sub: argparse._SubParsersAction) -> None:
    """Register the request commands."""

    for name, func, help_text in (
        ("send", cmd_send, "Send a request and print the response"),
        ("build", cmd_build, "Print the request descriptor without sending"),
    ):
        p = sub.add_parser(name, help=help_text)
        _add_connection_args(p)
        _add_path_args(p)
        p.add_argument(
            "--method", default="GET", choices=[m.value for m in Method], type=str.upper
        )
        p.add_argument("--data", default=None, help="Request body (UTF-8 text)")
        p.add_argument("--content-type", default=None, help="Content-Type header")
        p.set_defaults(func=func)

    dl = sub.add_parser("download", help="Download a resource to a file")
    _add_connection_args(dl)
    _add_path_args(dl)
    dl.add_argument("--out", default=None, help="Output file path")
    dl.set_defaults(func=cmd_download)

    up = sub.add_parser("upload", help="Upload a file as multipart/form-data")
    _add_connection_args(up)
    _add_path_args(up)
    up.add_argument("file", help="Path to local file")
    up.add_argument("--parameter-name", default="image", help="Form field name")
    up.add_argument("--content-type", default=None, help="MIME type of the file")
    up.set_defaults(func=cmd_upload)

    enc = sub.add_parser("encode", help="Write a multipart/form-data body to a file")
    enc.add_argument("file", help="Path to local file")
    enc.add_argument("--out", required=True, help="Output body file")
    enc.add_argument("--parameter-name", default="image", help="Form field name")
    enc.add_argument("--content-type", default=None, help="MIME type of the file")
    enc.add_argument("--boundary", default=None, help="Fixed boundary (default: random)")
    enc.set_defaults(func=cmd_encode)


HANDLED_ERRORS = (PathError, MultipartError, ValueError, FuturesTimeoutError, CancelledError)
