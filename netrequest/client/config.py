from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from netrequest.core.multipart import DEFAULT_MAX_UPLOAD_BYTES
from netrequest.core.wire import CachePolicy, Scheme


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Initial settings for a RequestClient.

    The client copies these at construction; later changes go through the
    client's own attributes.
    """

    timeout: float = 45.0
    default_scheme: Scheme = Scheme.HTTPS
    port: Optional[int] = None
    cache_policy: CachePolicy = CachePolicy.RELOAD_IGNORING_LOCAL_CACHE_DATA
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    max_workers: int = 4

    @staticmethod
    def from_env() -> "ClientConfig":
        """Create a config from environment variables.

        - NETREQUEST_TIMEOUT (seconds, default 45)
        - NETREQUEST_SCHEME (http, https, ws; default https)
        - NETREQUEST_PORT (default unset)
        - NETREQUEST_MAX_UPLOAD_BYTES (default 25 MiB)
        - NETREQUEST_MAX_WORKERS (default 4)

        Invalid values fall back to the defaults.
        """

        return ClientConfig(
            timeout=_env_float("NETREQUEST_TIMEOUT", 45.0),
            default_scheme=_env_scheme("NETREQUEST_SCHEME", Scheme.HTTPS),
            port=_env_optional_int("NETREQUEST_PORT"),
            max_upload_bytes=_env_int("NETREQUEST_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
            max_workers=max(1, _env_int("NETREQUEST_MAX_WORKERS", 4)),
        )


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable."""

    raw = os.environ.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.environ.get(name, "").strip()
    try:
        return int(raw) if raw else None
    except ValueError:
        return None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    try:
        value = float(raw) if raw else default
    except ValueError:
        return default
    return value if value > 0 else default


def _env_scheme(name: str, default: Scheme) -> Scheme:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    try:
        return Scheme(raw)
    except ValueError:
        return default
