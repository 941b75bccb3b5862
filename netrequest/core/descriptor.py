from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .wire import CONTENT_LENGTH_HEADER, CONTENT_TYPE_HEADER, CachePolicy, Method


@dataclass(frozen=True)
class RequestDescriptor:
    """
    A fully assembled, not-yet-sent HTTP request.

    Invariants
    - Frozen; headers are exposed as a read-only mapping
    - At most one of `body` (in-memory bytes) and `body_file` (streamed from disk)
    - url is absolute (or scheme-relative when built with Scheme.NONE)
    """

    method: Method
    url: str
    headers: Mapping[str, str] = field(default_factory=dict, hash=False)
    body: Optional[bytes] = None
    body_file: Optional[str] = None
    timeout: float = 45.0
    cache_policy: CachePolicy = CachePolicy.RELOAD_IGNORING_LOCAL_CACHE_DATA

    def __post_init__(self) -> None:
        if not isinstance(self.method, Method):
            object.__setattr__(self, "method", Method(self.method))
        if self.body is not None and self.body_file is not None:
            raise ValueError("body and body_file are mutually exclusive")
        if self.body is not None and not isinstance(self.body, bytes):
            object.__setattr__(self, "body", bytes(self.body))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get(CONTENT_TYPE_HEADER)

    @property
    def content_length(self) -> Optional[int]:
        raw = self.headers.get(CONTENT_LENGTH_HEADER)
        return int(raw) if raw is not None else None

    def with_headers(self, headers: Mapping[str, str]) -> "RequestDescriptor":
        """Return a copy with `headers` merged over the existing ones."""

        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)

    def with_body(
        self, body: Optional[bytes] = None, *, body_file: Optional[str] = None
    ) -> "RequestDescriptor":
        return replace(self, body=body, body_file=body_file)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe summary. The body is reported by size only."""

        return {
            "method": self.method.value,
            "url": self.url,
            "headers": dict(self.headers),
            "body_bytes": len(self.body) if self.body is not None else None,
            "body_file": self.body_file,
            "timeout": self.timeout,
            "cache_policy": self.cache_policy.value,
        }
