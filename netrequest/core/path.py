from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .errors import InvalidOriginalPath, InvalidPathArgument

log = logging.getLogger("netrequest.endpoint")


@dataclass(frozen=True)
class Endpoint:
    """
    A server path, expected to start with `/`.

    A missing leading slash does not block construction; it is reported as a
    warning on the `netrequest.endpoint` logger so callers can subscribe to it.
    """

    raw_value: str

    def __post_init__(self) -> None:
        if not isinstance(self.raw_value, str):
            raise TypeError("raw_value must be a string")
        if not self.raw_value.startswith("/"):
            log.warning("endpoint_missing_leading_slash", extra={"endpoint": self.raw_value})

    def __str__(self) -> str:
        return self.raw_value


@dataclass(frozen=True)
class PathTemplate:
    """
    A URL path with `{name}` placeholders substituted from `arguments`.

    Invariants
    - original_path is non-empty
    - every argument key appears literally as `{key}` in original_path
    - construction either fully succeeds or raises; no half-resolved instance

    Values are inserted verbatim. Callers are responsible for URL-safety.
    """

    original_path: str
    arguments: Mapping[str, str] = field(default_factory=dict, hash=False)
    path: str = field(init=False, default="")

    def __post_init__(self) -> None:
        if not self.original_path:
            raise InvalidOriginalPath("original path must be non-empty")

        resolved = self.original_path
        for key, value in self.arguments.items():
            previous = resolved
            resolved = resolved.replace("{" + key + "}", value)
            if resolved == previous:
                raise InvalidPathArgument(key)

        object.__setattr__(self, "arguments", MappingProxyType(dict(self.arguments)))
        object.__setattr__(self, "path", resolved)

    @classmethod
    def from_endpoint(
        cls, endpoint: Endpoint, arguments: Optional[Mapping[str, str]] = None
    ) -> "PathTemplate":
        return cls(original_path=endpoint.raw_value, arguments=dict(arguments or {}))

    def __str__(self) -> str:
        return self.path
