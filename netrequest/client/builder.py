from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import quote, urlunsplit

from netrequest.core.descriptor import RequestDescriptor
from netrequest.core.path import Endpoint, PathTemplate
from netrequest.core.wire import CONTENT_TYPE_HEADER, CachePolicy, ContentType, Method, Scheme

log = logging.getLogger("netrequest.client")

PathLike = Union[str, PathTemplate, Endpoint]
QueryItems = Union[Mapping[str, Optional[str]], Iterable[Tuple[str, Optional[str]]]]
ContentTypeLike = Union[ContentType, str]

_PATH_SAFE = "/:@!$&'()*+,;=-._~%"
_QUERY_SAFE = "-._~!$'()*,;:@/?"
_HOST_DELIMITERS = frozenset("/?#@[]\\")


def _path_string(path: PathLike) -> str:
    if isinstance(path, PathTemplate):
        return path.path
    if isinstance(path, Endpoint):
        return path.raw_value
    return path


def _content_type_value(content_type: ContentTypeLike) -> str:
    if isinstance(content_type, ContentType):
        return content_type.raw_value
    return str(content_type)


def _netloc(domain: str, port: Optional[int]) -> Optional[str]:
    """Host[:port] for a URL, or None if the domain or port is unusable."""

    if not domain or any(c in _HOST_DELIMITERS or c.isspace() for c in domain):
        return None
    host = domain
    if ":" in domain:
        # Only bare IPv6 literals may contain colons.
        if domain.count(":") < 2:
            return None
        host = f"[{domain}]"
    if port is None:
        return host
    if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= 65535:
        return None
    return f"{host}:{port}"


def encode_query(query: QueryItems) -> str:
    """Percent-encode query items. A None value emits the bare name."""

    items = list(query.items()) if isinstance(query, Mapping) else list(query)
    parts = []
    for name, value in items:
        key = quote(str(name), safe=_QUERY_SAFE)
        if value is None:
            parts.append(key)
        else:
            parts.append(f"{key}={quote(str(value), safe=_QUERY_SAFE)}")
    return "&".join(parts)


class RequestBuilder:
    """Builds RequestDescriptors against one domain.

    Every builder returns None, never raises, when the URL cannot be assembled;
    callers treat None as "could not build a request".

    Time/Space: O(len(url)).
    """

    def __init__(
        self,
        domain: str,
        *,
        timeout: float = 45.0,
        default_scheme: Scheme = Scheme.HTTPS,
        port: Optional[int] = None,
        cache_policy: CachePolicy = CachePolicy.RELOAD_IGNORING_LOCAL_CACHE_DATA,
    ):
        self._domain = domain
        self.timeout = timeout
        self.default_scheme = default_scheme
        self.port = port
        self.cache_policy = cache_policy

    @property
    def domain(self) -> str:
        return self._domain

    def url(
        self, path: PathLike, query: QueryItems = (), scheme: Optional[Scheme] = None
    ) -> Optional[str]:
        """Assemble the absolute URL for `path`, or None if it is malformed."""

        netloc = _netloc(self._domain, self.port)
        if netloc is None:
            return None
        path_str = _path_string(path)
        # A path following an authority must be empty or absolute.
        if path_str and not path_str.startswith("/"):
            return None
        scheme_value = (scheme or self.default_scheme).value_or_none
        return urlunsplit(
            (scheme_value or "", netloc, quote(path_str, safe=_PATH_SAFE), encode_query(query), "")
        )

    def build(
        self,
        method: Method,
        path: PathLike,
        *,
        query: QueryItems = (),
        scheme: Optional[Scheme] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None,
        body_file: Optional[str] = None,
    ) -> Optional[RequestDescriptor]:
        url = self.url(path, query, scheme)
        if url is None:
            log.debug(
                "url_build_failed",
                extra={"domain": self._domain, "port": self.port, "method": Method(method).value},
            )
            return None
        return RequestDescriptor(
            method=Method(method),
            url=url,
            headers=dict(headers or {}),
            body=body,
            body_file=body_file,
            timeout=self.timeout,
            cache_policy=self.cache_policy,
        )

    def _build_with_type(
        self,
        method: Method,
        path: PathLike,
        query: QueryItems,
        scheme: Optional[Scheme],
        body: Optional[bytes],
        content_type: Optional[ContentTypeLike],
    ) -> Optional[RequestDescriptor]:
        if content_type is None:
            # Endpoint-based writes default to form encoding; everything else to JSON.
            if isinstance(path, Endpoint) and method is not Method.GET:
                content_type = ContentType.APPLICATION_FORM_URLENCODED
            else:
                content_type = ContentType.APPLICATION_JSON
        headers = {CONTENT_TYPE_HEADER: _content_type_value(content_type)}
        return self.build(method, path, query=query, scheme=scheme, headers=headers, body=body)

    def get(
        self,
        path: PathLike,
        query: QueryItems = (),
        *,
        scheme: Optional[Scheme] = None,
        content_type: Optional[ContentTypeLike] = None,
    ) -> Optional[RequestDescriptor]:
        return self._build_with_type(Method.GET, path, query, scheme, None, content_type)

    def post(
        self,
        path: PathLike,
        body: Optional[bytes] = None,
        query: QueryItems = (),
        *,
        scheme: Optional[Scheme] = None,
        content_type: Optional[ContentTypeLike] = None,
    ) -> Optional[RequestDescriptor]:
        return self._build_with_type(Method.POST, path, query, scheme, body, content_type)

    def put(
        self,
        path: PathLike,
        body: Optional[bytes] = None,
        query: QueryItems = (),
        *,
        scheme: Optional[Scheme] = None,
        content_type: Optional[ContentTypeLike] = None,
    ) -> Optional[RequestDescriptor]:
        return self._build_with_type(Method.PUT, path, query, scheme, body, content_type)

    def patch(
        self,
        path: PathLike,
        body: Optional[bytes] = None,
        query: QueryItems = (),
        *,
        scheme: Optional[Scheme] = None,
        content_type: Optional[ContentTypeLike] = None,
    ) -> Optional[RequestDescriptor]:
        return self._build_with_type(Method.PATCH, path, query, scheme, body, content_type)

    def delete(
        self,
        path: PathLike,
        body: Optional[bytes] = None,
        query: QueryItems = (),
        *,
        scheme: Optional[Scheme] = None,
        content_type: Optional[ContentTypeLike] = None,
    ) -> Optional[RequestDescriptor]:
        return self._build_with_type(Method.DELETE, path, query, scheme, body, content_type)

    def download(
        self, path: PathLike, query: QueryItems = (), *, scheme: Optional[Scheme] = None
    ) -> Optional[RequestDescriptor]:
        """GET request for a file; no Content-Type is set."""

        return self.build(Method.GET, path, query=query, scheme=scheme)

    def multipart_form_data_post(
        self, path: PathLike, query: QueryItems = (), *, scheme: Optional[Scheme] = None
    ) -> Optional[RequestDescriptor]:
        """Bare POST; the multipart encoder supplies body and headers later."""

        return self.build(Method.POST, path, query=query, scheme=scheme)
