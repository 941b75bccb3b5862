from __future__ import annotations

from typing import Optional


class NetRequestError(Exception):
    """
    Base exception for all netrequest failures.
    """

    pass


class PathError(NetRequestError):
    """
    Raised when a path template cannot be resolved.
    """

    pass


class InvalidOriginalPath(PathError):
    """
    Raised when the template string itself is unusable (empty).
    """

    pass


class InvalidPathArgument(PathError):
    """
    Raised when a substitution key has no matching `{key}` placeholder.
    """

    def __init__(self, key: str):
        super().__init__(f"no placeholder {{{key}}} in path")
        self.key = key


class MultipartError(NetRequestError):
    """
    Raised when a multipart/form-data body cannot be produced.
    """

    pass


class UnableToEncode(MultipartError):
    """
    Raised when a string component of the frame is not representable as UTF-8.
    """

    pass


class InvalidFile(MultipartError):
    """
    Raised when the file to upload cannot be read (missing, unreadable, too large).
    """

    pass


class ResponseError(NetRequestError):
    """
    Base class for errors delivered through an Outcome.
    """

    pass


class NetworkError(ResponseError):
    """
    Transport-level failure: connectivity, DNS, timeout.

    `cause` holds the original exception when there is one.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class MissingData(NetworkError):
    """
    Success status but no payload where a decoded value was expected.
    """

    def __init__(self, message: str = "response carried no data"):
        super().__init__(message)


class UnsuccessfulStatusCode(ResponseError):
    """
    Response status outside [200, 300).
    """

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = int(status_code)
        self.message = message or f"Error status code: {self.status_code}"
        super().__init__(self.message)


class DecodeError(ResponseError):
    """
    Response body did not match the expected type.

    Security notes:
    - `raw` keeps the undecoded bytes for diagnostics; do not log it unbounded.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None, raw: bytes = b""):
        super().__init__(message)
        self.cause = cause
        self.raw = raw
