from __future__ import annotations

from typing import Any, Callable, Generic, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from netrequest.core.errors import DecodeError

T = TypeVar("T")

# Any callable turning raw bytes into a value; failures raise DecodeError.
Decoder = Callable[[bytes], Any]


class JsonDecoder(Generic[T]):
    """Decode a JSON body into `response_type` (a pydantic model, dataclass or typing form).

    Security notes:
    - Validation is strict about structure; unknown types fail with DecodeError.
    """

    def __init__(self, response_type: Type[T]):
        self.response_type = response_type
        self._adapter: TypeAdapter[T] = TypeAdapter(response_type)

    def __call__(self, data: bytes) -> T:
        try:
            return self._adapter.validate_json(data)
        except ValidationError as e:
            raise DecodeError(
                f"response does not match {_type_name(self.response_type)}: "
                f"{e.error_count()} error(s)",
                cause=e,
                raw=data,
            ) from e

    def __repr__(self) -> str:
        return f"JsonDecoder({_type_name(self.response_type)})"


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)
