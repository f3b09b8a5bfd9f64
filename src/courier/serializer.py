"""Encoding and decoding of structured request and response bodies.

The ``Serializer`` is the boundary between bytes on the wire and Python
values. Validation and serialization are delegated to pydantic, which covers
``BaseModel`` subclasses, dataclasses, ``TypedDict`` and plain containers.

Classes:
    JSONDecoder: Decodes JSON bytes into a requested type
    JSONEncoder: Encodes a value as JSON bytes
    Serializer: Lock-guarded pair of a decoder and an encoder

Example:
    Custom date conventions for an API that speaks Unix timestamps::

        encoder = JSONEncoder(date_encoding=lambda value: int(value.timestamp()))
        client = HTTPClient(Configuration(host="api.example.com", encoder=encoder))

Notes:
    Dates are encoded and decoded as ISO 8601 text by default.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Callable, TypeVar

import pydantic_core
from pydantic import TypeAdapter, ValidationError

from .errors import DecodingError, EncodingError
from .request import AnyEncodable

T = TypeVar("T")

DateEncoding = Callable[[date], Any]


@lru_cache(maxsize=256)
def _adapter(tp: Any) -> TypeAdapter[Any]:
    return TypeAdapter(tp)


def type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


class JSONDecoder:
    """Decodes JSON into instances of a requested type.

    Args:
        strict: Disable pydantic's lax coercion (e.g. ``"1"`` to ``1``)
    """

    def __init__(self, strict: bool | None = None):
        self.strict = strict

    def decode(self, tp: type[T] | Any, data: bytes) -> T:
        return _adapter(tp).validate_json(data, strict=self.strict)


class JSONEncoder:
    """Encodes values as JSON.

    Args:
        date_encoding: Converts ``date``/``datetime`` values before encoding;
            ISO 8601 text when not provided
        by_alias: Use field aliases as keys
        exclude_none: Drop fields whose value is ``None``
        indent: Pretty-print with the given indentation
    """

    def __init__(
        self,
        date_encoding: DateEncoding | None = None,
        by_alias: bool = True,
        exclude_none: bool = False,
        indent: int | None = None,
    ):
        self.date_encoding = date_encoding
        self.by_alias = by_alias
        self.exclude_none = exclude_none
        self.indent = indent

    def encode(self, value: Any) -> bytes:
        if self.date_encoding is None:
            return pydantic_core.to_json(
                value,
                indent=self.indent,
                by_alias=self.by_alias,
                exclude_none=self.exclude_none,
            )

        plain = _adapter(type(value)).dump_python(
            value,
            mode="python",
            by_alias=self.by_alias,
            exclude_none=self.exclude_none,
        )
        return pydantic_core.to_json(_convert_dates(plain, self.date_encoding), indent=self.indent)


def _convert_dates(value: Any, encoding: DateEncoding) -> Any:
    if isinstance(value, (datetime, date)):
        return encoding(value)
    if isinstance(value, dict):
        return {key: _convert_dates(item, encoding) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_convert_dates(item, encoding) for item in value]
    return value


class Serializer:
    """Encodes and decodes bodies, one caller at a time.

    Decoder and encoder objects are not assumed to be safe for concurrent use,
    so every call holds the serializer's lock; concurrent callers queue.
    """

    def __init__(self, decoder: JSONDecoder | None = None, encoder: JSONEncoder | None = None):
        self.decoder = decoder or JSONDecoder()
        self.encoder = encoder or JSONEncoder()
        self._lock = asyncio.Lock()

    async def decode(self, tp: type[T] | Any, data: bytes) -> T:
        """Decode ``data`` as an instance of ``tp``.

        Raises:
            DecodingError: If the body is not valid JSON for ``tp``
        """
        async with self._lock:
            try:
                return self.decoder.decode(tp, data)
            except (ValidationError, ValueError, TypeError) as e:
                raise DecodingError(type_name(tp), e) from e

    async def encode(self, value: Any) -> bytes:
        """Encode ``value`` as JSON.

        ``AnyEncodable`` boxes encode themselves with this serializer's encoder.

        Raises:
            EncodingError: If the value cannot be serialized
        """
        async with self._lock:
            try:
                if isinstance(value, AnyEncodable):
                    return value.encode(self.encoder)
                return self.encoder.encode(value)
            except (pydantic_core.PydanticSerializationError, ValueError, TypeError) as e:
                name = value.type_name if isinstance(value, AnyEncodable) else type_name(type(value))
                raise EncodingError(name, e) from e
