# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
JSON codec capabilities.

WebClient depends on the Encoder/Decoder protocols only; the pydantic-backed
JsonEncoder/JsonDecoder are the defaults supplied at construction time.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Protocol, TypeVar, runtime_checkable

from pydantic import PydanticUserError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .errors import DecodeError, EncodeError

T = TypeVar("T")


@runtime_checkable
class Encoder(Protocol):
    """Turns a value into JSON bytes; raises EncodeError on unsupported input."""

    def encode(self, value: Any) -> bytes: ...


@runtime_checkable
class Decoder(Protocol):
    """Turns JSON bytes into a value of ``shape``; raises DecodeError on failure."""

    def decode(self, data: bytes, shape: type[T]) -> T: ...


@lru_cache(maxsize=256)
def _adapter_for(shape: Any) -> TypeAdapter[Any]:
    return TypeAdapter(shape)


def type_adapter(shape: Any) -> TypeAdapter[Any]:
    """Return a (cached when hashable) TypeAdapter for ``shape``."""
    try:
        return _adapter_for(shape)
    except TypeError as exc:
        if isinstance(exc, PydanticUserError):
            raise
        # unhashable shape (e.g. Annotated with unhashable metadata)
        return TypeAdapter(shape)


class JsonEncoder(Encoder):
    """Serialize dataclasses, pydantic models, TypedDicts and builtins to JSON."""

    def __init__(self, *, by_alias: bool = True, exclude_none: bool = False):
        self.by_alias = by_alias
        self.exclude_none = exclude_none

    def encode(self, value: Any) -> bytes:
        try:
            adapter = type_adapter(type(value))
            return adapter.dump_json(value, by_alias=self.by_alias, exclude_none=self.exclude_none)
        except (PydanticUserError, PydanticSerializationError) as exc:
            raise EncodeError(f"cannot encode {type(value).__name__} as JSON: {exc}") from exc


class JsonDecoder(Decoder):
    """Validate JSON bytes against a target type."""

    def __init__(self, *, strict: bool | None = None):
        self.strict = strict

    def decode(self, data: bytes, shape: type[T]) -> T:
        try:
            adapter = type_adapter(shape)
            return adapter.validate_json(data, strict=self.strict)
        except ValidationError as exc:
            raise DecodeError(f"response does not decode as {_shape_name(shape)}: {exc.error_count()} error(s)") from exc
        except PydanticUserError as exc:
            raise DecodeError(f"cannot decode into {_shape_name(shape)}: {exc}") from exc


def _shape_name(shape: Any) -> str:
    return getattr(shape, "__name__", None) or repr(shape)


__all__ = ["Decoder", "Encoder", "JsonDecoder", "JsonEncoder", "type_adapter"]
