# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Wire-level request model shared by the builder, client and transports."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

Headers = Mapping[str, str]


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"

    @classmethod
    def coerce(cls, value: HTTPMethod | str) -> HTTPMethod:
        """Return the member for ``value``; unknown verbs raise ValueError."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())


class _NoBody:
    """Marker for "no request body" (``None`` is a valid JSON body)."""

    _instance: _NoBody | None = None

    def __new__(cls) -> _NoBody:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_BODY"

    def __bool__(self) -> bool:
        return False


NO_BODY = _NoBody()


@dataclass(frozen=True)
class WireRequest:
    """Immutable request handed to a Transport."""

    url: str
    method: HTTPMethod = HTTPMethod.GET
    headers: Headers = field(default_factory=dict)
    body: bytes | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", HTTPMethod.coerce(self.method))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        if self.body is not None:
            object.__setattr__(self, "body", bytes(self.body))

    def _identity(self) -> tuple[object, ...]:
        # header names are case-insensitive, ordering is not significant
        headers = frozenset((name.lower(), value) for name, value in self.headers.items())
        return (self.url, self.method, headers, self.body)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WireRequest):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    @property
    def has_body(self) -> bool:
        return self.body is not None


__all__ = ["HTTPMethod", "Headers", "NO_BODY", "WireRequest"]
