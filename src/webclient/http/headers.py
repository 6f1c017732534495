# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header utilities.

HTTP header field names are case-insensitive (RFC 9110). Request headers keep the caller's
casing on the wire, so lookups go through these helpers instead of plain dict access.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

HeaderInput = Mapping[str, Any] | Iterable[tuple[str, Any]]


def _iter_header_items(headers: Any) -> Iterable[tuple[object, object]]:
    """
    Yield ``(name, value)`` pairs from "dict-like" header containers.

    Supports plain dicts, httpx.Headers and other objects exposing ``items()``,
    and iterables of pairs (e.g. list[tuple[str, str]]).
    """
    if not headers:
        return ()
    items = getattr(headers, "items", None)
    if callable(items):
        return items()
    return headers


def copy_headers(headers: HeaderInput | None) -> dict[str, str]:
    """
    Copy headers in input order, keeping the caller's casing.

    Names compare case-insensitively: a later entry replaces any earlier one with the same
    name, and its casing is the one sent. ``None`` values become ``""``.
    """
    out: dict[str, str] = {}
    names: dict[str, str] = {}
    for key, value in _iter_header_items(headers):
        if key is None:
            continue
        name = str(key).strip()
        if not name:
            continue
        previous = names.get(name.lower())
        if previous is not None:
            del out[previous]
        names[name.lower()] = name
        out[name] = "" if value is None else str(value)
    return out


def normalize_headers(headers: HeaderInput | None) -> dict[str, str]:
    """Return a lowercase-keyed copy of a header mapping."""
    return {name.lower(): value for name, value in copy_headers(headers).items()}


def header_value(headers: Mapping[str, str] | None, name: str, default: str = "") -> str:
    """
    Return a header value using case-insensitive key matching.

    Fast-paths common key casings before falling back to a full scan.
    """
    if not headers or not name:
        return default

    lower = name.lower()
    for key in (name, lower, lower.title()):
        if key in headers:
            value = headers.get(key)
            return default if value is None else str(value).strip()

    for key, value in headers.items():
        if str(key).lower() == lower:
            return default if value is None else str(value).strip()

    return default


def has_header(headers: Mapping[str, str] | None, name: str) -> bool:
    sentinel = "\x00"
    return header_value(headers, name, sentinel) != sentinel


__all__ = ["HeaderInput", "copy_headers", "has_header", "header_value", "normalize_headers"]
