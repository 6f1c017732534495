# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Translate (url, headers, method, body) into a WireRequest."""

from __future__ import annotations

import logging
from typing import Any

from ..codec import Encoder
from ..errors import BuildError, EncodeError
from .headers import HeaderInput, copy_headers
from .models import NO_BODY, HTTPMethod, WireRequest

logger = logging.getLogger(__name__)


def build_request(
    url: str,
    method: HTTPMethod | str = HTTPMethod.GET,
    headers: HeaderInput | None = None,
    *,
    body: Any = NO_BODY,
    encoder: Encoder | None = None,
) -> WireRequest:
    """
    Build a WireRequest, encoding ``body`` eagerly when one is given.

    Raises BuildError for an empty URL or an unknown method, and EncodeError (a
    BuildError) when the body cannot be encoded. An encoding failure never degrades
    into an empty body.
    """
    target = str(url or "").strip()
    if not target:
        raise BuildError("request URL must not be empty")

    try:
        http_method = HTTPMethod.coerce(method)
    except ValueError as exc:
        raise BuildError(f"unsupported HTTP method: {method!r}") from exc

    encoded: bytes | None = None
    if body is not NO_BODY:
        if encoder is None:
            raise BuildError("a request body was given without an encoder")
        encoded = _encode_body(encoder, body)

    try:
        request_headers = copy_headers(headers)
    except (TypeError, ValueError) as exc:
        raise BuildError(f"malformed request headers: {exc}") from exc

    request = WireRequest(url=target, method=http_method, headers=request_headers, body=encoded)
    logger.debug("Built %s %s (body=%s bytes)", request.method.value, request.url, len(encoded) if encoded is not None else "none")
    return request


def _encode_body(encoder: Encoder, body: Any) -> bytes:
    try:
        encoded = encoder.encode(body)
    except EncodeError:
        raise
    except Exception as exc:
        raise EncodeError(f"cannot encode request body of type {type(body).__name__}: {exc}") from exc
    if not isinstance(encoded, (bytes, bytearray, memoryview)):
        raise EncodeError(f"encoder returned {type(encoded).__name__}, expected bytes")
    return bytes(encoded)


__all__ = ["build_request"]
