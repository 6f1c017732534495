# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    HTTP_STATUS = "HTTP_STATUS"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class WebClientError(Exception):
    """Base class for every failure a WebClient future can carry."""


class BuildError(WebClientError):
    """The request could not be turned into a WireRequest."""


class EncodeError(BuildError):
    """The request body could not be encoded."""


class TransportError(WebClientError):
    """
    Network, connection or protocol failure reported by the transport.

    ``status_code`` is set when the server answered with a non-2xx status.
    """

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR,
        status_code: int | None = None,
        url: str | None = None,
    ):
        super().__init__(message)
        self.category = category
        self.status_code = status_code
        self.url = url


class InvalidResponse(WebClientError):
    """The response is unusable before decoding is attempted."""


class DecodeError(WebClientError):
    """The response body could not be decoded into the requested type."""


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    import socket
    import ssl as ssl_module

    import httpx

    if isinstance(exc, TransportError):
        return exc.category

    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, httpx.HTTPStatusError):
        return ErrorCategory.HTTP_STATUS

    cause = exc.__cause__ or exc.__context__
    if isinstance(exc, httpx.ConnectError) and cause is not None:
        nested = categorize_exception(cause)
        if nested in (ErrorCategory.SSL_ERROR, ErrorCategory.DNS_ERROR):
            return nested

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, ConnectionError):
        return ErrorCategory.CONNECTION_ERROR

    if cause is not None:
        return categorize_exception(cause)

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.HTTP_STATUS: "Server returned an error status",
        ErrorCategory.UNKNOWN_ERROR: "Network error",
        None: "",
    }
    return mapping.get(category, "Request failed due to network error")


__all__ = [
    "BuildError",
    "DecodeError",
    "EncodeError",
    "ErrorCategory",
    "InvalidResponse",
    "TransportError",
    "WebClientError",
    "categorize_exception",
    "error_category_to_reason",
]
