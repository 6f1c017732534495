# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP layer exports."""

from .builder import build_request
from .headers import copy_headers, has_header, header_value, normalize_headers
from .httpx_transport import HttpxTransport
from .models import NO_BODY, Headers, HTTPMethod, WireRequest
from .transport import ServerTrustChallenge, Transport, TrustDecision, TrustHandler

__all__ = [
    "Headers",
    "HTTPMethod",
    "HttpxTransport",
    "NO_BODY",
    "ServerTrustChallenge",
    "Transport",
    "TrustDecision",
    "TrustHandler",
    "WireRequest",
    "build_request",
    "copy_headers",
    "has_header",
    "header_value",
    "normalize_headers",
]
