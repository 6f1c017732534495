# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
webclient package entrypoint.

A typed HTTP client that sends JSON-encoded requests and decodes JSON responses
into caller-specified types. The transport, the JSON codec and the certificate
trust policy are injectable; httpx and pydantic back the defaults.
"""

from .client import WebClient
from .codec import Decoder, Encoder, JsonDecoder, JsonEncoder
from .config import ClientSettings, load_client_settings
from .errors import (
    BuildError,
    DecodeError,
    EncodeError,
    ErrorCategory,
    InvalidResponse,
    TransportError,
    WebClientError,
)
from .http import (
    HTTPMethod,
    HttpxTransport,
    ServerTrustChallenge,
    Transport,
    TrustDecision,
    TrustHandler,
    WireRequest,
    build_request,
)
from .log import setup_logging
from .options import ClientOptions
from .trust import create_trust_handler, evaluate_server_trust
from .version import __version__

__all__ = [
    "BuildError",
    "ClientOptions",
    "ClientSettings",
    "DecodeError",
    "Decoder",
    "EncodeError",
    "Encoder",
    "ErrorCategory",
    "HTTPMethod",
    "HttpxTransport",
    "InvalidResponse",
    "JsonDecoder",
    "JsonEncoder",
    "ServerTrustChallenge",
    "Transport",
    "TransportError",
    "TrustDecision",
    "TrustHandler",
    "WebClient",
    "WebClientError",
    "WireRequest",
    "build_request",
    "create_trust_handler",
    "evaluate_server_trust",
    "load_client_settings",
    "setup_logging",
    "__version__",
]
