# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport capability and the TLS trust callback contract."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from .models import WireRequest


class TrustDecision(str, Enum):
    TRUST = "TRUST"
    DEFAULT = "DEFAULT"


@dataclass(frozen=True)
class ServerTrustChallenge:
    """Certificate chain a server presented during a TLS handshake (DER, leaf first)."""

    host: str
    port: int
    certificates: tuple[bytes, ...] = ()
    reason: str = ""


TrustHandler = Callable[[ServerTrustChallenge], TrustDecision]


@runtime_checkable
class Transport(Protocol):
    """
    Minimal protocol for dispatching WireRequests.

    ``send`` returns immediately; the future resolves with the raw response body or
    fails with a TransportError. Implementations that speak TLS must call the registered
    trust handler whenever a handshake needs a trust decision and honor its answer.
    """

    def send(self, request: WireRequest) -> Future[bytes]: ...

    def set_trust_handler(self, handler: TrustHandler | None) -> None: ...

    def close(self) -> None:  # pragma: no cover - optional for adapters
        ...


__all__ = ["ServerTrustChallenge", "Transport", "TrustDecision", "TrustHandler"]
