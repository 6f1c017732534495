# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Certificate trust policy registered with transports."""

from __future__ import annotations

import logging

from .http.transport import ServerTrustChallenge, TrustDecision, TrustHandler
from .options import ClientOptions

logger = logging.getLogger(__name__)


def evaluate_server_trust(options: ClientOptions, challenge: ServerTrustChallenge) -> TrustDecision:
    """Trust any chain when self-signed certificates are allowed, otherwise defer to default validation."""
    if ClientOptions.ALLOWS_SELF_SIGNED_CERTS in options:
        logger.warning("Accepting untrusted certificate for %s:%s (%s)", challenge.host, challenge.port, challenge.reason or "no reason given")
        return TrustDecision.TRUST
    return TrustDecision.DEFAULT


def create_trust_handler(options: ClientOptions) -> TrustHandler:
    """Bind ``options`` into the callback a Transport invokes at handshake time."""

    def handle(challenge: ServerTrustChallenge) -> TrustDecision:
        return evaluate_server_trust(options, challenge)

    return handle


__all__ = ["create_trust_handler", "evaluate_server_trust"]
