# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from webclient.http.transport import ServerTrustChallenge, TrustDecision
from webclient.options import ClientOptions
from webclient.trust import create_trust_handler, evaluate_server_trust

CHALLENGES = [
    ServerTrustChallenge(host="self-signed.example", port=443),
    ServerTrustChallenge(host="10.0.0.5", port=8443, certificates=(b"\x30\x82leaf", b"\x30\x82root"), reason="self-signed certificate"),
    ServerTrustChallenge(host="expired.example", port=443, certificates=(b"",), reason="certificate has expired"),
]


@pytest.mark.parametrize("challenge", CHALLENGES)
def test_self_signed_flag_always_trusts(challenge):
    assert evaluate_server_trust(ClientOptions.ALLOWS_SELF_SIGNED_CERTS, challenge) is TrustDecision.TRUST


@pytest.mark.parametrize("challenge", CHALLENGES)
def test_without_flag_defers_to_default(challenge):
    assert evaluate_server_trust(ClientOptions.NONE, challenge) is TrustDecision.DEFAULT
    assert evaluate_server_trust(ClientOptions(0), challenge) is TrustDecision.DEFAULT


def test_handler_closure_binds_options():
    trusting = create_trust_handler(ClientOptions.NONE | ClientOptions.ALLOWS_SELF_SIGNED_CERTS)
    default = create_trust_handler(ClientOptions.NONE)
    for challenge in CHALLENGES:
        assert trusting(challenge) is TrustDecision.TRUST
        assert default(challenge) is TrustDecision.DEFAULT


def test_options_compose_and_test_membership():
    combined = ClientOptions.NONE | ClientOptions.ALLOWS_SELF_SIGNED_CERTS
    assert ClientOptions.ALLOWS_SELF_SIGNED_CERTS in combined
    assert ClientOptions.ALLOWS_SELF_SIGNED_CERTS not in ClientOptions.NONE
    assert not ClientOptions.NONE
