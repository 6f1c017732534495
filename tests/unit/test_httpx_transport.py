# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import ssl

import httpx
import pytest

from webclient.config import ClientSettings
from webclient.errors import ErrorCategory, InvalidResponse, TransportError
from webclient.http.httpx_transport import HttpxTransport
from webclient.http.models import HTTPMethod, WireRequest
from webclient.http.transport import ServerTrustChallenge, Transport, TrustDecision

TIMEOUT = 5
LEAF = b"\x30\x82\x01\x0aleaf"


def _mock_client(handler) -> httpx.Client:  # noqa: ANN001
    return httpx.Client(transport=httpx.MockTransport(handler))


def _cert_failure(request: httpx.Request) -> httpx.Response:
    try:
        raise ssl.SSLCertVerificationError(1, "certificate verify failed: self-signed certificate")
    except ssl.SSLCertVerificationError as exc:
        raise httpx.ConnectError("handshake failed", request=request) from exc


@pytest.fixture
def settings():
    return ClientSettings(user_agent="UA/1.0", transport_workers=2)


def test_satisfies_transport_protocol(settings):
    transport = HttpxTransport(settings, client=_mock_client(lambda request: httpx.Response(200)))
    assert isinstance(transport, Transport)
    transport.close()


def test_send_returns_body_and_sets_default_headers(settings):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b'{"id":1}')

    transport = HttpxTransport(settings, client=_mock_client(handler))
    request = WireRequest(url="https://api.example.com/items", method=HTTPMethod.POST, headers={"X-Trace": "abc"}, body=b'{"a":1}')
    try:
        assert transport.send(request).result(timeout=TIMEOUT) == b'{"id":1}'
    finally:
        transport.close()

    sent = seen[0]
    assert sent.method == "POST"
    assert sent.headers["X-Trace"] == "abc"
    assert sent.headers["User-Agent"] == "UA/1.0"
    assert sent.headers["Accept"] == "application/json"
    assert sent.headers["Content-Type"] == "application/json"
    assert sent.content == b'{"a":1}'


def test_caller_headers_win_over_defaults(settings):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"{}")

    transport = HttpxTransport(settings, client=_mock_client(handler))
    request = WireRequest(url="https://api.example.com/u/1", headers={"user-agent": "Custom/2", "accept": "text/plain"})
    try:
        transport.send(request).result(timeout=TIMEOUT)
    finally:
        transport.close()
    assert seen[0].headers["User-Agent"] == "Custom/2"
    assert seen[0].headers["Accept"] == "text/plain"
    assert "Content-Type" not in seen[0].headers


def test_non_2xx_status_fails_with_transport_error(settings):
    transport = HttpxTransport(settings, client=_mock_client(lambda request: httpx.Response(404, content=b'{"error":"missing"}')))
    try:
        exc = transport.send(WireRequest(url="https://api.example.com/u/9")).exception(timeout=TIMEOUT)
    finally:
        transport.close()
    assert isinstance(exc, TransportError)
    assert exc.status_code == 404
    assert exc.category is ErrorCategory.HTTP_STATUS


def test_oversized_body_is_invalid_response():
    settings = ClientSettings(max_body_bytes=4)
    transport = HttpxTransport(settings, client=_mock_client(lambda request: httpx.Response(200, content=b'{"too":"big"}')))
    try:
        exc = transport.send(WireRequest(url="https://api.example.com/u/1")).exception(timeout=TIMEOUT)
    finally:
        transport.close()
    assert isinstance(exc, InvalidResponse)


def test_network_errors_are_categorized(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    transport = HttpxTransport(settings, client=_mock_client(handler))
    try:
        exc = transport.send(WireRequest(url="https://api.example.com/u/1")).exception(timeout=TIMEOUT)
    finally:
        transport.close()
    assert isinstance(exc, TransportError)
    assert exc.category is ErrorCategory.TIMEOUT
    assert isinstance(exc.__cause__, httpx.ReadTimeout)


def test_untrusted_certificate_with_trust_decision_uses_insecure_client(monkeypatch, settings):
    monkeypatch.setattr("webclient.http.httpx_transport.fetch_peer_certificates", lambda host, port, timeout=None: (LEAF,))
    challenges: list[ServerTrustChallenge] = []

    def trust_all(challenge: ServerTrustChallenge) -> TrustDecision:
        challenges.append(challenge)
        return TrustDecision.TRUST

    transport = HttpxTransport(
        settings,
        client=_mock_client(_cert_failure),
        insecure_client=_mock_client(lambda request: httpx.Response(200, content=b'{"ok":true}')),
    )
    transport.set_trust_handler(trust_all)
    try:
        body = transport.send(WireRequest(url="https://self-signed.example:8443/status")).result(timeout=TIMEOUT)
    finally:
        transport.close()

    assert body == b'{"ok":true}'
    assert len(challenges) == 1
    assert challenges[0].host == "self-signed.example"
    assert challenges[0].port == 8443
    assert challenges[0].certificates == (LEAF,)
    assert "self-signed certificate" in challenges[0].reason


def test_untrusted_certificate_with_default_decision_fails(monkeypatch, settings):
    monkeypatch.setattr("webclient.http.httpx_transport.fetch_peer_certificates", lambda host, port, timeout=None: (LEAF,))
    insecure_calls: list[httpx.Request] = []

    def insecure(request: httpx.Request) -> httpx.Response:
        insecure_calls.append(request)
        return httpx.Response(200, content=b"{}")

    transport = HttpxTransport(settings, client=_mock_client(_cert_failure), insecure_client=_mock_client(insecure))
    transport.set_trust_handler(lambda challenge: TrustDecision.DEFAULT)
    try:
        exc = transport.send(WireRequest(url="https://self-signed.example/status")).exception(timeout=TIMEOUT)
    finally:
        transport.close()

    assert isinstance(exc, TransportError)
    assert exc.category is ErrorCategory.SSL_ERROR
    assert insecure_calls == []


def test_missing_trust_handler_means_default_validation(monkeypatch, settings):
    def fail_fetch(host, port, timeout=None):  # noqa: ANN001, ARG001
        raise AssertionError("no handler, no certificate fetch")

    monkeypatch.setattr("webclient.http.httpx_transport.fetch_peer_certificates", fail_fetch)
    transport = HttpxTransport(settings, client=_mock_client(_cert_failure))
    try:
        exc = transport.send(WireRequest(url="https://self-signed.example/status")).exception(timeout=TIMEOUT)
    finally:
        transport.close()
    assert isinstance(exc, TransportError)
    assert exc.category is ErrorCategory.SSL_ERROR


def test_unreadable_certificate_still_asks_handler(monkeypatch, settings):
    def refuse(host, port, timeout=None):  # noqa: ANN001, ARG001
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr("webclient.http.httpx_transport.fetch_peer_certificates", refuse)
    challenges: list[ServerTrustChallenge] = []

    def record(challenge: ServerTrustChallenge) -> TrustDecision:
        challenges.append(challenge)
        return TrustDecision.DEFAULT

    transport = HttpxTransport(settings, client=_mock_client(_cert_failure))
    transport.set_trust_handler(record)
    try:
        transport.send(WireRequest(url="https://self-signed.example/status")).exception(timeout=TIMEOUT)
    finally:
        transport.close()
    assert challenges[0].certificates == ()
    assert challenges[0].port == 443


def test_plain_connect_errors_do_not_consult_handler(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    calls: list[ServerTrustChallenge] = []
    transport = HttpxTransport(settings, client=_mock_client(handler))
    transport.set_trust_handler(lambda challenge: calls.append(challenge) or TrustDecision.TRUST)
    try:
        exc = transport.send(WireRequest(url="https://down.example/")).exception(timeout=TIMEOUT)
    finally:
        transport.close()
    assert isinstance(exc, TransportError)
    assert exc.category is ErrorCategory.CONNECTION_ERROR
    assert calls == []


def test_end_to_end_with_web_client(settings):
    from dataclasses import dataclass

    from webclient.client import WebClient

    @dataclass
    class User:
        id: int
        name: str

    transport = HttpxTransport(settings, client=_mock_client(lambda request: httpx.Response(200, content=b'{"id":1,"name":"Ann"}')))
    with WebClient(transport, settings=settings) as client:
        assert client.request("https://api.example.com/u/1", User).result(timeout=TIMEOUT) == User(id=1, name="Ann")
    transport.close()


def test_case_variant_headers_are_sent_once(settings):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"{}")

    from webclient.http.builder import build_request

    transport = HttpxTransport(settings, client=_mock_client(handler))
    try:
        transport.send(build_request("https://api.example.com/u/1", headers={"X-Trace": "a", "x-trace": "b"})).result(timeout=TIMEOUT)
    finally:
        transport.close()
    assert seen[0].headers.get_list("x-trace") == ["b"]


def test_close_leaves_injected_resources_open(settings):
    from concurrent.futures import ThreadPoolExecutor

    client = _mock_client(lambda request: httpx.Response(200, content=b"{}"))
    insecure = _mock_client(lambda request: httpx.Response(200, content=b"{}"))
    executor = ThreadPoolExecutor(max_workers=1)
    transport = HttpxTransport(settings, client=client, insecure_client=insecure, executor=executor)
    transport.close()
    try:
        assert client.is_closed is False
        assert insecure.is_closed is False
        assert executor.submit(lambda: "still running").result(timeout=TIMEOUT) == "still running"
    finally:
        executor.shutdown(wait=True)
        client.close()
        insecure.close()


def test_close_shuts_down_owned_clients(monkeypatch, settings):
    created: list[httpx.Client] = []
    real_client = httpx.Client

    def make_client(**kwargs):  # noqa: ANN003
        kwargs.pop("verify", None)
        client = real_client(transport=httpx.MockTransport(lambda request: httpx.Response(200)), **kwargs)
        created.append(client)
        return client

    monkeypatch.setattr(httpx, "Client", make_client)
    transport = HttpxTransport(settings)
    transport._get_insecure_client()
    transport.close()
    assert len(created) == 2
    assert all(client.is_closed for client in created)
