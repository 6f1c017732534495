# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed Transport implementation."""

from __future__ import annotations

import logging
import ssl
import threading
from concurrent.futures import Future, ThreadPoolExecutor

import httpx

from ..config import ClientSettings, load_client_settings
from ..errors import ErrorCategory, InvalidResponse, TransportError, categorize_exception
from .headers import copy_headers, has_header
from .models import WireRequest
from .transport import ServerTrustChallenge, Transport, TrustDecision, TrustHandler

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def fetch_peer_certificates(host: str, port: int, timeout: float | None = None) -> tuple[bytes, ...]:
    """Return the DER certificate the server presents, without validating it."""
    pem = ssl.get_server_certificate((host, port), timeout=timeout)
    return (ssl.PEM_cert_to_DER_cert(pem),)


def _find_cert_verification_error(exc: BaseException) -> ssl.SSLCertVerificationError | None:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, ssl.SSLCertVerificationError):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None


def _verify_reason(exc: ssl.SSLCertVerificationError) -> str:
    return getattr(exc, "verify_message", None) or str(exc)


def _transport_error(exc: httpx.HTTPError, request: WireRequest) -> TransportError:
    return TransportError(
        f"{request.method.value} {request.url} failed: {exc}",
        category=categorize_exception(exc),
        url=request.url,
    )


class HttpxTransport(Transport):
    """
    Synchronous httpx client driven from a thread pool.

    Requests go out through a verifying client. When a handshake fails certificate
    verification the registered trust handler decides: TRUST re-dispatches the request
    over a non-verifying client, DEFAULT lets the verification failure stand.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        client: httpx.Client | None = None,
        insecure_client: httpx.Client | None = None,
        executor: ThreadPoolExecutor | None = None,
    ):
        self.settings = settings or load_client_settings()
        self._owns_client = client is None
        self._client = client or self._make_client(verify=True)
        self._owns_insecure_client = insecure_client is None
        self._insecure_client = insecure_client
        self._insecure_lock = threading.Lock()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.settings.transport_workers,
            thread_name_prefix="webclient-transport",
        )
        self._trust_handler: TrustHandler | None = None

    def _make_client(self, *, verify: bool) -> httpx.Client:
        return httpx.Client(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=verify,
        )

    def set_trust_handler(self, handler: TrustHandler | None) -> None:
        self._trust_handler = handler

    def send(self, request: WireRequest) -> Future[bytes]:
        logger.debug("Dispatching %s %s", request.method.value, request.url)
        return self._executor.submit(self._perform, request)

    def _prepare_headers(self, request: WireRequest) -> dict[str, str]:
        headers = copy_headers(request.headers)
        if not has_header(headers, "User-Agent"):
            headers["User-Agent"] = self.settings.user_agent
        if not has_header(headers, "Accept"):
            headers["Accept"] = JSON_CONTENT_TYPE
        if request.has_body and not has_header(headers, "Content-Type"):
            headers["Content-Type"] = JSON_CONTENT_TYPE
        return headers

    def _perform(self, request: WireRequest) -> bytes:
        headers = self._prepare_headers(request)
        try:
            return self._fetch(self._client, request, headers)
        except httpx.ConnectError as exc:
            verify_error = _find_cert_verification_error(exc)
            if verify_error is None:
                raise _transport_error(exc, request) from exc
            if self._resolve_trust(request, verify_error) is not TrustDecision.TRUST:
                reason = _verify_reason(verify_error)
                raise TransportError(
                    f"certificate verification failed for {request.url}: {reason}",
                    category=ErrorCategory.SSL_ERROR,
                    url=request.url,
                ) from exc
        except httpx.HTTPError as exc:
            raise _transport_error(exc, request) from exc

        try:
            return self._fetch(self._get_insecure_client(), request, headers)
        except httpx.HTTPError as exc:
            raise _transport_error(exc, request) from exc

    def _fetch(self, client: httpx.Client, request: WireRequest, headers: dict[str, str]) -> bytes:
        max_body_bytes = self.settings.max_body_bytes
        with client.stream(
            request.method.value,
            request.url,
            headers=headers,
            content=request.body,
            timeout=self.settings.timeout,
            follow_redirects=self.settings.allow_redirects,
        ) as resp:
            if not 200 <= resp.status_code < 300:
                raise TransportError(
                    f"{request.method.value} {request.url} returned HTTP {resp.status_code}",
                    category=ErrorCategory.HTTP_STATUS,
                    status_code=resp.status_code,
                    url=str(resp.url),
                )
            content = bytearray()
            for chunk in resp.iter_bytes():
                if len(content) + len(chunk) > max_body_bytes:
                    raise InvalidResponse(f"response body from {request.url} exceeds {max_body_bytes} bytes")
                content.extend(chunk)
            logger.debug("Received HTTP %s (%d bytes) from %s", resp.status_code, len(content), request.url)
        return bytes(content)

    def _resolve_trust(self, request: WireRequest, verify_error: ssl.SSLCertVerificationError) -> TrustDecision:
        handler = self._trust_handler
        if handler is None:
            return TrustDecision.DEFAULT

        url = httpx.URL(request.url)
        host = url.host
        port = url.port or 443
        try:
            certificates = fetch_peer_certificates(host, port, timeout=self.settings.timeout)
        except (OSError, ValueError) as exc:
            logger.debug("Could not read certificate presented by %s:%s: %s", host, port, exc)
            certificates = ()

        challenge = ServerTrustChallenge(
            host=host,
            port=port,
            certificates=certificates,
            reason=_verify_reason(verify_error),
        )
        return handler(challenge)

    def _get_insecure_client(self) -> httpx.Client:
        with self._insecure_lock:
            if self._insecure_client is None:
                self._insecure_client = self._make_client(verify=False)
            return self._insecure_client

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        if self._owns_client:
            self._client.close()
        with self._insecure_lock:
            if self._owns_insecure_client and self._insecure_client is not None:
                self._insecure_client.close()


__all__ = ["HttpxTransport", "JSON_CONTENT_TYPE", "fetch_peer_certificates"]
