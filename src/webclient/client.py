# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Typed JSON-over-HTTP client."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, TypeVar

from .codec import Decoder, Encoder, JsonDecoder, JsonEncoder
from .config import ClientSettings, load_client_settings
from .errors import DecodeError, InvalidResponse, TransportError, WebClientError, categorize_exception
from .http.builder import build_request
from .http.headers import HeaderInput
from .http.models import NO_BODY, HTTPMethod, WireRequest
from .http.transport import Transport
from .options import ClientOptions
from .trust import create_trust_handler

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _failed_future(error: BaseException) -> Future[Any]:
    future: Future[Any] = Future()
    future.set_running_or_notify_cancel()
    future.set_exception(error)
    return future


class WebClient:
    """
    Sends JSON requests through a Transport and decodes responses into caller types.

    Every call returns a ``concurrent.futures.Future`` right away. Failures from any
    stage (build, transport, decode) are delivered through that future, never raised.
    Decoding runs on a dedicated thread pool so large payloads do not tie up the
    transport's threads or the caller.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        encoder: Encoder | None = None,
        decoder: Decoder | None = None,
        options: ClientOptions | None = None,
        *,
        settings: ClientSettings | None = None,
        decode_executor: ThreadPoolExecutor | None = None,
    ):
        self._settings = settings or load_client_settings()
        self._options = self._settings.options if options is None else options
        self._encoder = encoder or JsonEncoder()
        self._decoder = decoder or JsonDecoder()

        self._owns_transport = transport is None
        if transport is None:
            from .http.httpx_transport import HttpxTransport

            transport = HttpxTransport(self._settings)
        self._transport = transport

        self._owns_executor = decode_executor is None
        self._decode_executor = decode_executor or ThreadPoolExecutor(
            max_workers=self._settings.decode_workers,
            thread_name_prefix="webclient-decode",
        )

        self._transport.set_trust_handler(create_trust_handler(self._options))

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def encoder(self) -> Encoder:
        return self._encoder

    @property
    def decoder(self) -> Decoder:
        return self._decoder

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    def request(
        self,
        url: str,
        result_type: type[T],
        *,
        headers: HeaderInput | None = None,
        method: HTTPMethod | str = HTTPMethod.GET,
    ) -> Future[T]:
        """Send a request without a body and decode the response as ``result_type``."""
        return self._submit(url, result_type, headers=headers, method=method, body=NO_BODY)

    def request_with_body(
        self,
        url: str,
        result_type: type[T],
        body: Any,
        *,
        headers: HeaderInput | None = None,
        method: HTTPMethod | str = HTTPMethod.POST,
    ) -> Future[T]:
        """Encode ``body`` as JSON, send it and decode the response as ``result_type``."""
        return self._submit(url, result_type, headers=headers, method=method, body=body)

    def _submit(
        self,
        url: str,
        result_type: type[T],
        *,
        headers: HeaderInput | None,
        method: HTTPMethod | str,
        body: Any,
    ) -> Future[T]:
        try:
            wire_request = build_request(url, method, headers, body=body, encoder=self._encoder)
        except WebClientError as exc:
            logger.debug("Request to %s failed to build: %s", url, exc)
            return _failed_future(exc)
        return self._dispatch(wire_request, result_type)

    def _dispatch(self, wire_request: WireRequest, result_type: type[T]) -> Future[T]:
        result: Future[T] = Future()
        # running futures cannot be cancelled
        result.set_running_or_notify_cancel()

        try:
            pending = self._transport.send(wire_request)
        except Exception as exc:  # noqa: BLE001
            result.set_exception(self._as_transport_error(exc, wire_request))
            return result

        def on_transport_done(done: Future[bytes]) -> None:
            if done.cancelled():
                result.set_exception(TransportError(f"transport dropped {wire_request.url}", url=wire_request.url))
                return
            error = done.exception()
            if error is not None:
                result.set_exception(self._as_transport_error(error, wire_request))
                return
            try:
                self._decode_executor.submit(self._decode_into, result, done.result(), result_type, wire_request)
            except RuntimeError as exc:
                result.set_exception(DecodeError(f"decode executor unavailable: {exc}"))

        pending.add_done_callback(on_transport_done)
        return result

    def _decode_into(self, result: Future[T], raw: Any, result_type: type[T], wire_request: WireRequest) -> None:
        if not isinstance(raw, (bytes, bytearray, memoryview)):
            result.set_exception(
                InvalidResponse(f"transport returned {type(raw).__name__} for {wire_request.url}, expected bytes")
            )
            return
        try:
            value = self._decoder.decode(bytes(raw), result_type)
        except DecodeError as exc:
            result.set_exception(exc)
            return
        except Exception as exc:  # noqa: BLE001
            error = DecodeError(f"cannot decode response from {wire_request.url}: {exc}")
            error.__cause__ = exc
            result.set_exception(error)
            return
        logger.debug("Decoded response from %s as %r", wire_request.url, result_type)
        result.set_result(value)

    @staticmethod
    def _as_transport_error(error: BaseException, wire_request: WireRequest) -> BaseException:
        if isinstance(error, (TransportError, InvalidResponse)):
            return error
        wrapped = TransportError(
            f"{wire_request.method.value} {wire_request.url} failed: {error}",
            category=categorize_exception(error),
            url=wire_request.url,
        )
        wrapped.__cause__ = error
        return wrapped

    def close(self) -> None:
        if self._owns_transport:
            self._transport.close()
        if self._owns_executor:
            self._decode_executor.shutdown(wait=True)

    def __enter__(self) -> WebClient:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()


__all__ = ["WebClient"]
