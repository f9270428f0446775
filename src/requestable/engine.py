"""Synchronous fetch over a callback-driven transport.

``fetch`` issues exactly one transport call, blocks on a single-assignment slot
until the transport's completion callback has written the classified result,
and hands that result back to the caller. Failures never escape as exceptions;
they come back as ``Failure``.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from core.config import settings
from core.metrics import record_fetch
from requestable.decoders import RAW, DecodeFailed, Decoder
from requestable.errors import (
    ConversionFailedError,
    DecodeError,
    FetchTimeoutError,
    OnlyHTTPResponsesSupportedError,
    RequestableError,
    TransportError,
)
from requestable.result import Failure, HTTPMetadata, Response, Result, Success
from requestable.sources import as_request_source
from requestable.transport import Transport, get_default_transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OutcomeSlot(Generic[T]):
    """Single-writer, single-reader handoff between the callback and the caller."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ready = threading.Event()
        self._value: T | None = None

    @property
    def is_set(self) -> bool:
        return self._ready.is_set()

    def set(self, value: T) -> None:
        with self._lock:
            if self._ready.is_set():
                raise RuntimeError("outcome_slot_already_set")
            self._value = value
            self._ready.set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._ready.wait(timeout)

    def get(self) -> T:
        if not self._ready.is_set():
            raise RuntimeError("outcome_slot_empty")
        return self._value  # type: ignore[return-value]


def fetch(
    source: Any,
    decoder: Decoder[T] | None = None,
    transport: Transport | None = None,
) -> Result[Response[T]]:
    decoder = decoder or RAW
    request_source = as_request_source(source)
    try:
        descriptor = request_source.request()
    except RequestableError as exc:
        logger.info("fetch_request_invalid: %s", exc)
        record_fetch(exc.code, None)
        return Failure(exc)
    except Exception as exc:
        logger.warning("fetch_request_failed: %r", exc)
        record_fetch(type(exc).__name__, None)
        return Failure(exc)

    transport = transport or get_default_transport()
    url = getattr(descriptor, "url", None)
    host = getattr(url, "host", None) or None
    slot: OutcomeSlot[Result[Response[T]]] = OutcomeSlot()

    def on_complete(
        body: bytes | None,
        metadata: HTTPMetadata | None,
        error: Exception | None,
    ) -> None:
        try:
            result = classify_outcome(body, metadata, error, decoder)
        except Exception as exc:
            logger.exception("fetch_classify_failed: %s", url)
            result = Failure(TransportError(exc))
        slot.set(result)

    started = time.monotonic()
    try:
        transport.issue(descriptor, on_complete)
    except Exception as exc:
        if not slot.is_set:
            logger.warning("fetch_issue_failed: %s", exc)
            slot.set(Failure(TransportError(exc)))

    result = _wait_for(slot, url)
    elapsed = time.monotonic() - started
    _log_result(result, url)
    record_fetch(_outcome_label(result), host, elapsed)
    return result


def classify_outcome(
    body: bytes | None,
    metadata: HTTPMetadata | None,
    error: Exception | None,
    decoder: Decoder[T],
) -> Result[Response[T]]:
    if error is not None:
        return Failure(TransportError(error))
    if metadata is None:
        return Failure(OnlyHTTPResponsesSupportedError())

    status_code = int(metadata.status_code)
    headers = _normalize_headers(metadata.headers)
    if not body:
        return Success(Response(status_code=status_code, headers=headers, body=None))

    outcome = decoder.decode(body)
    if isinstance(outcome, DecodeFailed):
        if outcome.reason is None:
            return Failure(ConversionFailedError())
        return Failure(DecodeError(outcome.reason))
    return Success(Response(status_code=status_code, headers=headers, body=outcome.value))


def _wait_for(slot: OutcomeSlot[Result[Response[T]]], url: object) -> Result[Response[T]]:
    timeout_ms = settings.fetch_wait_timeout_ms
    if timeout_ms and timeout_ms > 0:
        if not slot.wait(timeout_ms / 1000):
            logger.warning("fetch_wait_timeout: %s after %sms", url, timeout_ms)
            return Failure(FetchTimeoutError(timeout_ms))
    else:
        slot.wait()
    return slot.get()


def _normalize_headers(value: Any) -> dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    return {str(k): _header_text(v) for k, v in value.items()}


def _header_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return str(value)


def _outcome_label(result: Result[Any]) -> str:
    if result.ok:
        return "success"
    error = result.error
    return getattr(error, "code", None) or type(error).__name__


def _log_result(result: Result[Response[Any]], url: object) -> None:
    if isinstance(result, Success):
        logger.debug("fetch_completed: %s status=%s", url, result.value.status_code)
    else:
        logger.warning("fetch_failed: %s %s", url, _outcome_label(result))
