from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from concurrent.futures import Future
from typing import Callable, Protocol

import httpx

from core.config import settings
from requestable.result import HTTPMetadata
from requestable.sources import RequestDescriptor

logger = logging.getLogger(__name__)

TransportCallback = Callable[[bytes | None, HTTPMetadata | None, Exception | None], None]

_DEFAULT: HttpxTransport | None = None
_DEFAULT_LOCK = threading.Lock()


class Transport(Protocol):
    def issue(self, descriptor: RequestDescriptor, callback: TransportCallback) -> None: ...


class HttpxTransport:
    """Runs requests on a private event loop thread and reports through callbacks.

    ``issue`` returns as soon as the request is scheduled. The callback is invoked
    exactly once from the loop thread with ``(body, metadata, error)``.
    """

    def __init__(
        self,
        *,
        timeout_ms: int | None = None,
        user_agent: str | None = None,
        follow_redirects: bool | None = None,
        proxy_url: str | None = None,
        base_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="requestable-transport",
            daemon=True,
        )
        self._closed = False
        self._client = _build_httpx_client(
            timeout_ms=settings.fetch_timeout_ms if timeout_ms is None else timeout_ms,
            user_agent=user_agent or settings.fetch_user_agent,
            follow_redirects=(
                settings.fetch_follow_redirects if follow_redirects is None else follow_redirects
            ),
            proxy_url=proxy_url if proxy_url is not None else settings.fetch_proxy_url,
            base_transport=base_transport,
        )
        self._thread.start()

    @property
    def closed(self) -> bool:
        return self._closed

    def issue(self, descriptor: RequestDescriptor, callback: TransportCallback) -> None:
        if self._closed:
            raise RuntimeError("transport_closed")
        future = asyncio.run_coroutine_threadsafe(
            self._perform(descriptor, callback),
            self._loop,
        )
        future.add_done_callback(_log_callback_failure)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        asyncio.run_coroutine_threadsafe(self._client.aclose(), self._loop).result()
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self._loop.close()

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    async def _perform(self, descriptor: RequestDescriptor, callback: TransportCallback) -> None:
        try:
            response = await self._client.request(
                descriptor.method,
                descriptor.url,
                headers=descriptor.headers or None,
            )
        except httpx.TimeoutException as exc:
            logger.warning("fetch_timeout: %s", exc)
            callback(None, None, exc)
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            logger.warning("fetch_failed: %s", exc)
            callback(None, None, exc)
        except Exception as exc:
            logger.warning("fetch_failed_unexpected: %r", exc)
            callback(None, None, exc)
        else:
            callback(response.content or None, _metadata_from_response(response), None)


def get_default_transport() -> HttpxTransport:
    global _DEFAULT
    transport = _DEFAULT
    if transport is not None and not transport.closed:
        return transport
    with _DEFAULT_LOCK:
        if _DEFAULT is None or _DEFAULT.closed:
            _DEFAULT = HttpxTransport()
        return _DEFAULT


def close_default_transport() -> None:
    global _DEFAULT
    with _DEFAULT_LOCK:
        transport = _DEFAULT
        _DEFAULT = None
    if transport is not None:
        transport.close()


def _metadata_from_response(response: httpx.Response) -> HTTPMetadata:
    encoding = response.headers.encoding
    headers: dict[str, str] = {}
    for raw_key, raw_value in response.headers.raw:
        key = raw_key.decode(encoding)
        value = raw_value.decode(encoding)
        if key in headers:
            headers[key] = f"{headers[key]}, {value}"
        else:
            headers[key] = value
    return HTTPMetadata(status_code=response.status_code, headers=headers)


def _log_callback_failure(future: Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("fetch_callback_raised: %r", exc)


def _supports_proxy_kw() -> bool:
    try:
        return "proxy" in inspect.signature(httpx.AsyncClient).parameters
    except (TypeError, ValueError):
        return False


def _build_httpx_client(
    *,
    timeout_ms: int,
    user_agent: str,
    follow_redirects: bool,
    proxy_url: str | None,
    base_transport: httpx.AsyncBaseTransport | None,
) -> httpx.AsyncClient:
    client_kwargs: dict[str, object] = {}
    if base_transport is not None:
        client_kwargs["transport"] = base_transport
    elif proxy_url:
        if _supports_proxy_kw():
            client_kwargs["proxy"] = proxy_url
        else:
            client_kwargs["proxies"] = {"http://": proxy_url, "https://": proxy_url}
    timeout = None
    if timeout_ms and timeout_ms > 0:
        timeout = httpx.Timeout(timeout_ms / 1000)
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=follow_redirects,
        headers={"User-Agent": user_agent},
        **client_kwargs,
    )
