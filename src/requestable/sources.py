from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import singledispatch
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from requestable.errors import InvalidURLError

if TYPE_CHECKING:
    from requestable.decoders import Decoder
    from requestable.result import Response, Result
    from requestable.transport import Transport


@runtime_checkable
class RequestSource(Protocol):
    def request(self) -> RequestDescriptor: ...


class Requestable(ABC):
    """Mixin that lets a request source fetch itself."""

    @abstractmethod
    def request(self) -> RequestDescriptor: ...

    def fetch(
        self,
        decoder: Decoder[Any] | None = None,
        transport: Transport | None = None,
    ) -> Result[Response[Any]]:
        from requestable.engine import fetch

        return fetch(self, decoder=decoder, transport=transport)


@dataclass(frozen=True)
class RequestDescriptor(Requestable):
    url: httpx.URL
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)

    def request(self) -> RequestDescriptor:
        return self


@dataclass(frozen=True)
class URLSource(Requestable):
    url: httpx.URL

    def request(self) -> RequestDescriptor:
        return RequestDescriptor(url=self.url)


@dataclass(frozen=True)
class StringSource(Requestable):
    text: str

    def request(self) -> RequestDescriptor:
        return URLSource(parse_url(self.text)).request()


def parse_url(text: str) -> httpx.URL:
    try:
        url = httpx.URL(text)
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        raise InvalidURLError(text) from exc
    if not url.is_absolute_url:
        raise InvalidURLError(text)
    return url


@singledispatch
def as_request_source(value: object) -> RequestSource:
    if isinstance(value, RequestSource):
        return value
    raise TypeError(f"not a request source: {type(value).__name__}")


@as_request_source.register
def _(value: str) -> RequestSource:
    return StringSource(value)


@as_request_source.register
def _(value: httpx.URL) -> RequestSource:
    return URLSource(value)
