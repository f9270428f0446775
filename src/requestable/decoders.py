"""Body decoders.

A decoder turns the raw bytes of a response into a typed body. Some formats can
say why they failed (JSON, pydantic models); byte-oriented ones cannot. Both
styles report through the same ``DecodeOutcome`` so the fetch engine has a
single decode path: a failure with a reason becomes ``DecodeError``, a failure
without one becomes ``ConversionFailedError``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Generic, Protocol, TypeVar, Union

from pydantic import BaseModel

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class Decoded(Generic[T]):
    value: T


@dataclass(frozen=True)
class DecodeFailed:
    reason: Exception | None = None


DecodeOutcome = Union[Decoded[T], DecodeFailed]


class Decoder(Protocol[T_co]):
    name: str

    def decode(self, data: bytes) -> Decoded[T_co] | DecodeFailed: ...


class ThrowingDecoder(Generic[T]):
    """Wraps a constructor that raises when the bytes cannot be decoded."""

    def __init__(self, fn: Callable[[bytes], T], name: str | None = None) -> None:
        self._fn = fn
        self.name = name or getattr(fn, "__name__", "throwing")

    def decode(self, data: bytes) -> DecodeOutcome[T]:
        try:
            return Decoded(self._fn(data))
        except Exception as exc:
            return DecodeFailed(reason=exc)

    def __repr__(self) -> str:
        return f"ThrowingDecoder({self.name})"


class FailingDecoder(Generic[T]):
    """Wraps a constructor that returns None when the bytes cannot be decoded."""

    def __init__(self, fn: Callable[[bytes], T | None], name: str | None = None) -> None:
        self._fn = fn
        self.name = name or getattr(fn, "__name__", "failing")

    def decode(self, data: bytes) -> DecodeOutcome[T]:
        value = self._fn(data)
        if value is None:
            return DecodeFailed()
        return Decoded(value)

    def __repr__(self) -> str:
        return f"FailingDecoder({self.name})"


def _identity(data: bytes) -> bytes:
    return data


def _utf8_text(data: bytes) -> str | None:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def _json_value(data: bytes) -> Any:
    return json.loads(data)


def model_decoder(model: type[ModelT]) -> ThrowingDecoder[ModelT]:
    return ThrowingDecoder(model.model_validate_json, name=model.__name__)


RAW: FailingDecoder[bytes] = FailingDecoder(_identity, name="raw")
TEXT: FailingDecoder[str] = FailingDecoder(_utf8_text, name="text")
JSON: ThrowingDecoder[Any] = ThrowingDecoder(_json_value, name="json")

DECODERS: dict[str, Decoder[Any]] = {
    "raw": RAW,
    "text": TEXT,
    "json": JSON,
}
