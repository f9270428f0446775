from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class HTTPMetadata:
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Response(Generic[T]):
    status_code: int
    headers: dict[str, str]
    body: T | None = None


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    @property
    def error(self) -> None:
        return None

    @property
    def response(self) -> T:
        return self.value

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    error: Exception

    @property
    def ok(self) -> bool:
        return False

    @property
    def value(self) -> None:
        return None

    @property
    def response(self) -> None:
        return None

    def unwrap(self):
        raise self.error


Result = Union[Success[T], Failure]
