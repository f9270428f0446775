from __future__ import annotations


class RequestableError(Exception):
    def __init__(self, code: str, detail: str | None = None) -> None:
        super().__init__(f"{code}: {detail}" if detail else code)
        self.code = code


class InvalidURLError(RequestableError):
    def __init__(self, value: object) -> None:
        super().__init__("invalid_url", repr(value))
        self.value = value


class OnlyHTTPResponsesSupportedError(RequestableError):
    def __init__(self) -> None:
        super().__init__("only_http_responses_supported")


class TransportError(RequestableError):
    """Wraps the native error a transport reported."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__("transport_error", str(cause) or type(cause).__name__)
        self.cause = cause
        self.__cause__ = cause


class DecodeError(RequestableError):
    """A decoder rejected the body and explained why."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__("decode_error", str(cause) or type(cause).__name__)
        self.cause = cause
        self.__cause__ = cause


class ConversionFailedError(RequestableError):
    """A decoder rejected the body without giving a reason."""

    def __init__(self) -> None:
        super().__init__("conversion_failed")


class FetchTimeoutError(RequestableError):
    def __init__(self, timeout_ms: int) -> None:
        super().__init__("timeout", f"no response after {timeout_ms}ms")
        self.timeout_ms = timeout_ms
