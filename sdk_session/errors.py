"""Error types raised by the session core.

- ParameterError: caller passed an incomplete argument; raised before any request.
- TransportError: network/HTTP failure reported by the transport.
- MalformedResponseError: the API answered but the envelope lacks `data.token`.
"""

from __future__ import annotations

from typing import Any, Optional


ERR_NETWORK = -1


class SdkError(Exception):
    """Base class for SDK errors, carrying an optional error code."""

    def __init__(self, message: str = "", code: Any = None) -> None:
        super().__init__(message or str(code))
        self.code = code
        self.message = message


class ParameterError(SdkError, ValueError):
    def __init__(self, operation: str, name: str) -> None:
        super().__init__(f"{operation}(): Parameter `{name}` is required")
        self.operation = operation
        self.name = name


class TransportError(SdkError):
    def __init__(self, code: Any, message: str = "", status: Optional[int] = None) -> None:
        super().__init__(message, code)
        self.status = status

    def __repr__(self) -> str:
        return f"TransportError(code={self.code!r}, message={self.message!r}, status={self.status!r})"


class MalformedResponseError(SdkError):
    def __init__(self, operation: str, response: Any = None) -> None:
        super().__init__(f"{operation}(): response does not contain `data.token`")
        self.operation = operation
        self.response = response


def require(operation: str, name: str, value: Any) -> None:
    if value is None or value == "":
        raise ParameterError(operation, name)


__all__ = [
    "ERR_NETWORK",
    "SdkError",
    "ParameterError",
    "TransportError",
    "MalformedResponseError",
    "require",
]
