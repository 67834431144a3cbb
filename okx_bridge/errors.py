"""Error taxonomy for signal execution."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Machine-readable failure categories reported to webhook callers."""

    UNAUTHORIZED = "unauthorized"
    INVALID_SIGNAL = "invalid_signal"
    UPSTREAM_LOOKUP = "upstream_lookup_error"
    NETWORK = "network_error"
    ORDER_REJECTED = "order_rejected"
    INTERNAL = "internal_error"


class BridgeError(Exception):
    """Base error for bridge failures.

    Carries the error kind and, where available, the upstream payload so a
    failure can be diagnosed from the reported result alone.
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, *, payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload


class Unauthorized(BridgeError):
    """Raised when a signal carries a missing or wrong shared secret."""

    kind = ErrorKind.UNAUTHORIZED


class InvalidSignal(BridgeError):
    """Raised when required signal fields are missing or malformed."""

    kind = ErrorKind.INVALID_SIGNAL


class UpstreamLookupError(BridgeError):
    """Raised when instrument lot/min size metadata cannot be obtained."""

    kind = ErrorKind.UPSTREAM_LOOKUP


class NetworkError(BridgeError):
    """Raised on transport-level failures (timeouts, connection errors)."""

    kind = ErrorKind.NETWORK


class OrderRejected(BridgeError):
    """Raised when OKX answers an order with a non-success code."""

    kind = ErrorKind.ORDER_REJECTED

    def __init__(self, message: str, *, code: str | None = None, payload: Any = None) -> None:
        super().__init__(message, payload=payload)
        self.code = code
