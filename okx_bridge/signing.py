"""OKX v5 request signing.

OKX authenticates private REST calls with::

    OK-ACCESS-SIGN = base64(HMAC-SHA256(secret, timestamp + method + path + body))

where ``path`` includes any query string and ``body`` is the exact serialized
JSON sent (empty for GET). Any byte difference between the signed body and the
transmitted body makes OKX reject the request, so callers must sign and send
the same string.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime


def sign(timestamp: str, method: str, path: str, body: str, secret: str) -> str:
    """Return the base64 HMAC-SHA256 signature of the OKX prehash string."""
    prehash = f"{timestamp}{method}{path}{body}"
    digest = hmac.new(secret.encode("utf-8"), prehash.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def iso_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-01T00:00:00.000Z."""
    moment = (now or datetime.now(tz=UTC)).astimezone(UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class SignedRequest:
    """A request stamped and signed for exactly one outbound call."""

    timestamp: str
    method: str
    path: str
    body: str
    signature: str

    def headers(self, api_key: str, passphrase: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "OK-ACCESS-KEY": api_key,
            "OK-ACCESS-SIGN": self.signature,
            "OK-ACCESS-TIMESTAMP": self.timestamp,
            "OK-ACCESS-PASSPHRASE": passphrase,
        }


class RequestSigner:
    """Builds SignedRequest objects with bound OKX credentials."""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        passphrase: str,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_secret = api_secret
        self._passphrase = passphrase
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    def sign_request(self, method: str, path: str, body: str = "") -> SignedRequest:
        """Stamp and sign one request. A fresh timestamp is taken on every call."""
        method = method.upper()
        timestamp = iso_timestamp(self._clock())
        return SignedRequest(
            timestamp=timestamp,
            method=method,
            path=path,
            body=body,
            signature=sign(timestamp, method, path, body, self._api_secret),
        )

    def headers_for(self, request: SignedRequest) -> dict[str, str]:
        return request.headers(self._api_key, self._passphrase)
