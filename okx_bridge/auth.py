"""Shared-secret check for inbound signals."""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from enum import Enum
from typing import Any


class AuthResult(str, Enum):
    AUTHORIZED = "authorized"
    UNAUTHORIZED = "unauthorized"


def _extract_secret(signal: Any) -> Any:
    if isinstance(signal, Mapping):
        return signal.get("secret")
    return getattr(signal, "secret", None)


def authenticate(signal: Any, expected_secret: str) -> AuthResult:
    """Check the secret carried by a raw payload or a parsed Signal.

    A missing or empty secret is rejected even when ``expected_secret`` is
    itself empty.
    """
    provided = _extract_secret(signal)
    if not isinstance(provided, str) or not provided or not expected_secret:
        return AuthResult.UNAUTHORIZED
    if hmac.compare_digest(provided.encode("utf-8"), expected_secret.encode("utf-8")):
        return AuthResult.AUTHORIZED
    return AuthResult.UNAUTHORIZED
