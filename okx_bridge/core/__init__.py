"""Core infrastructure modules for the OKX bridge.

``okx_bridge.core.config`` is imported directly by callers; it depends on
``okx_bridge.models`` which in turn reads the constants defined here.
"""

from .constants import (
    ALGO_ORDER_PATH,
    DEFAULT_INSTRUMENT_CACHE_TTL_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    INSTRUMENTS_PATH,
    OKX_BASE_URL,
    ORDER_PATH,
    SUCCESS_CODE,
)

__all__ = [
    "ALGO_ORDER_PATH",
    "DEFAULT_INSTRUMENT_CACHE_TTL_SECONDS",
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "INSTRUMENTS_PATH",
    "OKX_BASE_URL",
    "ORDER_PATH",
    "SUCCESS_CODE",
]
