"""Common constants shared across the bridge."""

from __future__ import annotations

from pathlib import Path

OKX_BASE_URL = "https://www.okx.com"
ORDER_PATH = "/api/v5/trade/order"
ALGO_ORDER_PATH = "/api/v5/trade/order-algo"
INSTRUMENTS_PATH = "/api/v5/public/instruments"

SUCCESS_CODE = "0"
# Trigger order price of -1 asks OKX to execute at market once triggered.
MARKET_TRIGGER_ORDER_PRICE = "-1"

DEFAULT_INSTRUMENT_CACHE_TTL_SECONDS = 600.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0
DEFAULT_PORT = 3000
DEFAULT_LOG_DIR = Path("logs")

HEALTH_BANNER = "OKX Webhook Server is running"
