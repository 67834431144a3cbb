"""OKX Webhook Bridge - signal-to-order execution for OKX."""

__version__ = "0.1.0"

from okx_bridge.auth import AuthResult, authenticate
from okx_bridge.core.config import BridgeConfig, load_config
from okx_bridge.errors import (
    BridgeError,
    ErrorKind,
    InvalidSignal,
    NetworkError,
    OrderRejected,
    Unauthorized,
    UpstreamLookupError,
)
from okx_bridge.exchange import OKXClient
from okx_bridge.executor import SignalExecutor
from okx_bridge.instruments import InstrumentCache
from okx_bridge.models import (
    ExecutionResult,
    ExecutionStatus,
    ExitKind,
    InstrumentConstraints,
    OrderIntent,
    OrderOutcome,
    OrderType,
    PositionSide,
    Side,
    Signal,
    TradeMode,
)
from okx_bridge.signing import RequestSigner, SignedRequest, sign
from okx_bridge.sizing import format_size, normalize_quantity

__all__ = [
    "AuthResult",
    "authenticate",
    "BridgeConfig",
    "load_config",
    "BridgeError",
    "ErrorKind",
    "InvalidSignal",
    "NetworkError",
    "OrderRejected",
    "Unauthorized",
    "UpstreamLookupError",
    "OKXClient",
    "SignalExecutor",
    "InstrumentCache",
    "ExecutionResult",
    "ExecutionStatus",
    "ExitKind",
    "InstrumentConstraints",
    "OrderIntent",
    "OrderOutcome",
    "OrderType",
    "PositionSide",
    "Side",
    "Signal",
    "TradeMode",
    "RequestSigner",
    "SignedRequest",
    "sign",
    "format_size",
    "normalize_quantity",
]
