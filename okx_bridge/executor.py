"""Signal execution pipeline: entry order followed by protective exits."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol

from loguru import logger
from pydantic import ValidationError

from okx_bridge.auth import AuthResult, authenticate
from okx_bridge.errors import (
    BridgeError,
    ErrorKind,
    InvalidSignal,
    NetworkError,
    OrderRejected,
    Unauthorized,
)
from okx_bridge.instruments import InstrumentCache
from okx_bridge.models import (
    ErrorDetail,
    ExecutionResult,
    ExecutionStatus,
    ExitKind,
    OrderIntent,
    OrderOutcome,
    OrderType,
    Signal,
    TradeMode,
)
from okx_bridge.sizing import format_size, normalize_quantity

if TYPE_CHECKING:
    from okx_bridge.core.config import BridgeConfig
    from okx_bridge.exchange import OKXClient


class OrderGateway(Protocol):
    """Order submission surface the executor needs from an exchange client."""

    async def place_order(self, intent: OrderIntent) -> OrderOutcome: ...

    async def place_algo_order(self, intent: OrderIntent) -> OrderOutcome: ...


_STATUS_BY_KIND = {
    ErrorKind.UNAUTHORIZED: ExecutionStatus.UNAUTHORIZED,
    ErrorKind.INVALID_SIGNAL: ExecutionStatus.INVALID_SIGNAL,
    ErrorKind.UPSTREAM_LOOKUP: ExecutionStatus.UPSTREAM_ERROR,
}


class SignalExecutor:
    """Runs one signal through a fixed pipeline.

    1. authenticate   - abort: unauthorized, nothing sent
    2. validate       - abort: invalid_signal, nothing sent
    3. resolve lots   - abort: upstream_error, nothing sent
    4. normalize size and map position side
    5. entry order    - abort: entry_failed, no exits are attempted
    6. exits          - stop-loss then take-profit, each best-effort and
                        independent of the other

    ``execute`` never raises; every failure is reported in the result.
    """

    def __init__(
        self,
        *,
        expected_secret: str,
        instruments: InstrumentCache,
        gateway: OrderGateway,
        trade_mode: TradeMode = TradeMode.CROSS,
    ) -> None:
        self._expected_secret = expected_secret
        self._instruments = instruments
        self._gateway = gateway
        self._trade_mode = trade_mode

    @classmethod
    def from_config(cls, config: BridgeConfig, client: OKXClient) -> SignalExecutor:
        """Wire an executor and its instrument cache around an OKX client."""
        instruments = InstrumentCache(
            client.fetch_instrument, ttl_seconds=config.instrument_cache_ttl
        )
        return cls(
            expected_secret=config.tv_secret.get_secret_value(),
            instruments=instruments,
            gateway=client,
            trade_mode=config.trade_mode,
        )

    async def execute(self, payload: Mapping[str, Any] | Any) -> ExecutionResult:
        """Execute one inbound signal payload and report what happened."""
        try:
            return await self._run(payload)
        except BridgeError as exc:
            logger.warning(f"Signal aborted ({exc.kind.value}): {exc.message}")
            return ExecutionResult(
                status=_STATUS_BY_KIND.get(exc.kind, ExecutionStatus.INTERNAL_ERROR),
                error=ErrorDetail(kind=exc.kind, message=exc.message, payload=exc.payload),
            )
        except Exception as exc:
            logger.exception("Unexpected failure while executing signal")
            return ExecutionResult(
                status=ExecutionStatus.INTERNAL_ERROR,
                error=ErrorDetail(kind=ErrorKind.INTERNAL, message=str(exc) or type(exc).__name__),
            )

    async def _run(self, payload: Mapping[str, Any] | Any) -> ExecutionResult:
        self._authenticate(payload)
        signal = self._validate(payload)
        constraints = await self._instruments.get_constraints(signal.inst_id)

        size = format_size(
            normalize_quantity(signal.quantity, constraints.lot_size, constraints.min_size)
        )
        position_side = signal.position_side
        if size != format_size(signal.quantity):
            logger.info(
                f"Normalized {signal.inst_id} size {signal.quantity} -> {size} "
                f"(lot={constraints.lot_size}, min={constraints.min_size})"
            )

        entry_intent = OrderIntent(
            inst_id=signal.inst_id,
            trade_mode=self._trade_mode,
            side=signal.side,
            position_side=position_side,
            order_type=OrderType.MARKET,
            size=size,
        )
        result = ExecutionResult(
            status=ExecutionStatus.EXECUTED,
            inst_id=signal.inst_id,
            size=size,
            position_side=position_side,
        )

        entry = await self._submit(self._gateway.place_order, entry_intent)
        result.entry = entry
        if not entry.succeeded:
            logger.error(
                f"Entry order for {signal.inst_id} failed ({entry.exchange_code}): "
                f"{entry.message}; skipping exit orders"
            )
            result.status = ExecutionStatus.ENTRY_FAILED
            result.error = ErrorDetail(
                kind=entry.error_kind or ErrorKind.INTERNAL,
                message=entry.message or "Entry order failed",
                payload=entry.raw_response,
            )
            return result

        logger.info(f"Entry order accepted for {signal.inst_id}: order_id={entry.order_id}")

        if signal.stop_loss is not None:
            result.stop_loss = await self._place_exit(
                entry_intent, ExitKind.STOP_LOSS, signal.stop_loss
            )
        if signal.take_profit is not None:
            result.take_profit = await self._place_exit(
                entry_intent, ExitKind.TAKE_PROFIT, signal.take_profit
            )
        return result

    def _authenticate(self, payload: Mapping[str, Any] | Any) -> None:
        if authenticate(payload, self._expected_secret) is not AuthResult.AUTHORIZED:
            raise Unauthorized("Invalid secret")

    @staticmethod
    def _validate(payload: Mapping[str, Any] | Any) -> Signal:
        if isinstance(payload, Signal):
            return payload
        if not isinstance(payload, Mapping):
            raise InvalidSignal(f"Signal must be a JSON object, got {type(payload).__name__}")
        try:
            return Signal.model_validate(dict(payload))
        except ValidationError as exc:
            errors = [
                {"field": ".".join(str(part) for part in err["loc"]), "error": err["msg"]}
                for err in exc.errors()
            ]
            raise InvalidSignal("Signal failed validation", payload=errors) from exc

    async def _place_exit(
        self, entry: OrderIntent, kind: ExitKind, trigger_price: Decimal
    ) -> OrderOutcome:
        try:
            intent = OrderIntent(
                inst_id=entry.inst_id,
                trade_mode=entry.trade_mode,
                side=entry.position_side.exit_side,
                position_side=entry.position_side,
                order_type=OrderType.CONDITIONAL,
                size=entry.size,
                trigger_price=trigger_price,
                exit_kind=kind,
            )
            outcome = await self._submit(self._gateway.place_algo_order, intent)
        except Exception as exc:
            logger.exception(f"Unexpected failure placing {kind.value} for {entry.inst_id}")
            outcome = OrderOutcome(
                succeeded=False,
                message=str(exc) or type(exc).__name__,
                error_kind=ErrorKind.INTERNAL,
            )
        if outcome.succeeded:
            logger.info(
                f"{kind.value} placed for {entry.inst_id} at {trigger_price}: "
                f"algo_id={outcome.order_id}"
            )
        else:
            logger.warning(
                f"{kind.value} for {entry.inst_id} failed ({outcome.exchange_code}): "
                f"{outcome.message}"
            )
        return outcome

    @staticmethod
    async def _submit(
        send: Callable[[OrderIntent], Awaitable[OrderOutcome]], intent: OrderIntent
    ) -> OrderOutcome:
        """Send one order, folding rejections and transport errors into an outcome."""
        try:
            return await send(intent)
        except OrderRejected as exc:
            return OrderOutcome(
                succeeded=False,
                exchange_code=exc.code,
                message=exc.message,
                error_kind=exc.kind,
                raw_response=exc.payload,
            )
        except NetworkError as exc:
            return OrderOutcome(
                succeeded=False,
                message=exc.message,
                error_kind=exc.kind,
                raw_response=exc.payload,
            )

