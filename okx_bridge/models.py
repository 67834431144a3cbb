"""Signal, instrument and order models using Pydantic v2."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from okx_bridge.core.constants import MARKET_TRIGGER_ORDER_PRICE
from okx_bridge.errors import ErrorKind


class PositionSide(str, Enum):
    """Directional exposure label required by OKX hedge mode."""

    LONG = "long"
    SHORT = "short"

    @property
    def exit_side(self) -> Side:
        """Order side that reduces this position."""
        return Side.SELL if self is PositionSide.LONG else Side.BUY


class Side(str, Enum):
    """Order side enumeration."""

    BUY = "buy"
    SELL = "sell"

    @property
    def position_side(self) -> PositionSide:
        """Position side opened by an entry on this side."""
        return PositionSide.LONG if self is Side.BUY else PositionSide.SHORT


class OrderType(str, Enum):
    """Order type enumeration."""

    MARKET = "market"
    CONDITIONAL = "conditional"


class TradeMode(str, Enum):
    """OKX margin mode (tdMode)."""

    CROSS = "cross"
    ISOLATED = "isolated"


class ExitKind(str, Enum):
    """Protective exit flavours."""

    STOP_LOSS = "stop_loss"
    TAKE_PROFIT = "take_profit"


class ExecutionStatus(str, Enum):
    """Terminal state of one signal execution."""

    EXECUTED = "executed"
    UNAUTHORIZED = "unauthorized"
    INVALID_SIGNAL = "invalid_signal"
    UPSTREAM_ERROR = "upstream_error"
    ENTRY_FAILED = "entry_failed"
    INTERNAL_ERROR = "internal_error"


def _to_decimal(value: Any) -> Any:
    """Convert JSON numbers through their string form to avoid float artifacts."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            return value
    return value


class Signal(BaseModel):
    """Inbound trade signal (untrusted).

    Field aliases cover both the TradingView alert template (``instId``,
    ``qty``, ``sl``, ``tp``) and the long-form names.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    secret: str | None = Field(default=None, repr=False)
    inst_id: str = Field(
        ...,
        validation_alias=AliasChoices("instId", "instrumentId", "inst_id"),
        description="OKX instrument identifier, e.g. BTC-USDT-SWAP",
    )
    side: Side
    quantity: Annotated[
        Decimal,
        Field(
            gt=0,
            validation_alias=AliasChoices("qty", "quantity", "sz"),
            description="Requested size before lot normalization",
        ),
    ]
    stop_loss: Decimal | None = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("sl", "stopLoss", "stopLossTrigger", "stop_loss"),
    )
    take_profit: Decimal | None = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("tp", "takeProfit", "takeProfitTrigger", "take_profit"),
    )

    @field_validator("inst_id")
    @classmethod
    def validate_inst_id(cls, v: str) -> str:
        """Ensure instrument id is uppercase and non-empty."""
        v = v.strip().upper()
        if not v:
            raise ValueError("Instrument id cannot be empty")
        return v

    @field_validator("side", mode="before")
    @classmethod
    def normalize_side(cls, v: Any) -> Any:
        """Accept BUY/Buy/buy."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("quantity", "stop_loss", "take_profit", mode="before")
    @classmethod
    def coerce_decimal(cls, v: Any) -> Any:
        return _to_decimal(v)

    @property
    def position_side(self) -> PositionSide:
        return self.side.position_side


class InstrumentConstraints(BaseModel):
    """Lot size and minimum order size for one instrument.

    Owned by the instrument cache and replaced wholesale on refresh.
    """

    model_config = ConfigDict(frozen=True)

    inst_id: str
    lot_size: Annotated[Decimal, Field(gt=0, description="Smallest size increment")]
    min_size: Annotated[Decimal, Field(ge=0, description="Smallest accepted order size")]
    fetched_at: float = Field(..., description="Cache clock reading at fetch time")


class OrderIntent(BaseModel):
    """One order as it will be sent to OKX."""

    model_config = ConfigDict(frozen=True)

    inst_id: str
    trade_mode: TradeMode
    side: Side
    position_side: PositionSide
    order_type: OrderType
    size: str = Field(..., description="String-serialized decimal size")
    trigger_price: Decimal | None = None
    exit_kind: ExitKind | None = None

    @model_validator(mode="after")
    def validate_trigger(self) -> OrderIntent:
        """Conditional orders need a trigger and exit kind, market orders neither."""
        if self.order_type == OrderType.CONDITIONAL:
            if self.trigger_price is None or self.exit_kind is None:
                raise ValueError("Conditional orders require trigger_price and exit_kind")
        elif self.trigger_price is not None:
            raise ValueError("Market orders do not take a trigger price")
        return self

    @property
    def is_exit(self) -> bool:
        return self.order_type == OrderType.CONDITIONAL

    def to_payload(self) -> dict[str, str]:
        """Render the OKX request body.

        Key order is fixed because the serialized body is part of the signature.
        """
        payload = {
            "instId": self.inst_id,
            "tdMode": self.trade_mode.value,
            "side": self.side.value,
            "posSide": self.position_side.value,
            "ordType": self.order_type.value,
            "sz": self.size,
        }
        if self.trigger_price is not None:
            trigger = format(self.trigger_price, "f")
            if self.exit_kind == ExitKind.TAKE_PROFIT:
                payload["tpTriggerPx"] = trigger
                payload["tpOrdPx"] = MARKET_TRIGGER_ORDER_PRICE
            else:
                payload["slTriggerPx"] = trigger
                payload["slOrdPx"] = MARKET_TRIGGER_ORDER_PRICE
        return payload


class OrderOutcome(BaseModel):
    """Result of one exchange call."""

    succeeded: bool
    exchange_code: str | None = None
    message: str | None = None
    order_id: str | None = None
    error_kind: ErrorKind | None = None
    raw_response: Any = None


class ErrorDetail(BaseModel):
    """Failure description attached to a terminal execution result."""

    kind: ErrorKind
    message: str
    payload: Any = None


class ExecutionResult(BaseModel):
    """Aggregated outcome of one signal: entry plus any attempted exits."""

    status: ExecutionStatus
    inst_id: str | None = None
    size: str | None = None
    position_side: PositionSide | None = None
    entry: OrderOutcome | None = None
    stop_loss: OrderOutcome | None = None
    take_profit: OrderOutcome | None = None
    error: ErrorDetail | None = None

    @property
    def ok(self) -> bool:
        """True once the entry order was accepted, regardless of exits."""
        return self.status == ExecutionStatus.EXECUTED

    @property
    def exit_attempts(self) -> int:
        return sum(1 for outcome in (self.stop_loss, self.take_profit) if outcome is not None)
