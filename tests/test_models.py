"""Tests for signal and order models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from okx_bridge.models import (
    ExecutionResult,
    ExecutionStatus,
    ExitKind,
    OrderIntent,
    OrderOutcome,
    OrderType,
    PositionSide,
    Side,
    Signal,
    TradeMode,
)


class TestSignal:
    """Tests for Signal validation."""

    def test_tradingview_payload_aliases(self) -> None:
        signal = Signal.model_validate(
            {
                "secret": "x",
                "instId": "btc-usdt-swap",
                "side": "BUY",
                "qty": "0.127",
                "sl": 61000,
                "tp": "65000.5",
            }
        )
        assert signal.inst_id == "BTC-USDT-SWAP"
        assert signal.side is Side.BUY
        assert signal.quantity == Decimal("0.127")
        assert signal.stop_loss == Decimal("61000")
        assert signal.take_profit == Decimal("65000.5")

    def test_long_form_aliases(self) -> None:
        signal = Signal.model_validate(
            {
                "instrumentId": "ETH-USDT-SWAP",
                "side": "sell",
                "quantity": 2,
                "stopLossTrigger": 3200,
                "takeProfitTrigger": 2800,
            }
        )
        assert signal.inst_id == "ETH-USDT-SWAP"
        assert signal.side is Side.SELL
        assert signal.stop_loss == Decimal("3200")
        assert signal.take_profit == Decimal("2800")

    def test_float_quantity_goes_through_string_form(self) -> None:
        signal = Signal.model_validate({"instId": "BTC-USDT-SWAP", "side": "buy", "qty": 0.1})
        assert signal.quantity == Decimal("0.1")
        assert str(signal.quantity) == "0.1"

    def test_exits_are_optional(self) -> None:
        signal = Signal.model_validate({"instId": "BTC-USDT-SWAP", "side": "buy", "qty": 1})
        assert signal.stop_loss is None
        assert signal.take_profit is None

    @pytest.mark.parametrize(
        "payload",
        [
            {"side": "buy", "qty": 1},
            {"instId": "", "side": "buy", "qty": 1},
            {"instId": "BTC-USDT-SWAP", "qty": 1},
            {"instId": "BTC-USDT-SWAP", "side": "long", "qty": 1},
            {"instId": "BTC-USDT-SWAP", "side": "buy"},
            {"instId": "BTC-USDT-SWAP", "side": "buy", "qty": 0},
            {"instId": "BTC-USDT-SWAP", "side": "buy", "qty": "-1"},
            {"instId": "BTC-USDT-SWAP", "side": "buy", "qty": "lots"},
            {"instId": "BTC-USDT-SWAP", "side": "buy", "qty": 1, "sl": 0},
        ],
    )
    def test_rejects_malformed_signals(self, payload: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            Signal.model_validate(payload)

    def test_secret_not_in_repr(self) -> None:
        signal = Signal.model_validate(
            {"secret": "hunter2", "instId": "BTC-USDT-SWAP", "side": "buy", "qty": 1}
        )
        assert "hunter2" not in repr(signal)


class TestSides:
    """Side / position side mapping."""

    def test_entry_side_maps_to_position_side(self) -> None:
        assert Side.BUY.position_side is PositionSide.LONG
        assert Side.SELL.position_side is PositionSide.SHORT

    def test_exit_side_is_inverse_of_position_side(self) -> None:
        assert PositionSide.LONG.exit_side is Side.SELL
        assert PositionSide.SHORT.exit_side is Side.BUY

    @pytest.mark.parametrize("side", list(Side))
    def test_exit_side_reverses_entry(self, side: Side) -> None:
        assert side.position_side.exit_side is not side


class TestOrderIntent:
    """Tests for OKX payload rendering."""

    def test_market_entry_payload(self) -> None:
        intent = OrderIntent(
            inst_id="BTC-USDT-SWAP",
            trade_mode=TradeMode.CROSS,
            side=Side.BUY,
            position_side=PositionSide.LONG,
            order_type=OrderType.MARKET,
            size="0.12",
        )
        payload = intent.to_payload()
        assert payload == {
            "instId": "BTC-USDT-SWAP",
            "tdMode": "cross",
            "side": "buy",
            "posSide": "long",
            "ordType": "market",
            "sz": "0.12",
        }
        assert list(payload) == ["instId", "tdMode", "side", "posSide", "ordType", "sz"]
        assert not intent.is_exit

    def test_stop_loss_payload(self) -> None:
        intent = OrderIntent(
            inst_id="BTC-USDT-SWAP",
            trade_mode=TradeMode.CROSS,
            side=Side.SELL,
            position_side=PositionSide.LONG,
            order_type=OrderType.CONDITIONAL,
            size="0.12",
            trigger_price=Decimal("61000.5"),
            exit_kind=ExitKind.STOP_LOSS,
        )
        payload = intent.to_payload()
        assert payload["ordType"] == "conditional"
        assert payload["slTriggerPx"] == "61000.5"
        assert payload["slOrdPx"] == "-1"
        assert "tpTriggerPx" not in payload

    def test_take_profit_payload(self) -> None:
        intent = OrderIntent(
            inst_id="ETH-USDT-SWAP",
            trade_mode=TradeMode.ISOLATED,
            side=Side.BUY,
            position_side=PositionSide.SHORT,
            order_type=OrderType.CONDITIONAL,
            size="3",
            trigger_price=Decimal("2800"),
            exit_kind=ExitKind.TAKE_PROFIT,
        )
        payload = intent.to_payload()
        assert payload["tdMode"] == "isolated"
        assert payload["tpTriggerPx"] == "2800"
        assert payload["tpOrdPx"] == "-1"
        assert "slTriggerPx" not in payload

    def test_conditional_requires_trigger(self) -> None:
        with pytest.raises(ValueError, match="require trigger_price"):
            OrderIntent(
                inst_id="BTC-USDT-SWAP",
                trade_mode=TradeMode.CROSS,
                side=Side.SELL,
                position_side=PositionSide.LONG,
                order_type=OrderType.CONDITIONAL,
                size="1",
                exit_kind=ExitKind.STOP_LOSS,
            )

    def test_market_rejects_trigger(self) -> None:
        with pytest.raises(ValueError, match="Market orders do not take a trigger price"):
            OrderIntent(
                inst_id="BTC-USDT-SWAP",
                trade_mode=TradeMode.CROSS,
                side=Side.BUY,
                position_side=PositionSide.LONG,
                order_type=OrderType.MARKET,
                size="1",
                trigger_price=Decimal("1"),
            )


def test_execution_result_counts_exit_attempts() -> None:
    result = ExecutionResult(
        status=ExecutionStatus.EXECUTED,
        entry=OrderOutcome(succeeded=True),
        take_profit=OrderOutcome(succeeded=False),
    )
    assert result.ok
    assert result.exit_attempts == 1
