"""OKX REST client: instrument lookup and signed order submission."""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any

import httpx
from loguru import logger

from okx_bridge.core.config import BridgeConfig
from okx_bridge.core.constants import (
    ALGO_ORDER_PATH,
    INSTRUMENTS_PATH,
    ORDER_PATH,
    SUCCESS_CODE,
)
from okx_bridge.errors import NetworkError, OrderRejected, UpstreamLookupError
from okx_bridge.models import OrderIntent, OrderOutcome
from okx_bridge.signing import RequestSigner

_FUTURES_EXPIRY_RE = re.compile(r"-\d{6}$")


def infer_instrument_type(inst_id: str) -> str:
    """Derive the OKX instType from an instrument id.

    ``BTC-USDT-SWAP`` -> SWAP, ``BTC-USD-240628`` -> FUTURES, ``BTC-USDT`` -> SPOT.
    """
    inst_id = inst_id.upper()
    if inst_id.endswith("-SWAP"):
        return "SWAP"
    if _FUTURES_EXPIRY_RE.search(inst_id):
        return "FUTURES"
    return "SPOT"


def compact_json(payload: dict[str, Any]) -> str:
    """Serialize a request body exactly once; the same string is signed and sent."""
    return json.dumps(payload, separators=(",", ":"))


class OKXClient:
    """Thin async wrapper over the OKX v5 REST API.

    Transport failures (including timeouts) raise ``NetworkError``; business
    rejections (non-zero ``code`` or ``sCode``) raise ``OrderRejected``.
    """

    def __init__(
        self,
        config: BridgeConfig,
        http_client: httpx.AsyncClient | None = None,
        signer: RequestSigner | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Bridge configuration
            http_client: Optional injected httpx client (primarily for testing)
            signer: Optional injected request signer
        """
        self.config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=config.okx_base_url,
            timeout=httpx.Timeout(config.request_timeout),
        )
        self._signer = signer or RequestSigner(
            api_key=config.okx_api_key.get_secret_value(),
            api_secret=config.okx_api_secret.get_secret_value(),
            passphrase=config.okx_api_passphrase.get_secret_value(),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> OKXClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def fetch_instrument(self, inst_id: str) -> dict[str, Any] | None:
        """Fetch the public instrument record (lotSz, minSz ...) for ``inst_id``.

        Returns:
            The first instrument record, or None if OKX knows no such instrument
        """
        params = {"instType": infer_instrument_type(inst_id), "instId": inst_id}
        data = await self._request("GET", INSTRUMENTS_PATH, params=params)
        code = str(data.get("code", ""))
        if code != SUCCESS_CODE:
            raise UpstreamLookupError(
                f"OKX instrument lookup for {inst_id} failed with code {code}: "
                f"{data.get('msg', '')}",
                payload=data,
            )
        records = data.get("data") or []
        if not isinstance(records, list) or not records:
            return None
        first = records[0]
        return first if isinstance(first, dict) else None

    async def place_order(self, intent: OrderIntent) -> OrderOutcome:
        """Submit a market entry order."""
        return await self._submit(ORDER_PATH, intent, id_field="ordId")

    async def place_algo_order(self, intent: OrderIntent) -> OrderOutcome:
        """Submit a conditional (stop-loss or take-profit) algo order."""
        return await self._submit(ALGO_ORDER_PATH, intent, id_field="algoId")

    async def _submit(self, path: str, intent: OrderIntent, *, id_field: str) -> OrderOutcome:
        body = compact_json(intent.to_payload())
        signed = self._signer.sign_request("POST", path, body)
        headers = self._signer.headers_for(signed)
        if self.config.okx_simulated_trading:
            headers["x-simulated-trading"] = "1"

        logger.info(
            f"Placing {intent.order_type.value} order: {intent.side.value} {intent.size} "
            f"{intent.inst_id} posSide={intent.position_side.value}"
        )
        if intent.trigger_price is not None:
            logger.debug(f"  trigger_price={intent.trigger_price} exit={intent.exit_kind}")

        data = await self._request("POST", path, content=signed.body, headers=headers)
        return self._to_outcome(data, id_field=id_field)

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            # httpx timeouts bound each phase; wait_for bounds the call as a whole.
            response = await asyncio.wait_for(
                self._client.request(method, path, **kwargs),
                timeout=self.config.request_timeout,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            raise NetworkError(
                f"Timed out calling OKX {method} {path} after {self.config.request_timeout}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"OKX {method} {path} failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise NetworkError(
                f"OKX {method} {path} returned non-JSON response (HTTP {response.status_code})",
                payload=response.text[:500],
            ) from exc
        if not isinstance(data, dict):
            raise NetworkError(
                f"OKX {method} {path} returned unexpected payload (HTTP {response.status_code})",
                payload=data,
            )
        return data

    @staticmethod
    def _to_outcome(data: dict[str, Any], *, id_field: str) -> OrderOutcome:
        code = str(data.get("code", ""))
        message = str(data.get("msg", "") or "")
        records = data.get("data") if isinstance(data.get("data"), list) else []
        first = records[0] if records and isinstance(records[0], dict) else {}

        rejected = [
            record
            for record in records
            if isinstance(record, dict) and str(record.get("sCode", SUCCESS_CODE)) != SUCCESS_CODE
        ]
        if code != SUCCESS_CODE or rejected:
            if rejected:
                specific_code = str(rejected[0].get("sCode"))
                specific_message = str(rejected[0].get("sMsg") or message)
            else:
                specific_code, specific_message = code, message
            raise OrderRejected(
                f"OKX rejected order with code {specific_code}: {specific_message}",
                code=specific_code,
                payload=data,
            )

        order_id = first.get(id_field)
        return OrderOutcome(
            succeeded=True,
            exchange_code=code,
            message=str(first.get("sMsg") or message) or None,
            order_id=str(order_id) if order_id else None,
            raw_response=data,
        )
