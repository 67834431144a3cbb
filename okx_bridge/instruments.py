"""In-memory cache of instrument lot size / minimum size constraints."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from loguru import logger

from okx_bridge.core.constants import DEFAULT_INSTRUMENT_CACHE_TTL_SECONDS
from okx_bridge.errors import UpstreamLookupError
from okx_bridge.models import InstrumentConstraints

InstrumentLookup = Callable[[str], Awaitable[Mapping[str, Any] | None]]


def _parse_decimal(record: Mapping[str, Any], key: str, inst_id: str) -> Decimal:
    raw = record.get(key)
    if raw is None or raw == "":
        raise UpstreamLookupError(f"Instrument {inst_id} metadata is missing {key}", payload=record)
    try:
        value = Decimal(str(raw))
    except InvalidOperation as exc:
        raise UpstreamLookupError(
            f"Instrument {inst_id} metadata has non-numeric {key}={raw!r}", payload=record
        ) from exc
    if not value.is_finite():
        raise UpstreamLookupError(
            f"Instrument {inst_id} metadata has invalid {key}={raw!r}", payload=record
        )
    return value


class InstrumentCache:
    """Per-instrument lot constraints with lazy TTL expiry.

    Concurrent callers asking for the same missing or stale instrument share a
    single in-flight lookup. Unrelated instruments never wait on each other.
    Entries are only replaced, never evicted.
    """

    def __init__(
        self,
        lookup: InstrumentLookup,
        *,
        ttl_seconds: float = DEFAULT_INSTRUMENT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._lookup = lookup
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, InstrumentConstraints] = {}
        self._inflight: dict[str, asyncio.Task[InstrumentConstraints]] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def peek(self, inst_id: str) -> InstrumentConstraints | None:
        """Return the cached record without refreshing, fresh or not."""
        return self._entries.get(inst_id)

    def invalidate(self, inst_id: str | None = None) -> None:
        """Drop one cached record, or all of them."""
        if inst_id is None:
            self._entries.clear()
        else:
            self._entries.pop(inst_id, None)

    def _is_fresh(self, entry: InstrumentConstraints) -> bool:
        return (self._clock() - entry.fetched_at) < self._ttl_seconds

    async def get_constraints(self, inst_id: str) -> InstrumentConstraints:
        """Return fresh constraints for ``inst_id``, refreshing if needed.

        Raises:
            UpstreamLookupError: If the lookup fails or returns unusable data
        """
        entry = self._entries.get(inst_id)
        if entry is not None and self._is_fresh(entry):
            return entry

        task = self._inflight.get(inst_id)
        if task is None or task.done():
            task = asyncio.get_running_loop().create_task(self._refresh(inst_id))
            self._inflight[inst_id] = task
            task.add_done_callback(lambda done, key=inst_id: self._forget(key, done))
        else:
            logger.debug("Joining in-flight instrument lookup for {}", inst_id)

        # Shielded so one cancelled waiter does not abort the shared lookup.
        return await asyncio.shield(task)

    def _forget(self, inst_id: str, task: asyncio.Task[InstrumentConstraints]) -> None:
        if self._inflight.get(inst_id) is task:
            del self._inflight[inst_id]

    async def _refresh(self, inst_id: str) -> InstrumentConstraints:
        logger.debug("Fetching instrument constraints for {}", inst_id)
        try:
            record = await self._lookup(inst_id)
        except UpstreamLookupError:
            raise
        except Exception as exc:
            raise UpstreamLookupError(
                f"Instrument lookup failed for {inst_id}: {exc}",
                payload=getattr(exc, "payload", None),
            ) from exc

        if not record:
            raise UpstreamLookupError(f"Instrument {inst_id} not found")
        if not isinstance(record, Mapping):
            raise UpstreamLookupError(
                f"Instrument lookup for {inst_id} returned {type(record).__name__}, "
                "expected an object",
                payload=record,
            )

        lot_size = _parse_decimal(record, "lotSz", inst_id)
        min_size = _parse_decimal(record, "minSz", inst_id)
        if lot_size <= 0:
            raise UpstreamLookupError(
                f"Instrument {inst_id} has non-positive lot size {lot_size}", payload=record
            )
        if min_size < 0:
            raise UpstreamLookupError(
                f"Instrument {inst_id} has negative minimum size {min_size}", payload=record
            )

        entry = InstrumentConstraints(
            inst_id=inst_id,
            lot_size=lot_size,
            min_size=min_size,
            fetched_at=self._clock(),
        )
        self._entries[inst_id] = entry
        logger.info(
            "Cached constraints for {}: lot_size={} min_size={}",
            inst_id,
            lot_size,
            min_size,
        )
        return entry
