"""Order size normalization against instrument lot constraints."""

from __future__ import annotations

from decimal import Decimal, localcontext


def _snap(value: Decimal, lot_size: Decimal, *, round_up: bool = False) -> Decimal:
    """Snap a non-negative value onto the lot grid without intermediate rounding."""
    with localcontext() as ctx:
        # Enough digits for the whole lot count and its product with lot_size.
        ctx.prec = max(
            ctx.prec,
            value.adjusted() - lot_size.adjusted() + len(lot_size.as_tuple().digits) + 2,
        )
        units, remainder = divmod(value, lot_size)
        if round_up and remainder:
            units += 1
        return units * lot_size


def normalize_quantity(requested: Decimal, lot_size: Decimal, min_size: Decimal) -> Decimal:
    """Map a requested size onto an exchange-legal size.

    The size is floored to a whole number of lots so the bridge never sends
    more than requested. When that falls below the exchange minimum it is
    raised to the smallest lot multiple that is at least ``min_size``.

    Args:
        requested: Requested order size
        lot_size: Smallest size increment (must be positive)
        min_size: Smallest accepted order size

    Returns:
        Normalized size as a Decimal on the lot grid

    Raises:
        ValueError: If lot_size is not positive
    """
    if lot_size <= 0:
        raise ValueError(f"lot_size must be positive, got {lot_size}")

    legal = _snap(requested, lot_size)
    if legal < min_size or legal <= 0:
        # minSz is not guaranteed to sit on the lot grid; round it up onto it.
        legal = max(_snap(min_size, lot_size, round_up=True), lot_size)
    return legal


def format_size(size: Decimal) -> str:
    """Render a size for the wire: plain notation, no trailing zeros."""
    with localcontext() as ctx:
        # normalize() rounds to context precision; keep every digit of the size.
        ctx.prec = max(ctx.prec, len(size.as_tuple().digits))
        text = format(size.normalize(), "f")
    return text if text != "-0" else "0"
