"""
Cycle rate calculation and asset-unit conversion.

Every conversion between the assets of an edge in the engine goes
through ``convert`` or its inverse ``convert_amount``:

- SELL: we spend base to get quote -> multiply by price
- BUY: we spend quote to get base -> divide by price
"""

from decimal import Decimal

from triarb.core.types import Edge, OrderSide
from triarb.utils.math import HUNDRED, ONE, quantize


def convert(side: OrderSide, price: Decimal, amount: Decimal) -> Decimal:
    """
    Convert a source-asset amount into the destination asset of an edge.

    Args:
        side: Edge side.
        price: Edge price (quote per base).
        amount: Amount of the edge's source asset.

    Returns:
        Amount of the edge's destination asset.
    """
    if side == OrderSide.SELL:
        return amount * price
    return amount / price


def convert_amount(price: Decimal, cost: Decimal, side: OrderSide) -> Decimal:
    """
    Source-asset amount needed to obtain ``cost`` of the destination asset.

    Inverse of :func:`convert`.
    """
    if side == OrderSide.BUY:
        return cost * price
    return cost / price


def triangle_rate(a: Edge, b: Edge, c: Edge) -> Decimal:
    """
    Calculate the percentage rate of a full A -> B -> C -> A loop.

    Starting with one unit of the base asset, each leg is applied in
    order; the result is ``(final - 1) * 100`` to 8 fractional digits.

    Example:
        All-sell cycle with prices p1, p2, p3 gives
        ``(p1 * p2 * p3 - 1) * 100``.
    """
    result = ONE
    for edge in (a, b, c):
        result = convert(edge.side, edge.price, result)
    return quantize((result - ONE) * HUNDRED)
