"""
Trade sizing for a confirmed cycle.

The admissible amount for the first edge is bounded by the scarcest
resource anywhere in the loop: edge a's own book size, what edge b and
edge c can absorb once expressed in the base asset, and the free
balance.
"""

import logging
from decimal import Decimal

from triarb.config.constants import MIN_COST_HEADROOM
from triarb.core.types import Cycle, OrderSide
from triarb.strategy.rate import convert, convert_amount
from triarb.utils.math import quantize


logger = logging.getLogger(__name__)


def min_trade_amount(cycle: Cycle, min_cost: Decimal) -> Decimal:
    """
    Exchange minimum for edge ``a`` in the base asset, with headroom.

    ``min_cost`` is denominated in the pair's quote. On a buy edge the
    quote is the base asset, on a sell edge it is converted back through
    the edge price.

    Args:
        cycle: Cycle to trade.
        min_cost: Minimum order cost reported by the exchange.

    Returns:
        Minimum base-asset amount to commit on edge ``a``.
    """
    a = cycle.a
    if a.side == OrderSide.BUY:
        return min_cost * MIN_COST_HEADROOM
    return min_cost / a.price * MIN_COST_HEADROOM


def base_trade_amount(cycle: Cycle, free_amount: Decimal, min_amount: Decimal) -> Decimal:
    """
    Maximum admissible trade amount for edge ``a``.

    Candidates, all in the base asset:

    - edge a: its quantity (sell) or ``quantity * price`` (buy)
    - edge b: its quantity converted back through edges b and a
    - edge c: its quantity converted to the base asset
    - the free balance

    Args:
        cycle: Cycle with quantities on every edge.
        free_amount: Spendable free balance of the base asset.
        min_amount: Exchange minimum in the base asset, logged only.

    Returns:
        Smallest candidate; for a buy edge ``a`` it is expressed in the
        destination asset of ``a`` (divided by its price).

    Raises:
        ValueError: If an edge has no quantity.
    """
    a, b, c = cycle.edges
    if a.quantity is None or b.quantity is None or c.quantity is None:
        raise ValueError(f"Cycle {cycle.id} has edges without quantity")

    a_amount = a.quantity if a.side == OrderSide.SELL else quantize(a.quantity * a.price)
    b_amount = convert_amount(a.price, convert_amount(b.price, b.quantity, b.side), a.side)
    c_amount = convert(c.side, c.price, c.quantity)

    smallest = min(a_amount, b_amount, c_amount, free_amount)
    logger.info(
        f"Sizing {cycle.id}: a={a_amount} b={b_amount} c={c_amount} "
        f"free={free_amount} min={min_amount} -> {smallest} {a.coin_from}"
    )

    if a.side == OrderSide.BUY:
        return smallest / a.price
    return smallest
