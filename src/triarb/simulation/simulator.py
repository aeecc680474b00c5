"""
Feasibility simulation of a ranked cycle.

Walks the three edges with the exchange's precision, minimum cost and
maker fee to confirm that a cycle is still profitable once amounts are
truncated to what the exchange accepts.
"""

import logging
from decimal import Decimal

from triarb.config.constants import DEFAULT_MAKER_FEE, RATE_PLACES
from triarb.core.types import (
    BalanceSnapshot,
    Cycle,
    Edge,
    OrderSide,
    PairInfo,
    TradeEdge,
    TradeTriangle,
)
from triarb.market.catalog import MarketCatalog
from triarb.strategy.rate import convert
from triarb.strategy.sizer import base_trade_amount, min_trade_amount
from triarb.utils.math import HUNDRED, quantize
from triarb.utils.time import LatencyTimer, get_timestamp_ms


logger = logging.getLogger(__name__)


class SimulationFailure(Exception):
    """
    Cycle cannot be evaluated on this pass.

    Distinct from an unprofitable result, which is reported as a
    TradeTriangle with ``profit <= 0``.
    """

    def __init__(self, cycle_id: str, reason: str) -> None:
        super().__init__(f"{cycle_id}: {reason}")
        self.cycle_id = cycle_id
        self.reason = reason


class FeasibilitySimulator:
    """
    Simulates a full A -> B -> C -> A chain.

    Per edge the source amount is truncated (price precision for BUY,
    amount precision for SELL), the maker fee is computed in the
    destination asset, and the converted output becomes the next edge's
    input. The result depends only on its inputs.
    """

    def __init__(
        self,
        catalog: MarketCatalog,
        exchange_id: str,
        default_maker: Decimal = DEFAULT_MAKER_FEE,
    ) -> None:
        """
        Initialize simulator.

        Args:
            catalog: Pair precision, limit and fee metadata.
            exchange_id: Exchange recorded on results.
            default_maker: Fee rate used when a pair publishes none.
        """
        self._catalog = catalog
        self._exchange_id = exchange_id
        self._default_maker = default_maker

    def simulate(self, cycle: Cycle, snapshot: BalanceSnapshot) -> TradeTriangle:
        """
        Simulate a cycle against the balance snapshot.

        Args:
            cycle: Cycle with quantities on every edge.
            snapshot: Balance snapshot of the current scan.

        Returns:
            TradeTriangle; ``rate``, ``ts`` and ``id`` are only set when
            the simulated profit is positive.

        Raises:
            SimulationFailure: If the cycle cannot be evaluated.
        """
        coin = cycle.base_coin
        result = TradeTriangle(coin=coin, exchange=self._exchange_id)

        pairs = [self._pair_info(cycle, edge) for edge in cycle.edges]

        if coin not in snapshot:
            raise SimulationFailure(cycle.id, f"no balance of {coin}")
        free = snapshot.free(coin)
        if free <= 0:
            raise SimulationFailure(cycle.id, f"zero free balance of {coin}")

        min_cost = pairs[0].min_order_cost(cycle.a.price)
        if not min_cost:
            raise SimulationFailure(cycle.id, f"no minimum cost for {cycle.a.pair}")
        min_amount = min_trade_amount(cycle, min_cost)

        if cycle.a.side == OrderSide.SELL and free <= min_amount:
            raise SimulationFailure(
                cycle.id, f"free {free} {coin} below minimum trade amount {min_amount}"
            )

        try:
            sized = base_trade_amount(cycle, free, min_amount)
        except ValueError as e:
            raise SimulationFailure(cycle.id, str(e)) from e

        # a BUY first edge is sized in its destination asset
        source = sized * cycle.a.price if cycle.a.side == OrderSide.BUY else sized

        trade_edges: list[TradeEdge] = []
        for edge, info in zip(cycle.edges, pairs, strict=True):
            trade_edge = self._trade_edge(cycle, edge, info, source)
            trade_edges.append(trade_edge)
            source = quantize(trade_edge.output)

        result.a, result.b, result.c = trade_edges
        result.before = result.a.amount
        result.after = quantize(convert(result.c.side, result.c.price, result.c.amount))
        result.profit = result.after - result.before

        if result.profit <= 0:
            logger.info(f"Simulation of {cycle.id} not profitable, profit {result.profit} {coin}")
            return result

        result.id = cycle.id
        result.rate = f"{quantize(result.profit / result.before * HUNDRED, RATE_PLACES)}%"
        result.ts = get_timestamp_ms()
        logger.info(
            f"Simulated {cycle.id}: before {result.before} after {result.after} "
            f"profit {result.profit} {coin} ({result.rate})"
        )
        return result

    def _pair_info(self, cycle: Cycle, edge: Edge) -> PairInfo:
        info = self._catalog.get(edge.pair)
        if info is None:
            raise SimulationFailure(cycle.id, f"no market metadata for {edge.pair}")
        return info

    def _trade_edge(
        self,
        cycle: Cycle,
        edge: Edge,
        info: PairInfo,
        source_amount: Decimal,
    ) -> TradeEdge:
        """Simulate one edge spending ``source_amount`` of its source asset."""
        with LatencyTimer() as timer:
            amount = info.truncate_source(edge.side, source_amount)
            if amount <= 0:
                raise SimulationFailure(
                    cycle.id, f"amount {source_amount} rounds to zero on {edge.pair}"
                )

            maker = info.maker if info.maker and info.maker > 0 else self._default_maker
            fee = quantize(convert(edge.side, edge.price, amount) * maker)

        return TradeEdge(
            pair=edge.pair,
            side=edge.side,
            price=edge.price,
            amount=amount,
            fee=fee,
            fee_asset=edge.coin_to,
            elapsed_us=timer.latency_us,
        )
