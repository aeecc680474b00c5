"""
Candidate ranking.

Filters a batch of priced cycles against the current balance snapshot,
the exchange's fee tiers and blacklist, and a minimum notional value in
USD. Survivors become ``Rank`` entries in the order they were received;
callers that want "best first" must sort candidates by rate descending
before ranking.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from triarb.config.constants import (
    DEFAULT_MIN_PROFIT_IN_USD,
    DEFAULT_MIN_RATE_PROFIT,
    REFERENCE_FIAT,
)
from triarb.config.settings import ExchangeProfile
from triarb.core.types import BalanceSnapshot, Cycle, Edge, OrderSide, PriceSource, Rank
from triarb.strategy.refill import QuantityRefiller
from triarb.utils.math import ZERO


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RankerConfig:
    """Thresholds applied by the ranker."""

    min_rate_profit: Decimal = Decimal(str(DEFAULT_MIN_RATE_PROFIT))
    min_profit_in_usd: Decimal = Decimal(str(DEFAULT_MIN_PROFIT_IN_USD))
    profiles: dict[str, ExchangeProfile] = field(default_factory=dict)

    def profile_for(self, exchange_id: str) -> ExchangeProfile:
        """Profile of an exchange, zero fees and no blacklist when unknown."""
        return self.profiles.get(exchange_id) or ExchangeProfile()


@dataclass
class RankerStats:
    """Skip counters for one ranker instance."""

    evaluated: int = 0
    ranked: int = 0
    skipped_rate: int = 0
    skipped_balance: int = 0
    skipped_profit: int = 0
    skipped_blacklist: int = 0
    skipped_book: int = 0
    skipped_notional: int = 0
    errors: int = 0


class CandidateRanker:
    """
    Scores and filters candidate cycles.

    For every cycle, in the order received:

    1. rate must be positive
    2. fee-adjusted profit rates are derived from the exchange's tiers
    3. the asset spent or received on edge ``a`` must be in the snapshot
    4. the primary profit tier must reach ``min_rate_profit``
    5. no edge may start from a blacklisted asset
    6. quantities are refilled from the order book
    7. each edge's USD notional is computed from reference prices
    8. the thinnest notional must reach ``min_profit_in_usd``

    A failure while evaluating one cycle is logged and only that cycle
    is skipped.
    """

    def __init__(
        self,
        refiller: QuantityRefiller,
        price_source: PriceSource,
        config: RankerConfig | None = None,
    ) -> None:
        """
        Initialize ranker.

        Args:
            refiller: Order-book quantity refiller.
            price_source: Reference USD price lookup.
            config: Thresholds and per-exchange profiles.
        """
        self._refiller = refiller
        self._prices = price_source
        self._config = config or RankerConfig()
        self._stats = RankerStats()

    @property
    def config(self) -> RankerConfig:
        return self._config

    @property
    def stats(self) -> RankerStats:
        return self._stats

    async def rank(
        self,
        snapshot: BalanceSnapshot,
        cycles: Iterable[Cycle],
        exchange_id: str,
    ) -> list[Rank]:
        """
        Rank a batch of cycles.

        Args:
            snapshot: Balance snapshot of this scan.
            cycles: Candidates, ideally sorted by rate descending.
            exchange_id: Exchange the candidates were priced on.

        Returns:
            Ranks of surviving cycles, input order preserved.
        """
        profile = self._config.profile_for(exchange_id)
        ranks: list[Rank] = []

        for cycle in cycles:
            self._stats.evaluated += 1
            try:
                rank = await self._evaluate(snapshot, cycle, profile)
            except Exception as e:
                self._stats.errors += 1
                logger.error(f"Failed to evaluate {cycle.id}: {e}", exc_info=True)
                continue

            if rank is not None:
                self._stats.ranked += 1
                ranks.append(rank)

        logger.info(f"Ranks after filtering: {len(ranks)}")
        return ranks

    async def _evaluate(
        self,
        snapshot: BalanceSnapshot,
        cycle: Cycle,
        profile: ExchangeProfile,
    ) -> Rank | None:
        """Run every filter on one cycle, returning its Rank or None."""
        rate = cycle.rate
        if rate <= 0:
            self._stats.skipped_rate += 1
            return None

        fee = tuple(rate * tier for tier in profile.fee_tiers)
        profit_rate = tuple(rate - f for f in fee)

        a = cycle.a
        held = a.coin_from if a.side == OrderSide.BUY else a.coin_to
        if held not in snapshot:
            self._stats.skipped_balance += 1
            logger.info(f"Skip {cycle.id} (no balance of {held}), rate {rate}")
            return None

        if profit_rate[0] < self._config.min_rate_profit:
            self._stats.skipped_profit += 1
            logger.info(f"Skip {cycle.id} (profit rate {profit_rate[0]} too low)")
            return None

        if any(edge.coin_from in profile.blacklist for edge in cycle.edges):
            self._stats.skipped_blacklist += 1
            logger.info(f"Skip {cycle.id} (blacklisted asset)")
            return None

        if not await self._refiller.refill(cycle):
            self._stats.skipped_book += 1
            logger.info(f"Skip {cycle.id} (order book level missing)")
            return None

        notionals = await asyncio.gather(*(self._notional(edge) for edge in cycle.edges))
        for edge, notional in zip(cycle.edges, notionals, strict=True):
            edge.amount_in_usd = notional

        if any(n is None for n in notionals):
            min_amount = ZERO
        else:
            min_amount = min(notionals)  # type: ignore[type-var]
        cycle.min_amount_in_usd = min_amount

        if not min_amount or min_amount < self._config.min_profit_in_usd:
            self._stats.skipped_notional += 1
            logger.info(f"Skip {cycle.id} (notional {min_amount} {REFERENCE_FIAT} too low)")
            return None

        logger.info(f"Ranked {cycle.id}, rate {rate}, notional {min_amount} {REFERENCE_FIAT}")
        return Rank(
            triangle=cycle,
            step_a=cycle.a.coin_from,
            step_b=cycle.b.coin_from,
            step_c=cycle.c.coin_from,
            rate=rate,
            fee=fee,
            profit_rate=profit_rate,
            ts=cycle.ts,
        )

    async def _notional(self, edge: Edge) -> Decimal | None:
        """USD value of an edge's top-of-book size, None without a reference price."""
        if edge.quantity is None:
            return None
        price = await self._prices.price(f"{edge.quote_asset}/{REFERENCE_FIAT}")
        if price is None:
            return None
        return price * edge.quantity * edge.price
