"""
Ticker-driven candidate source.

Prices every discovered triangle from a single ``fetch_tickers()`` call
and returns the resulting cycles, best rate first.
"""

import logging
from typing import Any

from pydantic import ValidationError

from triarb.core.types import (
    Cycle,
    Edge,
    ExchangeClient,
    OrderSide,
    TriangleLeg,
    TrianglePath,
)
from triarb.exchange.models import TickerData
from triarb.strategy.rate import triangle_rate
from triarb.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


class TickerCandidateSource:
    """
    Builds priced cycles from exchange tickers.

    BUY legs are priced at the best ask and SELL legs at the best bid.
    The top-of-book size is copied into the edge quantity when the
    ticker carries it; otherwise the quantity is left for the refiller.
    """

    def __init__(self, client: ExchangeClient, triangles: list[TrianglePath]) -> None:
        """
        Initialize candidate source.

        Args:
            client: Exchange client used for ticker reads.
            triangles: Triangles to price.
        """
        self._client = client
        self._triangles = triangles
        self._symbols = sorted({s for t in triangles for s in t.symbols})

    @property
    def triangle_count(self) -> int:
        return len(self._triangles)

    async def get_candidates(self) -> list[Cycle]:
        """
        Price every triangle from current tickers.

        Returns:
            Cycles with a quote on every leg, sorted by rate descending.
        """
        if not self._triangles:
            return []

        raw = await self._client.fetch_tickers(self._symbols)
        tickers = self._parse_tickers(raw)
        ts = get_timestamp_ms()

        cycles: list[Cycle] = []
        for triangle in self._triangles:
            edges = [self._price_leg(leg, tickers) for leg in triangle.legs]
            if any(edge is None for edge in edges):
                continue

            a, b, c = edges
            cycles.append(
                Cycle(
                    id=triangle.id,
                    a=a,  # type: ignore[arg-type]
                    b=b,  # type: ignore[arg-type]
                    c=c,  # type: ignore[arg-type]
                    rate=triangle_rate(a, b, c),  # type: ignore[arg-type]
                    ts=ts,
                )
            )

        cycles.sort(key=lambda cycle: cycle.rate, reverse=True)
        logger.debug(f"Priced {len(cycles)}/{len(self._triangles)} triangles")
        return cycles

    @staticmethod
    def _parse_tickers(raw: dict[str, Any]) -> dict[str, TickerData]:
        """Parse ticker dicts, dropping malformed entries."""
        tickers: dict[str, TickerData] = {}
        for symbol, entry in raw.items():
            try:
                ticker = TickerData.model_validate({"symbol": symbol, **entry})
            except (ValidationError, TypeError) as e:
                logger.debug(f"Skipping malformed ticker {symbol}: {e}")
                continue
            if ticker.has_quotes:
                tickers[symbol] = ticker
        return tickers

    @staticmethod
    def _price_leg(leg: TriangleLeg, tickers: dict[str, TickerData]) -> Edge | None:
        """Build a priced Edge for a leg, None when the pair has no quote."""
        ticker = tickers.get(leg.symbol)
        if ticker is None:
            return None

        if leg.side == OrderSide.BUY:
            price, size = ticker.ask, ticker.ask_volume
        else:
            price, size = ticker.bid, ticker.bid_volume

        return Edge(
            pair=leg.symbol,
            side=leg.side,
            price=price,  # type: ignore[arg-type]
            coin_from=leg.from_asset,
            coin_to=leg.to_asset,
            quantity=size or None,
        )
