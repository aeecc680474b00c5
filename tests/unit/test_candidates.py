"""
Unit tests for TickerCandidateSource.
"""

from decimal import Decimal
from typing import Any

import pytest

from tests.mocks import MockExchange
from triarb.core.types import OrderSide
from triarb.market.candidates import TickerCandidateSource
from triarb.market.catalog import MarketCatalog
from triarb.strategy.graph import TriangleDiscovery


class TestTickerCandidateSource:
    """Tests for ticker-priced cycles."""

    @pytest.fixture
    def source(
        self,
        catalog: MarketCatalog,
        mock_exchange: MockExchange,
    ) -> TickerCandidateSource:
        triangles = TriangleDiscovery(catalog).discover(["USDT"])
        return TickerCandidateSource(mock_exchange, triangles)

    @pytest.mark.asyncio
    async def test_prices_both_directions(self, source: TickerCandidateSource) -> None:
        candidates = await source.get_candidates()

        assert source.triangle_count == 2
        assert [c.id for c in candidates] == ["USDT-BTC-ETH", "USDT-ETH-BTC"]

    @pytest.mark.asyncio
    async def test_sorted_by_rate_descending(self, source: TickerCandidateSource) -> None:
        candidates = await source.get_candidates()

        assert candidates[0].rate == Decimal("0.47619048")
        assert candidates[1].rate < 0
        assert candidates[0].rate >= candidates[1].rate

    @pytest.mark.asyncio
    async def test_buy_at_ask_sell_at_bid(self, source: TickerCandidateSource) -> None:
        """Test each leg's price and size come from the side it trades against."""
        best = (await source.get_candidates())[0]

        assert (best.a.side, best.a.price, best.a.quantity) == (
            OrderSide.BUY,
            Decimal("30000.0"),
            Decimal("0.5"),
        )
        assert (best.b.side, best.b.price) == (OrderSide.BUY, Decimal("0.07"))
        assert (best.c.side, best.c.price, best.c.quantity) == (
            OrderSide.SELL,
            Decimal("2110.0"),
            Decimal("4.0"),
        )
        assert best.ts > 0

    @pytest.mark.asyncio
    async def test_single_ticker_request(
        self,
        source: TickerCandidateSource,
        mock_exchange: MockExchange,
    ) -> None:
        await source.get_candidates()

        assert mock_exchange.ticker_requests == [["BTC/USDT", "ETH/BTC", "ETH/USDT"]]

    @pytest.mark.asyncio
    async def test_missing_quote_drops_triangle(
        self,
        catalog: MarketCatalog,
        tickers: dict[str, dict[str, Any]],
    ) -> None:
        tickers["ETH/BTC"] = {"ask": None, "bid": 0.0699}
        exchange = MockExchange(tickers=tickers)
        source = TickerCandidateSource(exchange, TriangleDiscovery(catalog).discover(["USDT"]))

        assert await source.get_candidates() == []

    @pytest.mark.asyncio
    async def test_missing_volume_leaves_quantity_unset(
        self,
        catalog: MarketCatalog,
        tickers: dict[str, dict[str, Any]],
    ) -> None:
        del tickers["BTC/USDT"]["askVolume"]
        exchange = MockExchange(tickers=tickers)
        source = TickerCandidateSource(exchange, TriangleDiscovery(catalog).discover(["USDT"]))

        best = (await source.get_candidates())[0]

        assert best.a.quantity is None
        assert not best.has_quantities

    @pytest.mark.asyncio
    async def test_no_triangles(self, mock_exchange: MockExchange) -> None:
        source = TickerCandidateSource(mock_exchange, [])

        assert await source.get_candidates() == []
        assert mock_exchange.ticker_requests == []
