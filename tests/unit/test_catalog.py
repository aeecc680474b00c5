"""
Unit tests for MarketCatalog and the exchange market models.
"""

from decimal import Decimal
from typing import Any

import pytest
from ccxt.base.decimal_to_precision import TICK_SIZE

from tests.mocks import MockExchange, make_market
from triarb.core.types import OrderSide, PairInfo
from triarb.exchange.models import MarketData, TickerData
from triarb.market.catalog import MarketCatalog


class TestMarketCatalog:
    """Tests for MarketCatalog."""

    def test_load_markets(self, catalog: MarketCatalog) -> None:
        assert len(catalog) == 3
        assert "ETH/BTC" in catalog
        assert catalog.get_assets() == {"BTC", "ETH", "USDT"}

    def test_pair_info_fields(self, catalog: MarketCatalog) -> None:
        info = catalog.get("BTC/USDT")

        assert info == PairInfo(
            symbol="BTC/USDT",
            base="BTC",
            quote="USDT",
            amount_places=6,
            price_places=2,
            min_amount=Decimal("0.00001"),
            min_price=None,
            min_cost=Decimal("10"),
            maker=Decimal("0.001"),
        )

    def test_unknown_symbol(self, catalog: MarketCatalog) -> None:
        assert catalog.get("DOGE/USDT") is None

    def test_symbols_for_asset(self, catalog: MarketCatalog) -> None:
        assert sorted(catalog.symbols_for_asset("BTC")) == ["BTC/USDT", "ETH/BTC"]
        assert catalog.symbols_for_asset("DOGE") == []

    def test_skips_inactive_markets(self) -> None:
        catalog = MarketCatalog()

        count = catalog.load(
            [make_market("BTC/USDT", 6, 2), make_market("LUNA/USDT", 2, 4, active=False)]
        )

        assert count == 1
        assert "LUNA/USDT" not in catalog

    def test_skips_non_spot_and_malformed(self) -> None:
        futures = make_market("BTC/USDT:USDT", 3, 1)
        futures["spot"] = False
        catalog = MarketCatalog()

        catalog.load([futures, {"symbol": "BROKEN"}])

        assert len(catalog) == 0

    def test_tick_size_precision(self) -> None:
        """Test tick sizes are converted to decimal places."""
        market = make_market("BTC/USDT", 0, 0)
        market["precision"] = {"amount": 0.00001, "price": 0.01}
        catalog = MarketCatalog()

        catalog.load([market], tick_size=True)

        info = catalog.get("BTC/USDT")
        assert info.amount_places == 5
        assert info.price_places == 2

    def test_zero_decimal_places(self) -> None:
        """Test whole-unit pairs keep zero places."""
        catalog = MarketCatalog()

        catalog.load([make_market("DOGE/USDT", 0, 5)])

        info = catalog.get("DOGE/USDT")
        assert info.amount_places == 0
        assert info.price_places == 5
        assert info.amount_step is None

    def test_non_decimal_tick_keeps_step(self) -> None:
        market = make_market("BTC/USDT", 0, 0)
        market["precision"] = {"amount": 0.5, "price": 0.25}
        catalog = MarketCatalog()

        catalog.load([market], tick_size=True)

        info = catalog.get("BTC/USDT")
        assert info.amount_places == 1
        assert info.price_places == 2
        assert info.amount_step == Decimal("0.5")
        assert info.price_step == Decimal("0.25")

    def test_zero_tick_uses_default(self) -> None:
        market = make_market("BTC/USDT", 0, 0)
        market["precision"] = {"amount": 0, "price": 10}
        catalog = MarketCatalog()

        catalog.load([market], tick_size=True)

        info = catalog.get("BTC/USDT")
        assert info.amount_places == 8
        assert info.amount_step is None
        assert info.price_places == 0

    def test_missing_precision_uses_default(self) -> None:
        market = make_market("BTC/USDT", 0, 0)
        market["precision"] = {"amount": None, "price": None}
        catalog = MarketCatalog()

        catalog.load([market])

        assert catalog.get("BTC/USDT").amount_places == 8

    @pytest.mark.asyncio
    async def test_from_exchange_decimal_places(self, mock_exchange: MockExchange) -> None:
        catalog = await MarketCatalog.from_exchange(mock_exchange)

        assert len(catalog) == 3
        assert catalog.get("ETH/BTC").price_places == 6

    @pytest.mark.asyncio
    async def test_from_exchange_tick_size(self, markets: dict[str, dict[str, Any]]) -> None:
        for market in markets.values():
            market["precision"] = {"amount": 0.0001, "price": 0.01}
        exchange = MockExchange(markets=markets)
        exchange.precisionMode = TICK_SIZE

        catalog = await MarketCatalog.from_exchange(exchange)

        assert catalog.get("ETH/USDT").amount_places == 4
        assert catalog.get("ETH/USDT").price_places == 2


class TestPairInfo:
    """Tests for minimum order cost fallbacks."""

    def test_min_cost_preferred(self) -> None:
        info = PairInfo(
            "BTC/USDT", "BTC", "USDT", 6, 2, Decimal("0.001"), Decimal("0.01"), Decimal("10")
        )

        assert info.min_order_cost(Decimal("30000")) == Decimal("10")

    def test_falls_back_to_min_price(self) -> None:
        info = PairInfo("BTC/USDT", "BTC", "USDT", 6, 2, Decimal("0.001"), Decimal("0.01"), None)

        assert info.min_order_cost(Decimal("30000")) == Decimal("0.01")

    def test_falls_back_to_min_amount(self) -> None:
        info = PairInfo("BTC/USDT", "BTC", "USDT", 6, 2, Decimal("0.001"))

        assert info.min_order_cost(Decimal("30000")) == Decimal("30")

    def test_no_limits(self) -> None:
        info = PairInfo("BTC/USDT", "BTC", "USDT", 6, 2)

        assert info.min_order_cost(Decimal("30000")) is None

    @pytest.mark.parametrize(
        ("side", "amount", "expected"),
        [
            (OrderSide.SELL, "12.7", "12"),
            (OrderSide.BUY, "0.123456789", "0.12345"),
        ],
    )
    def test_truncate_source_places(self, side: OrderSide, amount: str, expected: str) -> None:
        info = PairInfo("DOGE/USDT", "DOGE", "USDT", 0, 5)

        assert info.truncate_source(side, Decimal(amount)) == Decimal(expected)

    def test_truncate_source_tick_grid(self) -> None:
        info = PairInfo(
            "BTC/USDT",
            "BTC",
            "USDT",
            1,
            2,
            amount_step=Decimal("0.5"),
            price_step=Decimal("0.25"),
        )

        assert info.truncate_source(OrderSide.SELL, Decimal("7.9")) == Decimal("7.5")
        assert info.truncate_source(OrderSide.BUY, Decimal("10.49")) == Decimal("10.25")


class TestModels:
    """Tests for exchange response models."""

    def test_market_numbers_are_decimal(self) -> None:
        market = MarketData.model_validate(make_market("ETH/BTC", 4, 6, min_cost=0.0001))

        assert market.limits.cost.min == Decimal("0.0001")
        assert market.maker == Decimal("0.001")

    def test_market_null_limits(self) -> None:
        raw = make_market("ETH/BTC", 4, 6)
        raw["limits"] = {"amount": None, "cost": None}

        market = MarketData.model_validate(raw)

        assert market.limits.amount.min is None
        assert market.limits.price.min is None

    def test_ticker_quotes(self) -> None:
        ticker = TickerData.model_validate(
            {"symbol": "ETH/BTC", "ask": 0.07, "askVolume": 5, "bid": 0.0699, "bidVolume": None}
        )

        assert ticker.ask == Decimal("0.07")
        assert ticker.ask_volume == Decimal("5")
        assert ticker.bid_volume is None
        assert ticker.has_quotes

    def test_ticker_without_bid(self) -> None:
        ticker = TickerData.model_validate({"symbol": "ETH/BTC", "ask": 0.07, "bid": None})

        assert not ticker.has_quotes
