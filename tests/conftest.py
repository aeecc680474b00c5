"""
Pytest configuration and shared fixtures.

Provides reusable test fixtures for all test modules. The market set is
BTC/USDT, ETH/BTC and ETH/USDT, which closes the USDT -> BTC -> ETH ->
USDT loop and its reverse.
"""

from typing import Any

import pytest

from tests.mocks import MockExchange, StaticPriceSource, make_cycle, make_market
from triarb.config.settings import Settings
from triarb.core.types import BalanceSnapshot, Cycle
from triarb.market.catalog import MarketCatalog


# =============================================================================
# Market Fixtures
# =============================================================================


@pytest.fixture
def markets() -> dict[str, dict[str, Any]]:
    """Three markets closing one triangle."""
    return {
        "BTC/USDT": make_market("BTC/USDT", 6, 2, min_cost=10, min_amount=0.00001),
        "ETH/BTC": make_market("ETH/BTC", 4, 6, min_cost=0.0001, min_amount=0.001),
        "ETH/USDT": make_market("ETH/USDT", 4, 2, min_cost=10, min_amount=0.0001),
    }


@pytest.fixture
def catalog(markets: dict[str, dict[str, Any]]) -> MarketCatalog:
    """Catalog loaded with the test markets."""
    catalog = MarketCatalog()
    catalog.load(markets.values())
    return catalog


@pytest.fixture
def tickers() -> dict[str, dict[str, Any]]:
    """Tickers pricing USDT -> BTC -> ETH -> USDT at about +0.476%."""
    return {
        "BTC/USDT": {"ask": 30000.0, "askVolume": 0.5, "bid": 29990.0, "bidVolume": 1.0},
        "ETH/BTC": {"ask": 0.07, "askVolume": 5.0, "bid": 0.0699, "bidVolume": 3.0},
        "ETH/USDT": {"ask": 2111.0, "askVolume": 2.0, "bid": 2110.0, "bidVolume": 4.0},
    }


@pytest.fixture
def order_books() -> dict[str, dict[str, Any]]:
    """Top-of-book levels matching the tickers."""
    return {
        "BTC/USDT": {"asks": [[30000.0, 0.5]], "bids": [[29990.0, 1.0]]},
        "ETH/BTC": {"asks": [[0.07, 5.0]], "bids": [[0.0699, 3.0]]},
        "ETH/USDT": {"asks": [[2111.0, 2.0]], "bids": [[2110.0, 4.0]]},
    }


# =============================================================================
# Cycle Fixtures
# =============================================================================


@pytest.fixture
def cycle() -> Cycle:
    """Profitable cycle without quantities."""
    return make_cycle()


@pytest.fixture
def filled_cycle() -> Cycle:
    """Profitable cycle with top-of-book quantities."""
    return make_cycle(quantities=("0.5", "5", "4"))


# =============================================================================
# Balance Fixtures
# =============================================================================


@pytest.fixture
def snapshot() -> BalanceSnapshot:
    """1000 USDT and 0.1 BTC free."""
    return BalanceSnapshot.from_exchange(
        {
            "info": {},
            "USDT": {"free": "1000", "used": "0", "total": "1000"},
            "BTC": {"free": "0.1", "used": "0", "total": "0.1"},
        }
    )


@pytest.fixture
def price_source() -> StaticPriceSource:
    """Reference prices for the test assets."""
    return StaticPriceSource({"BTC/USD": "30000", "ETH/USD": "2100"})


# =============================================================================
# Exchange Fixtures
# =============================================================================


@pytest.fixture
def mock_exchange(
    markets: dict[str, dict[str, Any]],
    tickers: dict[str, dict[str, Any]],
    order_books: dict[str, dict[str, Any]],
) -> MockExchange:
    """Mock exchange with markets, tickers, books and balances."""
    return MockExchange(
        markets=markets,
        tickers=tickers,
        order_books=order_books,
        balances={"USDT": "1000", "BTC": "0.1", "ETH": "1"},
    )


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings with credentials, dry run and no delays."""
    return Settings(
        _env_file=None,
        exchange_id="binance",
        exchange_api_key="test_api_key",
        exchange_api_secret="test_api_secret",
        base_coins=["USDT"],
        dry_run=True,
        order_retry_delay=0.0,
        scan_interval=0.1,
    )
