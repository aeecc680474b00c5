"""Mock implementations for testing."""

from tests.mocks.exchange import MockExchange
from tests.mocks.factories import make_cycle, make_market, make_sell_first_cycle
from tests.mocks.prices import StaticPriceSource
from tests.mocks.stream import TickerPushServer


__all__ = [
    "MockExchange",
    "StaticPriceSource",
    "TickerPushServer",
    "make_cycle",
    "make_market",
    "make_sell_first_cycle",
]
