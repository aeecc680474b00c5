"""
Mock reference price source for testing.
"""

from decimal import Decimal

from triarb.utils.math import ONE, to_decimal


class StaticPriceSource:
    """
    Serves fixed ``ASSET/USD`` prices.

    Stablecoin quotes are 1; unknown assets are None, as with the real
    client when a lookup fails.
    """

    def __init__(self, prices: dict[str, object] | None = None) -> None:
        self._prices = {k: to_decimal(v) for k, v in (prices or {}).items()}
        self.requests: list[str] = []

    async def price(self, pair: str) -> Decimal | None:
        self.requests.append(pair)
        if pair in ("USDT/USD", "USD/USD"):
            return ONE
        return self._prices.get(pair)
