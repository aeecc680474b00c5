"""
Market metadata catalog.

Loads per-pair precision, limits and maker fees from the exchange's
``load_markets()`` and serves them to discovery and simulation.
"""

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from ccxt.base.decimal_to_precision import TICK_SIZE
from pydantic import ValidationError

from triarb.config.constants import DEFAULT_AMOUNT_PRECISION
from triarb.core.types import ExchangeClient, PairInfo
from triarb.exchange.models import MarketData
from triarb.utils.math import precision_places, to_decimal


logger = logging.getLogger(__name__)


def _tick(value: object) -> Decimal | None:
    step = to_decimal(value)
    return step if step is not None and step > 0 else None


class MarketCatalog:
    """
    Pair metadata indexed by unified symbol (``BASE/QUOTE``).

    Responsibilities:
    - Parsing exchange markets into PairInfo
    - Skipping inactive and non-spot markets
    - Lookups by symbol and by asset
    """

    __slots__ = ("_pairs", "_by_asset")

    def __init__(self) -> None:
        """Initialize empty catalog."""
        self._pairs: dict[str, PairInfo] = {}
        self._by_asset: dict[str, list[str]] = {}

    @classmethod
    async def from_exchange(cls, client: ExchangeClient) -> "MarketCatalog":
        """
        Load a catalog from an exchange client.

        Args:
            client: Exchange client.

        Returns:
            Populated catalog.
        """
        markets = await client.load_markets()
        tick_size = getattr(client, "precisionMode", None) == TICK_SIZE

        catalog = cls()
        count = catalog.load(markets.values(), tick_size=tick_size)
        logger.info(f"Loaded {count} markets from {client.id}")
        return catalog

    def load(self, markets: Iterable[Mapping[str, Any]], tick_size: bool = False) -> int:
        """
        Load markets in ccxt's unified structure.

        Args:
            markets: Market dicts.
            tick_size: Whether precision values are tick sizes.

        Returns:
            Number of pairs loaded.
        """
        for raw in markets:
            try:
                market = MarketData.model_validate(raw)
            except ValidationError as e:
                logger.debug(f"Skipping malformed market {raw.get('symbol')}: {e}")
                continue

            if not market.is_tradeable:
                continue

            self._add(self._convert(market, tick_size))

        return len(self._pairs)

    @staticmethod
    def _convert(market: MarketData, tick_size: bool) -> PairInfo:
        """Convert a market model to PairInfo."""
        return PairInfo(
            symbol=market.symbol,
            base=market.base,
            quote=market.quote,
            amount_places=precision_places(
                market.precision.amount, tick_size, DEFAULT_AMOUNT_PRECISION
            ),
            price_places=precision_places(
                market.precision.price, tick_size, DEFAULT_AMOUNT_PRECISION
            ),
            min_amount=market.limits.amount.min,
            min_price=market.limits.price.min,
            min_cost=market.limits.cost.min,
            maker=market.maker,
            amount_step=_tick(market.precision.amount) if tick_size else None,
            price_step=_tick(market.precision.price) if tick_size else None,
        )

    def _add(self, info: PairInfo) -> None:
        """Add pair to internal indexes."""
        self._pairs[info.symbol] = info
        self._by_asset.setdefault(info.base, []).append(info.symbol)
        self._by_asset.setdefault(info.quote, []).append(info.symbol)

    def get(self, symbol: str) -> PairInfo | None:
        """
        Get pair info by unified symbol.

        Args:
            symbol: Trading pair (e.g., "ETH/BTC").

        Returns:
            PairInfo or None.
        """
        return self._pairs.get(symbol)

    def get_all(self) -> dict[str, PairInfo]:
        """Get all pairs."""
        return dict(self._pairs)

    def symbols_for_asset(self, asset: str) -> list[str]:
        """Get every pair in which the asset is base or quote."""
        return self._by_asset.get(asset, [])

    def get_assets(self) -> set[str]:
        return set(self._by_asset)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._pairs

    def __len__(self) -> int:
        return len(self._pairs)
